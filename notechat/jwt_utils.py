"""
JWT utilities for the notechat application.

Tokens are issued by the external identity provider; this module only
verifies them and extracts the user id. ``generate_test_token`` mints
tokens with the same secret for tests and local tooling.
"""

import logging
import time

import jwt
from django.conf import settings

logger = logging.getLogger(__name__)


class JWTManager:
    """
    JWT Manager for token generation and validation.
    """

    def _get_secret(self):
        return settings.JWT_SECRET

    def _get_algorithm(self):
        return getattr(settings, 'JWT_ALGORITHM', 'HS256')

    def _get_user_claim(self):
        return getattr(settings, 'JWT_USER_CLAIM', 'sub')

    def generate_token(self, user_id, expires_in_hours=None):
        """
        Generate a signed token for ``user_id``.

        Args:
            user_id (str): The user ID to include in the token
            expires_in_hours (int): Token lifetime, defaults to JWT_EXPIRES_IN_HOURS

        Returns:
            str: JWT token string
        """
        if expires_in_hours is None:
            expires_in_hours = getattr(settings, 'JWT_EXPIRES_IN_HOURS', 24)
        now = int(time.time())
        payload = {
            self._get_user_claim(): user_id,
            'iat': now,
            'exp': now + int(expires_in_hours * 3600),
        }
        return jwt.encode(payload, self._get_secret(), algorithm=self._get_algorithm())

    def validate_token(self, token):
        """
        Validate a JWT token and return its payload.

        Raises:
            jwt.InvalidTokenError: If token is invalid or expired
        """
        try:
            return jwt.decode(token, self._get_secret(), algorithms=[self._get_algorithm()])
        except jwt.ExpiredSignatureError:
            raise jwt.InvalidTokenError('Token has expired')
        except jwt.InvalidTokenError as e:
            raise jwt.InvalidTokenError(f'Invalid token: {e}')

    def extract_user_id(self, token):
        """
        Return the user id carried by ``token``, or None if it does not verify.
        """
        try:
            payload = self.validate_token(token)
        except jwt.InvalidTokenError as e:
            logger.warning('Rejected bearer token: %s', e)
            return None
        user_id = payload.get(self._get_user_claim())
        return str(user_id) if user_id else None


_jwt_manager = JWTManager()


def generate_test_token(user_id, expires_in_hours=None):
    """Generate a test JWT token for the given user ID."""
    return _jwt_manager.generate_token(user_id, expires_in_hours)


def validate_jwt_token(token):
    """Validate a JWT token and return the payload."""
    return _jwt_manager.validate_token(token)


def get_user_id_from_token(token):
    """Extract user ID from JWT token."""
    return _jwt_manager.extract_user_id(token)
