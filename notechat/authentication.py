from rest_framework.authentication import BaseAuthentication, get_authorization_header

from users.models import User

from .exceptions import Unauthenticated
from .jwt_utils import get_user_id_from_token


class BearerTokenAuthentication(BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        """
        Authenticate a request using the bearer JWT in the Authorization header.

        Returns None when no bearer header is present so the permission layer
        answers with 401. A header that is present but malformed, a token that
        does not verify, or a token for an unknown user fails outright.

        Returns:
            tuple: ``(user, token)`` where ``user`` is the ``users.User`` record.

        Raises:
            Unauthenticated: for a malformed header, a bad token or an unknown user.
        """
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) != 2:
            raise Unauthenticated("Wrong token format. Expected 'Bearer token'")

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise Unauthenticated('Invalid token header')

        user_id = get_user_id_from_token(token)
        if not user_id:
            raise Unauthenticated('Invalid or expired token')

        user = User.objects.filter(user_id=user_id).first()
        if user is None:
            raise Unauthenticated('Invalid or expired token')

        request.user_id = user.user_id
        return (user, token)

    def authenticate_header(self, request):
        return self.keyword
