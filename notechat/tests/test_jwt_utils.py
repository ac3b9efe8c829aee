import jwt
from django.test import TestCase, override_settings

from notechat.jwt_utils import (
    JWTManager,
    generate_test_token,
    get_user_id_from_token,
    validate_jwt_token,
)


class JWTUtilsTest(TestCase):
    def test_generated_token_round_trips_user_id(self):
        token = generate_test_token('user-1')
        self.assertEqual(get_user_id_from_token(token), 'user-1')
        payload = validate_jwt_token(token)
        self.assertEqual(payload['sub'], 'user-1')
        self.assertGreater(payload['exp'], payload['iat'])

    def test_expired_token_is_rejected(self):
        token = generate_test_token('user-1', expires_in_hours=-1)
        with self.assertRaises(jwt.InvalidTokenError):
            validate_jwt_token(token)
        self.assertIsNone(get_user_id_from_token(token))

    def test_token_signed_with_other_secret_is_rejected(self):
        token = jwt.encode({'sub': 'user-1'}, 'some-other-secret', algorithm='HS256')
        self.assertIsNone(get_user_id_from_token(token))

    def test_garbage_token_is_rejected(self):
        self.assertIsNone(get_user_id_from_token('not.a.jwt'))

    def test_token_without_user_claim(self):
        manager = JWTManager()
        token = jwt.encode(
            {'iat': 0}, manager._get_secret(), algorithm=manager._get_algorithm()
        )
        self.assertIsNone(get_user_id_from_token(token))

    @override_settings(JWT_USER_CLAIM='user_id')
    def test_custom_user_claim(self):
        token = generate_test_token('user-2')
        self.assertEqual(validate_jwt_token(token)['user_id'], 'user-2')
        self.assertEqual(get_user_id_from_token(token), 'user-2')
