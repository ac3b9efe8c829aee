from django.test import TestCase

from users.models import User


class UserModelTest(TestCase):
    def test_email_is_normalized(self):
        user = User.objects.create(user_id='u1', name='Una', email='  Una@Example.COM ')
        user.refresh_from_db()
        self.assertEqual(user.email, 'una@example.com')

    def test_defaults(self):
        user = User.objects.create(user_id='u1', name='Una', email='una@example.com')
        self.assertFalse(user.is_online)
        self.assertIsNotNone(user.last_seen)
        self.assertEqual(user.preferences['theme'], 'dark')
        self.assertTrue(user.is_authenticated)

    def test_str(self):
        user = User(user_id='u1', name='Una')
        self.assertEqual(str(user), 'Una (u1)')
