# apps/core/tests/test_auth_service.py

from django.core import mail
from django.test import TestCase

from ..auth_service import auth_service
from ..models import User


class RegisterUserTest(TestCase):

    def test_register_success(self):
        success, message, user = auth_service.register_user({
            'name': 'Ana Lima',
            'email': 'Ana@Example.com',
            'password': 'password123',
        })

        self.assertTrue(success)
        self.assertEqual(user.email, 'ana@example.com')
        self.assertEqual(user.username, 'ana')
        self.assertEqual(user.display_name, 'Ana Lima')
        self.assertEqual(user.first_name, 'Ana')
        self.assertEqual(user.last_name, 'Lima')
        self.assertTrue(user.check_password('password123'))

    def test_register_sends_welcome_email(self):
        auth_service.register_user({'name': 'Ana', 'email': 'ana@example.com', 'password': 'password123'})

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['ana@example.com'])

    def test_duplicate_email_is_case_insensitive(self):
        User.objects.create_user(username='ana', email='ana@example.com', password='password123')

        success, message, user = auth_service.register_user({
            'name': 'Ana',
            'email': 'ANA@example.com',
            'password': 'password123',
        })

        self.assertFalse(success)
        self.assertEqual(message, 'Email already registered')
        self.assertIsNone(user)

    def test_username_gets_suffix_when_taken(self):
        User.objects.create_user(username='ana', email='other@example.com', password='password123')

        success, _, user = auth_service.register_user({
            'name': 'Ana',
            'email': 'ana@example.com',
            'password': 'password123',
        })

        self.assertTrue(success)
        self.assertEqual(user.username, 'ana2')

    def test_validation_errors(self):
        cases = [
            ({'name': '', 'email': 'a@example.com', 'password': 'password123'}, 'Field name is required'),
            ({'name': 'A', 'email': 'not-an-email', 'password': 'password123'}, 'Invalid email'),
            ({'name': 'A', 'email': 'a@example.com', 'password': 'short'}, 'Password must have at least 8 characters'),
        ]
        for data, expected in cases:
            with self.subTest(expected=expected):
                success, message, user = auth_service.register_user(data)
                self.assertFalse(success)
                self.assertEqual(message, expected)

        self.assertEqual(User.objects.count(), 0)
