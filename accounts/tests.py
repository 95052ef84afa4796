from unittest import mock

import requests
from django.contrib.auth import password_validation
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .models import User
from .popup import LoginPopup, LOGIN, SIGN_UP, NETWORK_ERROR_MESSAGE
from .validators import PasswordStrengthValidator


class UserModelTest(TestCase):
    """Tests for the User model"""

    def test_create_user(self):
        user = User.objects.create_user(
            email='maria@example.com',
            name='Maria',
            username='maria',
            password='StrongPass123'
        )

        self.assertEqual(user.email, 'maria@example.com')
        self.assertTrue(user.check_password('StrongPass123'))
        self.assertFalse(user.is_staff)
        self.assertEqual(str(user), 'Maria (maria@example.com)')

    def test_username_from_email(self):
        self.assertEqual(User.username_from_email('maria@example.com'), 'maria')

        User.objects.create_user(email='maria@example.com', name='Maria', username='maria', password='x')
        self.assertEqual(User.username_from_email('maria@other.com'), 'maria2')


class PasswordValidatorTest(SimpleTestCase):
    """Tests for the sign up password rules"""

    def setUp(self):
        self.validator = PasswordStrengthValidator()

    def test_strong_password(self):
        self.validator.validate('StrongPass123')

    def test_short_password(self):
        with self.assertRaises(ValidationError) as ctx:
            self.validator.validate('Ab1')
        self.assertIn('at least 8 characters', ctx.exception.messages[0])

    def test_missing_uppercase(self):
        with self.assertRaises(ValidationError):
            self.validator.validate('weakpass123')

    def test_missing_digit(self):
        with self.assertRaises(ValidationError):
            self.validator.validate('WeakPassword')

    def test_min_length_option(self):
        with self.assertRaises(ValidationError):
            PasswordStrengthValidator(min_length=12).validate('StrongPass1')

    def test_registered_in_settings(self):
        """Django's password validation applies the same rules"""
        with self.assertRaises(ValidationError):
            password_validation.validate_password('weakpass123')
        password_validation.validate_password('StrongPass123')


class AuthAPITest(APITestCase):
    """Tests for login and sign up"""

    def setUp(self):
        self.user = User.objects.create_user(
            email='maria@example.com',
            name='Maria',
            username='maria',
            password='StrongPass123'
        )

    def test_register(self):
        response = self.client.post(reverse('user-register'), {
            'name': 'John',
            'email': 'John@Example.com',
            'password': 'StrongPass123'
        })

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertIn('token', response.data)
        self.assertTrue(User.objects.filter(email='john@example.com').exists())

    def test_register_existing_user(self):
        response = self.client.post(reverse('user-register'), {
            'name': 'Maria',
            'email': 'maria@example.com',
            'password': 'StrongPass123'
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'success': False, 'message': 'User already exists'})

    def test_register_invalid_email(self):
        response = self.client.post(reverse('user-register'), {
            'name': 'John',
            'email': 'not-an-email',
            'password': 'StrongPass123'
        })

        self.assertEqual(response.data['message'], 'Please enter a valid email')

    def test_register_weak_password(self):
        response = self.client.post(reverse('user-register'), {
            'name': 'John',
            'email': 'john@example.com',
            'password': 'short'
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Please enter a strong password of at least 8 characters.')

    def test_login(self):
        response = self.client.post(reverse('user-login'), {
            'email': 'maria@example.com',
            'password': 'StrongPass123'
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertTrue(response.data['token'])

    def test_login_unknown_user(self):
        response = self.client.post(reverse('user-login'), {
            'email': 'nobody@example.com',
            'password': 'StrongPass123'
        })

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], "User doesn't exist")

    def test_login_wrong_password(self):
        response = self.client.post(reverse('user-login'), {
            'email': 'maria@example.com',
            'password': 'WrongPass123'
        })

        self.assertEqual(response.data, {'success': False, 'message': 'Invalid credentials'})

    def test_me_with_token(self):
        token = self.client.post(reverse('user-login'), {
            'email': 'maria@example.com',
            'password': 'StrongPass123'
        }).data['token']

        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = self.client.get(reverse('user-me'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['email'], 'maria@example.com')

    def test_me_anonymous(self):
        response = self.client.get(reverse('user-me'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


def fake_response(body):
    response = mock.Mock()
    response.json.return_value = body
    return response


class LoginPopupTest(SimpleTestCase):
    """Tests for the login / sign up popup client"""

    def setUp(self):
        self.session = mock.Mock()
        self.alerts = []
        self.store = {}
        self.closed = []
        self.popup = LoginPopup(
            'http://localhost:8000/',
            token_store=self.store,
            alert=self.alerts.append,
            on_close=lambda: self.closed.append(True),
            session=self.session
        )

    def fill(self):
        self.popup.change('name', 'Maria')
        self.popup.change('email', 'maria@example.com')
        self.popup.change('password', 'StrongPass123')

    def test_initial_state(self):
        self.assertEqual(self.popup.mode, LOGIN)
        self.assertTrue(self.popup.is_open)
        self.assertFalse(self.popup.loading)
        self.assertEqual(self.popup.submit_label, 'Login')

    def test_endpoints(self):
        self.assertEqual(self.popup.endpoint, 'http://localhost:8000/api/user/login/')

        self.popup.toggle_mode()
        self.assertEqual(self.popup.mode, SIGN_UP)
        self.assertEqual(self.popup.endpoint, 'http://localhost:8000/api/user/register/')
        self.assertEqual(self.popup.submit_label, 'Create Account')

    def test_unknown_mode_and_field(self):
        with self.assertRaises(ValueError):
            self.popup.set_mode('Forgot Password')
        with self.assertRaises(KeyError):
            self.popup.change('phone', '123')

    def test_name_only_sent_on_sign_up(self):
        self.fill()
        self.assertNotIn('name', self.popup.payload())

        self.popup.set_mode(SIGN_UP)
        self.assertEqual(self.popup.payload()['name'], 'Maria')

    def test_successful_login_stores_token(self):
        self.fill()
        self.session.post.return_value = fake_response({'success': True, 'token': 'abc'})

        self.assertTrue(self.popup.submit())

        self.session.post.assert_called_once_with(
            'http://localhost:8000/api/user/login/',
            json={'email': 'maria@example.com', 'password': 'StrongPass123'},
            timeout=10
        )
        self.assertEqual(self.store['token'], 'abc')
        self.assertFalse(self.popup.is_open)
        self.assertEqual(self.closed, [True])
        self.assertFalse(self.popup.loading)
        self.assertEqual(self.alerts, [])

    def test_failed_login_alerts_server_message(self):
        self.fill()
        self.session.post.return_value = fake_response({'success': False, 'message': 'Invalid credentials'})

        self.assertFalse(self.popup.submit())

        self.assertEqual(self.alerts, ['Invalid credentials'])
        self.assertTrue(self.popup.is_open)
        self.assertNotIn('token', self.store)
        self.assertFalse(self.popup.loading)

    def test_network_error_alerts_generic_message(self):
        self.fill()
        self.session.post.side_effect = requests.ConnectionError('refused')

        self.assertFalse(self.popup.submit())

        self.assertEqual(self.alerts, [NETWORK_ERROR_MESSAGE])
        self.assertFalse(self.popup.loading)
        self.assertTrue(self.popup.is_open)

    def test_invalid_json_alerts_generic_message(self):
        self.fill()
        response = mock.Mock()
        response.json.side_effect = ValueError('not json')
        self.session.post.return_value = response

        self.assertFalse(self.popup.submit())
        self.assertEqual(self.alerts, [NETWORK_ERROR_MESSAGE])
