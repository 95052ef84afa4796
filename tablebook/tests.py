from django.test import SimpleTestCase
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, ValidationError as DRFValidationError

from .exceptions import ConflictError, envelope_exception_handler, first_message
from .responses import error_response, success_response


class ResponsesTest(SimpleTestCase):

    def test_success_response(self):
        self.assertEqual(success_response(), {'success': True})
        self.assertEqual(
            success_response([1], 'Done', count=1),
            {'success': True, 'message': 'Done', 'data': [1], 'count': 1}
        )

    def test_error_response(self):
        self.assertEqual(error_response('Nope'), {'success': False, 'message': 'Nope'})


class ExceptionHandlerTest(SimpleTestCase):
    """Tests for the error envelope"""

    def test_first_message(self):
        self.assertEqual(first_message({'detail': 'Not found'}), 'Not found')
        self.assertEqual(first_message({'email': ['Invalid', 'Other']}), 'Invalid')
        self.assertEqual(first_message({'items': [{'name': ['Required']}]}), 'Required')
        self.assertEqual(first_message([]), '')
        self.assertEqual(first_message({}), '')

    def test_domain_error(self):
        response = envelope_exception_handler(ConflictError('Table number already exists'), {})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'success': False, 'message': 'Table number already exists'})

    def test_serializer_error(self):
        exc = DRFValidationError({'status': ['Status is required']})
        response = envelope_exception_handler(exc, {})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Status is required')

    def test_not_authenticated(self):
        response = envelope_exception_handler(NotAuthenticated(), {})

        self.assertFalse(response.data['success'])
        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])

    def test_unexpected_error(self):
        with self.assertLogs('tablebook.exceptions', level='ERROR'):
            response = envelope_exception_handler(RuntimeError('database is locked'), {})

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'success': False, 'message': 'database is locked'})
