"""
Domain errors and the exception handler that turns every failure into the
`{"success": false, "message": ...}` envelope used by the API.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .responses import error_response

logger = logging.getLogger(__name__)


class ValidationError(APIException):
    """A required field is missing or malformed"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Please fill all required fields'
    default_code = 'validation_error'


class ConflictError(APIException):
    """Slot already booked or duplicate table number"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict with existing data'
    default_code = 'conflict'


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class AuthorizationError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Not authorized'
    default_code = 'unauthorized'


class InvalidStateError(APIException):
    """The booking's current status does not allow the requested change"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid state'
    default_code = 'invalid_state'


class InvalidEnumError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid status'
    default_code = 'invalid_status'


def first_message(data):
    """Flattens DRF error payloads (dicts, lists, details) to a single message"""
    if isinstance(data, dict):
        if 'detail' in data:
            return first_message(data['detail'])
        for value in data.values():
            return first_message(value)
        return ''
    if isinstance(data, (list, tuple)):
        return first_message(data[0]) if data else ''
    return str(data)


def envelope_exception_handler(exc, context):
    """
    DRF exception handler.

    Known errors keep their HTTP status; anything DRF does not recognise
    (database errors and the like) is logged and reported with its raw
    message as a 500.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.error(
            "Unhandled error in %s: %s",
            view.__class__.__name__ if view else 'view', exc,
            exc_info=exc,
        )
        return Response(
            error_response(str(exc)),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = error_response(first_message(response.data))
    return response
