"""
Response envelope shared by every endpoint.
"""


def success_response(data=None, message=None, **extra):
    """Create a standardized success payload: {"success": true, ...}"""
    response = {'success': True}
    if message:
        response['message'] = message
    if data is not None:
        response['data'] = data
    response.update(extra)
    return response


def error_response(message):
    return {'success': False, 'message': message}
