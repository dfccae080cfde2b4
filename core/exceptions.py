"""
Exceptions and the exception handler for the Civic Platform API.

Domain errors raised by services derive from ProblemDetailException so the
API layer can render them as Problem+JSON (RFC 7807) without translation.
"""

import logging
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException


logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = 'An internal error occurred. Please try again later.'


class ProblemDetailException(APIException):
    """
    Custom exception for Problem+JSON (RFC 7807) responses.

    Allows raising exceptions with standardized error details.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'A problem occurred'
    default_code = 'error'
    default_title = 'Error'

    def __init__(self, detail=None, title=None, status_code=None, type_uri='about:blank',
                 instance=None, field=None):
        self.title = title or self.default_title
        self.type_uri = type_uri
        self.instance = instance
        self.field = field

        if status_code:
            self.status_code = status_code

        super().__init__(detail or self.default_detail, self.default_code)


class NotFound(ProblemDetailException):
    """A referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource was not found.'
    default_code = 'not_found'
    default_title = 'Not Found'


class InvalidTarget(ProblemDetailException):
    """Content type mismatch or a reference that does not resolve."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The target does not reference an existing entity.'
    default_code = 'invalid_target'
    default_title = 'Invalid Target'


class ValidationFailed(ProblemDetailException):
    """Malformed input, e.g. an unknown enum value."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'validation_failed'
    default_title = 'Bad Request'


class Unauthorized(ProblemDetailException):
    """The actor may not perform this action."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'
    default_title = 'Forbidden'


class DuplicateReport(ProblemDetailException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'You have already reported this content.'
    default_code = 'duplicate_report'
    default_title = 'Duplicate Report'


class DuplicateRegistration(ProblemDetailException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'You are already registered for this event.'
    default_code = 'duplicate_registration'
    default_title = 'Duplicate Registration'


class InvalidTransition(ProblemDetailException):
    """The entity's current state does not allow the requested change."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This action is not allowed in the current state.'
    default_code = 'invalid_transition'
    default_title = 'Conflict'


class CapacityExceeded(ProblemDetailException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This event is at full capacity.'
    default_code = 'capacity_exceeded'
    default_title = 'Capacity Exceeded'


class PartialFailure(ProblemDetailException):
    """
    A multi-record operation could not be completed.

    Raised after the surrounding transaction has been rolled back, so the
    caller can safely retry the whole operation.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'The operation could not be completed and was rolled back.'
    default_code = 'partial_failure'
    default_title = 'Internal Server Error'


def problem_exception_handler(exc, context):
    """
    Custom exception handler that returns Problem+JSON responses (RFC 7807).

    This provides standardized error responses across all API endpoints.
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is None:
        return None

    problem_data = {
        'type': getattr(exc, 'type_uri', 'about:blank'),
        'title': getattr(exc, 'title', None) or get_error_title(response.status_code),
        'status': response.status_code,
        'detail': get_error_detail(response.data),
    }

    # Never leak internals on server errors
    if response.status_code >= 500:
        problem_data['detail'] = GENERIC_SERVER_ERROR

    code = getattr(exc, 'default_code', None)
    if isinstance(exc, ProblemDetailException):
        problem_data['code'] = code

    # Add instance URL if available
    request = context.get('request')
    if request:
        problem_data['instance'] = getattr(exc, 'instance', None) or request.build_absolute_uri()

    # Add validation errors for 400 Bad Request
    if response.status_code == status.HTTP_400_BAD_REQUEST:
        if getattr(exc, 'field', None):
            problem_data['invalid_params'] = [
                {'name': exc.field, 'reason': problem_data['detail']}
            ]
        else:
            problem_data['invalid_params'] = format_validation_errors(response.data)

    # Log the error for monitoring
    log_error(exc, context, response.status_code)

    response.data = problem_data
    response.content_type = 'application/problem+json'

    return response


def get_error_title(status_code):
    """Get human-readable title for HTTP status code."""
    titles = {
        400: 'Bad Request',
        401: 'Unauthorized',
        403: 'Forbidden',
        404: 'Not Found',
        405: 'Method Not Allowed',
        409: 'Conflict',
        429: 'Too Many Requests',
        500: 'Internal Server Error',
        503: 'Service Unavailable',
    }
    return titles.get(status_code, 'Error')


def get_error_detail(data):
    """Extract human-readable detail from response data."""
    if isinstance(data, dict):
        # Handle DRF serializer errors
        if 'detail' in data:
            return str(data['detail'])
        elif 'non_field_errors' in data:
            return '; '.join(str(error) for error in data['non_field_errors'])
        else:
            # Return first error message found
            for key, value in data.items():
                if isinstance(value, list) and value:
                    return f"{key}: {value[0]}"
                elif isinstance(value, str):
                    return f"{key}: {value}"
    elif isinstance(data, list) and data:
        return str(data[0])

    return str(data)


def format_validation_errors(data):
    """Format validation errors for Problem+JSON invalid_params."""
    if not isinstance(data, dict):
        return []

    invalid_params = []
    for field, errors in data.items():
        if field == 'detail':
            continue
        if isinstance(errors, list):
            for error in errors:
                invalid_params.append({
                    'name': field,
                    'reason': str(error)
                })
        else:
            invalid_params.append({
                'name': field,
                'reason': str(errors)
            })

    return invalid_params


def log_error(exc, context, status_code):
    """Log error for monitoring and debugging."""
    request = context.get('request')
    user = getattr(request, 'user', None)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"API Error {status_code}: {type(exc).__name__}",
        extra={
            'status_code': status_code,
            'exception_type': type(exc).__name__,
            'user_id': str(user.id) if user and user.is_authenticated else None,
            'request_path': request.path if request else None,
            'request_method': request.method if request else None,
            'ip_address': get_client_ip(request) if request else None,
        },
        exc_info=status_code >= 500  # Include stack trace for 5xx errors
    )


def get_client_ip(request):
    """Get client IP address from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip
