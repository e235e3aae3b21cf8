"""
API error taxonomy.

Every error leaving the API is rendered as ``{"error": <message>, "code": <code>}``
where ``code`` is one of:

    unauthenticated       401
    invalid-argument      400
    permission-denied     403
    not-found             404
    failed-precondition   412
    resource-exhausted    429
    internal              500
    deadline-exceeded     504
"""
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.observability import metrics, get_sanitized_logger

logger = get_sanitized_logger(__name__)


class ApiError(exceptions.APIException):
    """Base class for taxonomy-coded API errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = 'internal'
    default_detail = 'Internal error.'

    def __init__(self, detail=None):
        super().__init__(detail or self.default_detail, self.code)


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = 'unauthenticated'
    default_detail = 'Sign in required.'


class InvalidArgument(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'invalid-argument'
    default_detail = 'Invalid argument.'


class PermissionDenied(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = 'permission-denied'
    default_detail = 'Permission denied.'


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'not-found'
    default_detail = 'Not found.'


class FailedPrecondition(ApiError):
    status_code = status.HTTP_412_PRECONDITION_FAILED
    code = 'failed-precondition'
    default_detail = 'Failed precondition.'


class DeadlineExceeded(ApiError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    code = 'deadline-exceeded'
    default_detail = 'Deadline exceeded.'


class Internal(ApiError):
    pass


# DRF built-in exceptions mapped onto the taxonomy
_DRF_CODES = {
    exceptions.NotAuthenticated: 'unauthenticated',
    exceptions.AuthenticationFailed: 'unauthenticated',
    exceptions.PermissionDenied: 'permission-denied',
    exceptions.NotFound: 'not-found',
    exceptions.ValidationError: 'invalid-argument',
    exceptions.ParseError: 'invalid-argument',
    exceptions.Throttled: 'resource-exhausted',
    exceptions.MethodNotAllowed: 'invalid-argument',
    exceptions.UnsupportedMediaType: 'invalid-argument',
    exceptions.NotAcceptable: 'invalid-argument',
}


def _taxonomy_code(exc):
    if isinstance(exc, ApiError):
        return exc.code
    for exc_class, code in _DRF_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return 'internal'


def _message(detail):
    """Flatten DRF error details into one human-readable string."""
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            text = _message(value)
            parts.append(text if field == 'non_field_errors' else f'{field}: {text}')
        return '; '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ' '.join(_message(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    """
    DRF exception handler rendering the uniform error body.

    Unexpected exceptions are logged and returned as ``internal`` so
    stack traces never reach clients.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    view = context.get('view')
    location = view.__class__.__name__ if view is not None else 'unknown'

    if response is None:
        logger.error(
            f'Unhandled API exception: {exc.__class__.__name__}',
            exc_info=exc,
            extra={'event': 'api_unhandled_exception', 'location': location}
        )
        metrics.exceptions_total.labels(
            exception_type=exc.__class__.__name__, location=location
        ).inc()
        return Response(
            {'error': Internal.default_detail, 'code': Internal.code},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = _taxonomy_code(exc)
    data = response.data
    detail = data.get('detail', data) if isinstance(data, dict) else data
    body = {'error': _message(detail), 'code': code}
    if isinstance(exc, exceptions.ValidationError) and isinstance(exc.detail, dict):
        body['fields'] = exc.detail
    if code == 'resource-exhausted':
        metrics.public_throttled_total.labels(scope=location).inc()

    response.data = body
    return response


_ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (Unauthenticated, InvalidArgument, PermissionDenied, NotFound,
                FailedPrecondition, DeadlineExceeded, Internal)
}


def error_for_code(code, message):
    """Build the API error for a taxonomy code raised outside DRF."""
    return _ERRORS_BY_CODE.get(code, Internal)(message)
