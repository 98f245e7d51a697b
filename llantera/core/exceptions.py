"""
Service-level exceptions and the DRF exception handler that renders them.

Services raise these instead of returning HTTP responses; the handler turns
every error into the ``{"error": message}`` body the clients expect.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for business rule violations"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ServiceValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT


class PermissionDeniedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST, details=None):
    """Build the standard error body"""
    body = {'error': message}
    if details is not None:
        body['details'] = details
    return Response(body, status=status_code)


def api_exception_handler(exc, context):
    """
    Render service errors as ``{"error": ...}``; leave DRF's own errors
    (serializer validation, authentication) to the default handler and log
    anything unexpected.
    """
    if isinstance(exc, ServiceError):
        return error_response(exc.message, exc.status_code, exc.details)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    request = context.get('request')
    logger.error(
        f"Unhandled exception in {view.__class__.__name__ if view else 'unknown view'} "
        f"({request.method if request else '-'} {request.path if request else '-'}): {str(exc)}",
        exc_info=True,
    )
    return error_response('Error interno del servidor', status.HTTP_500_INTERNAL_SERVER_ERROR)
