import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for errors raised by the marketplace services."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Something went wrong'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    """Missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request'


class NotFound(MarketplaceError):
    """A referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class InvalidState(MarketplaceError):
    """The action is not legal for the current lifecycle state."""
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Action not allowed in the current state'


class PreconditionFailed(MarketplaceError):
    """A gate such as the payment gate is not satisfied."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Precondition failed'


class Internal(MarketplaceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Internal error'


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return 'Invalid request'
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else 'Invalid request'
    return str(detail)


def marketplace_exception_handler(exc, context):
    """
    Convert every error raised inside a view into a ``{"error": message}`` body.

    Marketplace errors carry their own status code, DRF errors keep theirs and
    anything else is logged and answered with a 500.
    """
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown view'

    if isinstance(exc, MarketplaceError):
        if exc.status_code >= 500:
            logger.error(f"{view_name} failed: {exc.message}")
        return Response({'error': exc.message}, status=exc.status_code)

    if isinstance(exc, (Http404, PermissionDenied)) or isinstance(exc, drf_exceptions.APIException):
        response = exception_handler(exc, context)
        if response is None:
            return None
        data = response.data
        if isinstance(exc, drf_exceptions.ValidationError):
            response.data = {'error': _first_message(data), 'details': data}
        elif not (isinstance(data, dict) and 'error' in data):
            response.data = {'error': _first_message(data)}
        return response

    logger.exception(f"Unhandled error in {view_name}: {exc}")
    return Response({'error': Internal.default_message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
