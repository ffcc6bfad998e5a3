"""Exception handlers for the API."""

import traceback
import typing as t

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import (
    CheckInError,
    CheckInPermissionDeniedError,
    CheckInValidationError,
    InvalidRegistrationStateError,
    NotFoundError,
    StorageError,
    TicketTypeSoldOutError,
)

logger = structlog.get_logger(__name__)

CHECK_IN_ERROR_STATUS: dict[type[CheckInError], int] = {
    NotFoundError: 404,
    CheckInPermissionDeniedError: 403,
    InvalidRegistrationStateError: 400,
    CheckInValidationError: 400,
    TicketTypeSoldOutError: 400,
    StorageError: 503,
}


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception("INTERNAL_SERVER_ERROR", exc_info=True, path=request.path, method=request.method)
    data = {"detail": "Internal Server Error.", "code": "INTERNAL_ERROR"}
    if settings.DEBUG:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("VALIDATION_ERROR", path=request.path)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(getattr(exc, "messages", []))}
    return Response(status=400, data={"errors": error_dict})


def handle_check_in_error(request: HttpRequest, exc: CheckInError | t.Type[CheckInError]) -> Response:
    """Map a domain error to its status code with a ``{detail, code}`` body."""
    error = t.cast(CheckInError, exc)
    status = next((code for cls, code in CHECK_IN_ERROR_STATUS.items() if isinstance(error, cls)), 400)
    if status >= 500:
        logger.error("CHECK_IN_STORAGE_ERROR", path=request.path, code=error.code)
    return Response(status=status, data={"detail": error.detail, "code": error.code})
