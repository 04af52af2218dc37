"""Error taxonomy for the backup service and its HTTP rendering.

Each exception class carries the status code and the client-facing message.
Classes that could act as an oracle (`UnauthorizedError`) or leak internals
(`StorageFailureError`) always render the same fixed message, regardless of
what the raising code passed as detail; the detail is kept for server logs.
"""

from __future__ import annotations

import logging
from typing import cast

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

ERR_INVALID_USER_ID = "Invalid user ID format"
ERR_INVALID_STORAGE_KEY = "Invalid storage key format"
ERR_USER_ID_MUST_BE_SHA256 = "User ID must be a valid SHA-256 hash (64 hex characters)"
ERR_INVALID_ENVELOPE = "Invalid backup format"
ERR_INVALID_REQUEST = "Invalid request body"


class BackupServiceError(Exception):
    """Base class for every failure the service reports to a caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"
    expose_detail: bool = False

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_message)
        self.detail = detail or self.default_message

    @property
    def public_message(self) -> str:
        """Return the message that is safe to send to the client."""
        return self.detail if self.expose_detail else self.default_message


class MalformedInputError(BackupServiceError):
    """Identifier or envelope failed a format check."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = ERR_INVALID_REQUEST
    expose_detail = True


class UnauthorizedError(BackupServiceError):
    """Signature, timestamp or storage-key ownership check failed."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized - request could not be authenticated"


class ConflictError(BackupServiceError):
    """The identity is already registered."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "User already exists"
    expose_detail = True


class NotFoundError(BackupServiceError):
    """Unknown identity or blob."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"
    expose_detail = True


class PayloadTooLargeError(BackupServiceError):
    """Upload exceeds the hard size ceiling."""

    status_code = status.HTTP_413_CONTENT_TOO_LARGE
    default_message = "Backup size exceeds maximum allowed"


class RateLimitedError(BackupServiceError):
    """The identity has exhausted its hourly or daily write quota."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Rate limit exceeded - too many requests"


class StorageFailureError(BackupServiceError):
    """The underlying store transaction failed."""


def error_response(exc: BackupServiceError) -> JSONResponse:
    """Render a service error as the JSON body clients expect."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def _handle_service_error(request: Request, exc: Exception) -> JSONResponse:
    error = cast(BackupServiceError, exc)
    if isinstance(error, StorageFailureError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, error.detail)
    return error_response(error)


async def _handle_validation_error(request: Request, exc: Exception) -> JSONResponse:
    logger.debug("Request validation failed on %s: %s", request.url.path, exc)
    return error_response(MalformedInputError(ERR_INVALID_REQUEST))


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers mapping the error taxonomy onto HTTP responses."""
    app.add_exception_handler(BackupServiceError, _handle_service_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
