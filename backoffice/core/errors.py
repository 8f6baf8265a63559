# backoffice/core/errors.py
"""
Typed workflow errors and their HTTP rendering.

Every failure raised by the order workflow carries an ErrorKind and a
fully interpolated, human-readable message. Nothing is retried and
nothing is recovered locally; the handlers below only translate the
kind into a status code for the HTTP layer.
"""
import enum
import logging
from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    ACCESS_DENIED = "ACCESS_DENIED"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
}


class WorkflowError(Exception):
    """Base error: an ErrorKind plus the message shown to the caller."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class DataNotFoundError(WorkflowError):
    """Referenced user, product, or order id does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidArgumentError(WorkflowError):
    """Malformed id, empty cart, or an illegal state transition."""

    kind = ErrorKind.INVALID_ARGUMENT


class AccessDeniedError(WorkflowError):
    """Self-service operation on an order the requester does not own."""

    kind = ErrorKind.ACCESS_DENIED


def _error_body(error: str, details, path: str) -> dict:
    return {
        "error": error,
        "details": details,
        "path": path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    logger.warning(
        "Error: %s | Message: %s | Endpoint: %s",
        type(exc).__name__,
        exc.message,
        request.url.path,
    )
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[exc.kind],
        content=_error_body(type(exc).__name__, exc.message, request.url.path),
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Authentication, role and routing failures in the shared error shape."""
    error = HTTPStatus(exc.status_code).phrase.replace(" ", "")
    logger.warning(
        "Error: %s | Message: %s | Endpoint: %s",
        error,
        exc.detail,
        request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(_error_body(error, exc.detail, request.url.path)),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [err.get("msg") for err in exc.errors()]
    logger.warning(
        "Error: %s | Message: %s | Endpoint: %s",
        type(exc).__name__,
        details,
        request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(
            _error_body(type(exc).__name__, details, request.url.path)
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the workflow, HTTP and validation handlers to the application."""
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
