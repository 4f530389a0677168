"""
Application error taxonomy and the handlers that turn errors into responses.

Business errors are raised where they are detected and travel unchanged up to
the FastAPI handlers registered here, which render an ``ErrorResponse``.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from autocare.logging_config import CORRELATION_ID_HEADER, get_correlation_id
from autocare.schemas.common import ErrorResponse, ValidationErrorDetail

logger = logging.getLogger(__name__)

VALIDATION_ERROR_CODE = "VALIDATION_ERROR"
VALIDATION_ERROR_MESSAGE = "Request validation failed"
INTERNAL_SERVER_ERROR_CODE = "INTERNAL_SERVER_ERROR"
INTERNAL_SERVER_ERROR_MESSAGE = "An unexpected error occurred"
VERSION_IS_REQUIRED = "Version is required for updates. Please include the current version from GET response."


class AppError(Exception):
    """Base class for business errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = INTERNAL_SERVER_ERROR_CODE

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


def _entity_code(entity: str) -> str:
    return entity.upper().replace(" ", "_")


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"{entity} not found with ID: {entity_id}",
            error_code=f"{_entity_code(entity)}_NOT_FOUND",
        )
        self.entity = entity
        self.entity_id = entity_id


class AlreadyExistsError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "ALREADY_EXISTS"

    def __init__(self, entity: str, field: str, value):
        super().__init__(
            f"{entity} with {field} {value} already exists",
            error_code=f"{_entity_code(entity)}_ALREADY_EXISTS",
        )
        self.entity = entity
        self.field = field
        self.value = value


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BAD_REQUEST"


class OptimisticLockError(AppError):
    """The row changed between the caller's read and this write."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "OPTIMISTIC_LOCK_ERROR"

    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"The {entity} (ID: {entity_id}) was modified by another user. Please refresh and try again."
        )
        self.entity = entity
        self.entity_id = entity_id


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"

    @classmethod
    def invalid_token(cls) -> "UnauthorizedError":
        return cls("Invalid or expired authentication token")

    @classmethod
    def missing_token(cls) -> "UnauthorizedError":
        return cls("Authentication token is required")

    @classmethod
    def invalid_credentials(cls) -> "UnauthorizedError":
        return cls("Invalid username or password")


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"


def _correlation_id_for(request: Request) -> str | None:
    # Unhandled errors are rendered outside the correlation middleware, after
    # its context has been reset, so fall back to what it left on the request.
    return get_correlation_id() or getattr(request.state, "correlation_id", None)


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    validation_errors: list[ValidationErrorDetail] | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    correlation_id = _correlation_id_for(request)
    headers = dict(headers or {})
    if correlation_id:
        headers[CORRELATION_ID_HEADER] = correlation_id
    body = ErrorResponse(
        error=error,
        message=message,
        path=request.url.path,
        status=status_code,
        correlation_id=correlation_id,
        validation_errors=validation_errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning("Business exception [%s]: %s", exc.error_code, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return _error_response(request, exc.status_code, exc.error_code, exc.message, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        # Drop the "body"/"query" prefix so the field path reads like the payload
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        details.append(
            ValidationErrorDetail(
                field=".".join(location) or None,
                rejected_value=error.get("input"),
                message=error.get("msg", ""),
            )
        )
    logger.warning("Validation failed: %d error(s) on %s", len(details), request.url.path)
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        VALIDATION_ERROR_CODE,
        VALIDATION_ERROR_MESSAGE,
        validation_errors=details,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = {
        status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
        status.HTTP_403_FORBIDDEN: "FORBIDDEN",
        status.HTTP_404_NOT_FOUND: "NOT_FOUND",
        status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    }.get(exc.status_code, "HTTP_ERROR")
    logger.warning("HTTP error [%s]: %s", code, exc.detail)
    return _error_response(request, exc.status_code, code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unexpected exception [%s] on %s %s",
        _correlation_id_for(request),
        request.method,
        request.url.path,
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        INTERNAL_SERVER_ERROR_CODE,
        INTERNAL_SERVER_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
