"""
Application error taxonomy.

Every error a handler can surface to a caller is an ``AppError`` subclass
carrying its HTTP status and a caller-safe message.  ``register_exception_handlers``
wires them (plus FastAPI's own validation and HTTP errors, and any
unexpected exception) into the shared ``{success, message, errors?}``
envelope.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None, errors: list[dict] | None = None) -> None:
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation failed"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class Conflict(AppError):
    # Duplicate registrations are reported as a bad request, not 409.
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Username or email already exists"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class Internal(AppError):
    pass


# ---------------------------------------------------------------------------
# Envelope helpers
# ---------------------------------------------------------------------------

def envelope(message: str, data: dict | None = None) -> dict:
    """Build a success body; ``data`` is omitted when there is none."""
    body: dict = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def error_response(
    status_code: int,
    message: str,
    errors: list[dict] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def field_errors(raw_errors) -> list[dict]:
    """
    Flatten pydantic error dicts into ``{field, message, location}`` items.

    ``loc`` looks like ``("body", "title")`` or ``("query", "limit")``; a
    body that is not a JSON object at all reports ``("body",)`` and gets
    an empty field name.
    """
    flattened = []
    for err in raw_errors:
        loc = [str(part) for part in err.get("loc", ())]
        location = loc[0] if loc else ""
        field = ".".join(loc[1:])
        flattened.append({"field": field, "message": err.get("msg", ""), "location": location})
    return flattened


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.errors, exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = field_errors(exc.errors())
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, errors)
    return error_response(ValidationError.status_code, ValidationError.message, errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(Internal.status_code, Internal.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
