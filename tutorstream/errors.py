"""Error types and the centralized error responder."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class TutorStreamError(Exception):
    """Base error carrying the HTTP status it is surfaced with."""

    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class SigningFailure(TutorStreamError):
    status_code = 500
    message = "Error occurred while generating session token"


class MissingCredential(TutorStreamError):
    status_code = 400
    message = "You can not access this page, you have to login or signup"


class NotAuthenticated(TutorStreamError):
    status_code = 401
    message = "You are not logged in, please login to get access"


class InvalidCredential(TutorStreamError):
    status_code = 401
    message = "Invalid session token, please login again"


class SessionExpired(TutorStreamError):
    status_code = 401
    message = "Your session has expired, please login again"


class InvalidSignature(TutorStreamError):
    status_code = 401
    message = "Invalid signature"


class Expired(TutorStreamError):
    status_code = 403
    message = "Signed URL expired"


class InvalidResource(TutorStreamError):
    status_code = 400
    message = "Invalid resource reference"


class ResourceNotFound(TutorStreamError):
    status_code = 404
    message = "Resource not found"


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the ``{status, message}`` body every error is rendered with."""
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {message}")
        status = "error"
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({status_code}): {message}")
        status = "fail"

    return JSONResponse(
        status_code=status_code,
        content={"status": status, "message": message},
        headers=headers,
    )


async def handle_tutorstream_error(request: Request, exc: TutorStreamError) -> JSONResponse:
    """Render any TutorStreamError."""
    return _error_response(request, exc.status_code, exc.message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown routes, wrong methods)."""
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Can't find this page or route {request.url.path}"
    else:
        message = str(exc.detail)
    return _error_response(request, exc.status_code, message, getattr(exc, "headers", None))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        problems.append(f"{location}: {error.get('msg', 'invalid')}")
    message = "Invalid request: " + "; ".join(problems) if problems else "Invalid request"
    return _error_response(request, 422, message)


async def handle_rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a tripped rate limit."""
    return _error_response(request, 429, f"Too many requests, limit is {exc.detail}. Try again later.")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything unhandled; details stay in the log."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(request, 500, TutorStreamError.message)


def register_error_handlers(app: FastAPI) -> None:
    """Install the centralized responder on the application."""
    app.add_exception_handler(TutorStreamError, handle_tutorstream_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit_exceeded)
    app.add_exception_handler(Exception, handle_unexpected_error)
