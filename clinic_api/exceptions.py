"""
Global exception handlers and custom exception classes.

Every error leaves the API in the same envelope: ``{"success": false, "message": ...}``.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, List, Optional
import logging

from .config import settings

# Set up logging
logger = logging.getLogger(__name__)

class AppException(Exception):
    """
    Base exception class for application-specific exceptions.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Server error"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None,
                 headers: Optional[Dict[str, str]] = None):
        self.detail = detail or self.default_detail
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers
        super().__init__(self.detail)


class ValidationException(AppException):
    """Malformed or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class UnauthorizedException(AppException):
    """Missing, invalid or expired token, or bad credentials."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class ForbiddenException(AppException):
    """Authenticated but not allowed."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class ConflictException(AppException):
    """Uniqueness violation."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists"


class UpstreamServiceException(AppException):
    """An external service (e.g. the OTP channel) failed."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Upstream service unavailable"


class InternalServerException(AppException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Server error"


def error_body(message: str, **extra: Any) -> Dict[str, Any]:
    """Build the failure envelope shared by all handlers."""
    body = {"success": False, "message": message}
    body.update(extra)
    return body


def _simplify_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    simplified = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        simplified.append({"field": ".".join(location), "message": message})
    return simplified


async def app_exception_handler(request: Request, exc: AppException):
    """
    Handler for application-specific exceptions.

    Args:
        request: The request that caused the exception
        exc: The exception instance

    Returns:
        JSONResponse: Standardized error response
    """
    if exc.status_code >= 500:
        logger.error(f"Application error on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"Request rejected ({exc.status_code}) on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail),
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for framework-raised HTTP exceptions (unknown routes, wrong methods).
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for request validation exceptions.

    Args:
        request: The request that caused the exception
        exc: The validation exception instance

    Returns:
        JSONResponse: 400 response with the first problem as message and all problems listed
    """
    errors = _simplify_validation_errors(exc.errors())
    logger.info(f"Validation error on {request.url.path}: {errors}")
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, errors=errors)
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Last-resort handler. Internal detail is only exposed in development.
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    extra = {"error": str(exc)} if settings.is_development else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Server error", **extra)
    )


# Register exception handlers with FastAPI app
def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
