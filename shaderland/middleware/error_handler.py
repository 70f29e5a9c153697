# shaderland/middleware/error_handler.py
# Structured error handling middleware
# Every pipeline failure is an AppError subclass carrying its HTTP status

import traceback
import logging
from typing import Callable, Optional
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shaderland.utils.logger import log_exception

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error with structured response."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[dict] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class ValidationError(AppError):
    """Request validation failed."""
    def __init__(self, message: str = "Validation failed", details: dict = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class UnsupportedModelError(AppError):
    """Requested model is not one of the configured backends."""
    def __init__(self, model_id: str):
        super().__init__(
            message=f"Unsupported model: {model_id}",
            error_code="UNSUPPORTED_MODEL",
            status_code=400,
            details={"model": model_id}
        )
        self.model_id = model_id


class NotFoundError(AppError):
    """Resource not found."""
    def __init__(self, message: str = "Resource not found", details: dict = None):
        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=details
        )


class ConfigurationError(AppError):
    """Provider credential missing from process configuration."""
    def __init__(self, provider: str, setting_name: str):
        super().__init__(
            message=f"{setting_name} not configured",
            error_code="CONFIGURATION_ERROR",
            status_code=500,
            details={"provider": provider}
        )
        self.provider = provider
        self.setting_name = setting_name


class UpstreamError(AppError):
    """Model provider call failed; message is passed through unchanged."""
    def __init__(self, message: str, provider: str = "", reason: str = "ProviderError"):
        super().__init__(
            message=message,
            error_code="UPSTREAM_ERROR",
            status_code=500,
            details={"provider": provider, "reason": reason} if provider else {"reason": reason}
        )
        self.provider = provider
        self.reason = reason


class MalformedResponseError(AppError):
    """Model output lacked one of the delimited blocks."""
    def __init__(self, raw_text: str, missing: tuple = ()):
        super().__init__(
            message="Invalid response format from AI model",
            error_code="MALFORMED_RESPONSE",
            status_code=500,
        )
        # kept for diagnostics only, never sent to the client
        self.raw_text = raw_text
        self.missing = missing


class InvalidConfigJSONError(AppError):
    """Config block was not valid JSON."""
    def __init__(self, raw_text: str, reason: str = ""):
        super().__init__(
            message="Invalid TweakPane configuration format",
            error_code="INVALID_CONFIG_JSON",
            status_code=500,
        )
        self.raw_text = raw_text
        self.reason = reason


class StorageError(AppError):
    """Persistence failed (constraint violation or connectivity)."""
    def __init__(self, message: str = "Database operation failed", details: dict = None):
        super().__init__(
            message=message,
            error_code="STORAGE_ERROR",
            status_code=500,
            details=details
        )


def create_error_response(
    error_code: str,
    message: str,
    status_code: int,
    details: dict = None,
    request_id: str = None
) -> JSONResponse:
    """Create a standardized JSON error response."""
    content = {
        "error": {
            "code": error_code,
            "message": message,
        }
    }

    if details:
        content["error"]["details"] = details

    if request_id:
        content["error"]["request_id"] = request_id

    return JSONResponse(status_code=status_code, content=content)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches all unhandled exceptions and returns
    consistent JSON error responses.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("X-Request-ID", str(id(request)))

        try:
            response = await call_next(request)
            return response

        except AppError as e:
            logger.warning(
                f"AppError: {e.error_code} - {e.message}",
                extra={"request_id": request_id, "path": request.url.path}
            )
            return create_error_response(
                error_code=e.error_code,
                message=e.message,
                status_code=e.status_code,
                details=e.details,
                request_id=request_id
            )

        except HTTPException as e:
            logger.warning(
                f"HTTPException: {e.status_code} - {e.detail}",
                extra={"request_id": request_id, "path": request.url.path}
            )
            return create_error_response(
                error_code="HTTP_ERROR",
                message=str(e.detail),
                status_code=e.status_code,
                request_id=request_id
            )

        except Exception as e:
            error_details = None
            if self.debug:
                error_details = {
                    "type": type(e).__name__,
                    "traceback": traceback.format_exc()
                }

            log_exception(e, context=f"Unhandled error on {request.url.path}")
            logger.error(
                f"Unhandled exception: {type(e).__name__}: {str(e)}",
                extra={"request_id": request_id, "path": request.url.path},
                exc_info=True
            )

            return create_error_response(
                error_code="INTERNAL_ERROR",
                message="An internal error occurred. Please try again later.",
                status_code=500,
                details=error_details,
                request_id=request_id
            )


def setup_exception_handlers(app):
    """Register exception handlers on FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        logger.warning(
            f"AppError: {exc.error_code} - {exc.message}",
            extra={"path": request.url.path}
        )
        return create_error_response(
            error_code=exc.error_code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Malformed bodies are client-correctable: 400, not FastAPI's default 422
        errors = [
            {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return create_error_response(
            error_code="VALIDATION_ERROR",
            message="Invalid request body",
            status_code=400,
            details={"errors": errors}
        )
