# backend/previewer/middleware/error_handler.py
"""
Error handling middleware for FastAPI application.

Maps the service's error tiers onto HTTP responses:

    InvalidRequestError         -> 400 {message[, fileId]}
    RecoverableProcessingError  -> 500 {message, fileId, originalUrl?, error, canRetry}
    HTTPException               -> its status with {message}
    anything else               -> 500 {message: "Internal server error"}
"""

import uuid

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..config import settings
from ..constants import MESSAGE_INTERNAL_ERROR
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import InvalidRequestError, RecoverableProcessingError
from ..models.preview_model import MessageResponse, ProcessingErrorResponse
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.ERROR_HANDLER, LogSource.MIDDLEWARE)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Centralized error handling middleware.

    Catches all unhandled exceptions, logs them with correlation IDs,
    and returns the JSON envelope matching the exception's tier.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.debug_mode = settings.environment == "development"

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and handle any errors that occur."""

        # Generate correlation ID for request tracking
        correlation_id = str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        try:
            response = await call_next(request)
            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as exc:
            self._log_error(exc, request, correlation_id)
            response = self._create_error_response(exc)
            response.headers["X-Correlation-ID"] = correlation_id
            return response

    def _log_error(self, exc: Exception, request: Request, correlation_id: str) -> None:
        """Log error with request context and correlation ID."""
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": getattr(request.client, "host", "unknown"),
            "user_agent": request.headers.get("user-agent", "unknown"),
        }
        context = {
            "correlation_id": correlation_id,
            "exception_type": type(exc).__name__,
            "request_info": request_info,
        }

        # Client mistakes are not worth a traceback
        if isinstance(exc, InvalidRequestError):
            logger.warning(
                f"Rejected {request.method} {request.url.path}: {exc.message}",
                extra_context=context,
            )
            return

        logger.error(
            f"Unhandled exception in {request.method} {request.url.path}",
            exception=exc,
            error_context=context,
            emoji=LogEmoji.CRITICAL,
        )

    def _create_error_response(self, exc: Exception) -> JSONResponse:
        """Create appropriate error response based on exception type."""
        if isinstance(exc, InvalidRequestError):
            return self._handle_invalid_request(exc)
        elif isinstance(exc, RecoverableProcessingError):
            return self._handle_recoverable_error(exc)
        elif isinstance(exc, HTTPException):
            return self._handle_http_exception(exc)
        else:
            return self._handle_generic_error(exc)

    def _handle_invalid_request(self, exc: InvalidRequestError) -> JSONResponse:
        body = MessageResponse(message=exc.message, file_id=exc.file_id)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content=body.to_response()
        )

    def _handle_recoverable_error(self, exc: RecoverableProcessingError) -> JSONResponse:
        body = ProcessingErrorResponse(
            message=exc.message,
            file_id=exc.file_id,
            original_url=exc.original_url,
            error=exc.error,
            can_retry=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.to_response(),
        )

    def _handle_http_exception(self, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code, content={"message": str(exc.detail)}
        )

    def _handle_generic_error(self, exc: Exception) -> JSONResponse:
        """Tier 3: nothing is known about what succeeded, so no retry data."""
        response_data = {"message": MESSAGE_INTERNAL_ERROR}
        if self.debug_mode:
            response_data["debug"] = {
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
            }
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=response_data
        )
