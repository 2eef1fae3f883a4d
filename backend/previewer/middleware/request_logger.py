# backend/previewer/middleware/request_logger.py
"""
Request logging middleware for FastAPI application.

Logs each request's method, path, status and duration together with the
correlation id assigned by the error handler.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..enums import LogEmoji, LoggerName, LogSource
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.REQUEST_LOGGER, LogSource.MIDDLEWARE)

# Requests slower than this are logged as warnings
SLOW_REQUEST_SECONDS = 30.0


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Request logging middleware with timing.

    Health checks and docs are not logged.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.exclude_paths = {
            "/health",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/favicon.ico",
        }

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start_time = time.time()
        correlation_id = getattr(request.state, "correlation_id", "unknown")

        logger.info(
            f"{request.method} {request.url.path}",
            emoji=LogEmoji.INCOMING,
            extra_context={
                "correlation_id": correlation_id,
                "content_length": request.headers.get("content-length"),
                "content_type": request.headers.get("content-type"),
            },
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(
                f"{request.method} {request.url.path} -> FAILED ({duration_ms}ms)",
                error_context={
                    "correlation_id": correlation_id,
                    "exception_type": type(exc).__name__,
                },
            )
            # Re-raise exception for error handler
            raise

        duration = time.time() - start_time
        self._log_complete(request, response, duration, correlation_id)
        return response

    def _log_complete(
        self, request: Request, response: Response, duration: float, correlation_id: str
    ) -> None:
        status_code = response.status_code
        duration_ms = round(duration * 1000, 2)
        message = f"{request.method} {request.url.path} -> {status_code} ({duration_ms}ms)"
        context = {"correlation_id": correlation_id, "duration_ms": duration_ms}

        if status_code >= 500:
            logger.error(message, error_context=context)
        elif status_code >= 400:
            logger.warning(message, extra_context=context)
        elif duration > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request: {message}", extra_context=context)
        else:
            logger.info(message, emoji=LogEmoji.OUTGOING, extra_context=context)
