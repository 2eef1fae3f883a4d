# backend/previewer/middleware/upload_limit.py
"""
Upload size middleware.

Rejects requests whose declared Content-Length exceeds the upload limit
plus the multipart envelope before they reach a router. The exact file
size, and chunked bodies without a Content-Length, are checked by the
routers once read.
"""

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..constants import (
    MAX_UPLOAD_BYTES,
    MESSAGE_FILE_TOO_LARGE,
    MULTIPART_OVERHEAD_BYTES,
)
from ..enums import LoggerName, LogSource
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.MIDDLEWARE, LogSource.MIDDLEWARE)


class UploadLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, max_upload_bytes: int = MAX_UPLOAD_BYTES):
        super().__init__(app)
        self.max_upload_bytes = max_upload_bytes

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit():
            if int(content_length) > self.max_upload_bytes + MULTIPART_OVERHEAD_BYTES:
                logger.warning(
                    f"Upload rejected: {content_length} bytes exceeds limit",
                    extra_context={
                        "path": request.url.path,
                        "max_upload_bytes": self.max_upload_bytes,
                    },
                )
                return JSONResponse(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    content={"message": MESSAGE_FILE_TOO_LARGE},
                )

        return await call_next(request)
