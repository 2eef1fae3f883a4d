# backend/previewer/middleware/__init__.py
"""
Middleware package for FastAPI application.

Provides centralized error handling, request logging and upload size limits.
"""

from .error_handler import ErrorHandlerMiddleware
from .request_logger import RequestLoggerMiddleware
from .upload_limit import UploadLimitMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestLoggerMiddleware",
    "UploadLimitMiddleware",
]
