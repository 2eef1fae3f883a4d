# backend/previewer/main.py
"""
FastAPI application entry point for the preview service.

Startup validates configuration, probes ffmpeg once and wires the preview
service onto app.state. Processing itself runs inside the request that
asked for it; there are no background workers.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .constants import APP_VERSION
from .dependencies import FFmpegCapabilityDep
from .enums import LogEmoji, LoggerName, LogSource
from .exceptions import ConfigurationError
from .middleware import (
    ErrorHandlerMiddleware,
    RequestLoggerMiddleware,
    UploadLimitMiddleware,
)
from .models.preview_model import FFmpegStatus, HealthResponse
from .routers import preview_routers, static_routers
from .services.logger import configure_logging, get_service_logger
from .services.preview_service import create_preview_service
from .services.video_pipeline import probe_ffmpeg_capability
from .utils.temp_file_manager import TempFileManager

logger = get_service_logger(LoggerName.SYSTEM, LogSource.SYSTEM)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown"""
    configure_logging(settings.log_level, settings.log_file, settings.log_json)

    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.error("Configuration validation failed", exception=e, emoji=LogEmoji.CRITICAL)
        raise

    capability = probe_ffmpeg_capability(
        settings.ffmpeg_path,
        settings.ffprobe_path,
        settings.ffmpeg_version_timeout_seconds,
    )

    TempFileManager().cleanup_old_files()

    app.state.settings = settings
    app.state.ffmpeg_capability = capability
    app.state.preview_service = create_preview_service(settings, capability)

    logger.info(
        f"Preview service started on {settings.api_host}:{settings.api_port}",
        emoji=LogEmoji.STARTUP,
        extra_context={
            "environment": settings.environment,
            "ffmpeg_available": capability.available,
        },
    )

    yield

    logger.info("Preview service shutting down", emoji=LogEmoji.SHUTDOWN)


app = FastAPI(
    title="Preview API",
    description="Watermarked previews for uploaded images and videos",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Middleware stack (last added = outermost)
# 1. Upload size limit (innermost - rejects oversized bodies before routing)
app.add_middleware(UploadLimitMiddleware, max_upload_bytes=settings.max_upload_bytes)

# 2. Request logging
app.add_middleware(RequestLoggerMiddleware)

# 3. Error handling (outermost - assigns correlation ids, catches all errors)
app.add_middleware(ErrorHandlerMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    """Report malformed bodies as 400 with per-field messages."""
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body") or "general"
        errors.setdefault(field, []).append(error["msg"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation failed", "errors": errors},
    )


app.include_router(preview_routers.router)
app.include_router(static_routers.router)

if Path(settings.static_directory).is_dir():
    app.mount("/static", StaticFiles(directory=settings.static_directory), name="static")


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check(capability: FFmpegCapabilityDep):
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        ffmpeg=FFmpegStatus(available=capability.available, version=capability.version),
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Preview API", "version": APP_VERSION, "docs": "/docs"}


if __name__ == "__main__":
    uvicorn.run(
        "previewer.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.value.lower(),
    )
