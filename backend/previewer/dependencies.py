# backend/previewer/dependencies.py
"""
Dependency injection for the preview routers.

Services are built once in the application lifespan and stored on
app.state; these accessors hand them to endpoints. Tests replace them via
app.dependency_overrides.

Usage:
    @router.post("/image")
    async def create_image_preview(preview_service: PreviewServiceDep): ...
"""

from typing import Annotated

from fastapi import Depends, Request

from .config import Settings, settings
from .services.preview_service import PreviewService
from .services.video_pipeline.ffmpeg_utils import FFmpegCapability


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", settings)


def get_preview_service(request: Request) -> PreviewService:
    service = getattr(request.app.state, "preview_service", None)
    if service is None:
        raise RuntimeError("Preview service has not been initialized")
    return service


def get_ffmpeg_capability(request: Request) -> FFmpegCapability:
    return getattr(
        request.app.state, "ffmpeg_capability", FFmpegCapability.unavailable()
    )


SettingsDep = Annotated[Settings, Depends(get_settings)]
PreviewServiceDep = Annotated[PreviewService, Depends(get_preview_service)]
FFmpegCapabilityDep = Annotated[FFmpegCapability, Depends(get_ffmpeg_capability)]
