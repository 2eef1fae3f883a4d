# backend/previewer/routers/preview_routers.py
"""
Preview HTTP endpoints.

Upload endpoints accept a multipart "file" field. Error envelopes are
produced by ErrorHandlerMiddleware from the exceptions raised by the
preview service.
"""

from typing import Optional

from fastapi import APIRouter, Body, File, UploadFile
from starlette.concurrency import run_in_threadpool

from ..dependencies import PreviewServiceDep, SettingsDep
from ..models.preview_model import PreviewResponse, RetryRequest
from ..utils.router_helpers import read_upload

router = APIRouter(tags=["previews"])

UPLOAD_DESCRIPTION = "Image or video to preview"


@router.post(
    "/createPreview",
    response_model=PreviewResponse,
    response_model_exclude_none=True,
)
async def create_preview(
    preview_service: PreviewServiceDep,
    settings: SettingsDep,
    file: Optional[UploadFile] = File(None, description=UPLOAD_DESCRIPTION),
):
    """Legacy endpoint accepting either an image or a video."""
    upload = await read_upload(file, settings.max_upload_bytes)
    return await run_in_threadpool(preview_service.create_preview, upload)


@router.post(
    "/image",
    response_model=PreviewResponse,
    response_model_exclude_none=True,
)
async def create_image_preview(
    preview_service: PreviewServiceDep,
    settings: SettingsDep,
    file: Optional[UploadFile] = File(None, description="Image to preview"),
):
    upload = await read_upload(file, settings.max_upload_bytes)
    return await run_in_threadpool(preview_service.create_image_preview, upload)


@router.post(
    "/video",
    response_model=PreviewResponse,
    response_model_exclude_none=True,
)
async def create_video_preview(
    preview_service: PreviewServiceDep,
    settings: SettingsDep,
    file: Optional[UploadFile] = File(None, description="Video to preview"),
):
    """May answer with the unwatermarked original plus a processingNote."""
    upload = await read_upload(file, settings.max_upload_bytes)
    return await run_in_threadpool(preview_service.create_video_preview, upload)


@router.post(
    "/retry",
    response_model=PreviewResponse,
    response_model_exclude_none=True,
)
async def retry_processing(
    preview_service: PreviewServiceDep,
    retry_request: Optional[RetryRequest] = Body(None),
):
    """Re-process a stored original identified by fileId."""
    retry_request = retry_request or RetryRequest()
    return await run_in_threadpool(
        preview_service.retry_processing,
        retry_request.file_id,
        retry_request.options,
    )
