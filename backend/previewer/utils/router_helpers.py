# backend/previewer/utils/router_helpers.py
"""
Router helper utilities shared by the preview endpoints.
"""

from typing import Optional

from fastapi import HTTPException, UploadFile, status

from ..constants import DEFAULT_ORIGINAL_MIMETYPE, MESSAGE_FILE_TOO_LARGE
from ..models.preview_model import UploadedFile

# Read uploads in chunks so an oversized body is rejected early
UPLOAD_CHUNK_BYTES = 1024 * 1024


async def read_upload(
    file: Optional[UploadFile], max_bytes: int
) -> Optional[UploadedFile]:
    """
    Read a multipart upload into memory.

    Returns None when no file was sent so the service can answer with its
    own "No file uploaded" message.

    Raises:
        HTTPException: 413 when the body exceeds max_bytes
    """
    if file is None:
        return None

    chunks = []
    total = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=MESSAGE_FILE_TOO_LARGE,
            )
        chunks.append(chunk)

    return UploadedFile(
        filename=file.filename or "",
        content_type=file.content_type or DEFAULT_ORIGINAL_MIMETYPE,
        data=b"".join(chunks),
    )
