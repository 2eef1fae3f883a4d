#!/usr/bin/env python3
# backend/tests/conftest.py
"""
Pytest configuration and shared fixtures for the preview service tests.

Media is generated with Pillow, object storage is replaced by an in-memory
fake and ffmpeg is never required.
"""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from previewer.config import Settings
from previewer.exceptions import OriginalFileNotFoundError, StorageError
from previewer.models.preview_model import DownloadedObject, StoredObject
from previewer.services.preview_service import create_preview_service
from previewer.services.video_pipeline.ffmpeg_utils import FFmpegCapability
from previewer.utils.temp_file_manager import TempFileManager


# ============================================================================
# STORAGE FAKE
# ============================================================================


class InMemoryStorage:
    """Stand-in for StorageService keeping objects in a dict."""

    public_host = "s3.test-region.wasabisys.com"

    def __init__(self):
        self.objects: Dict[Tuple[str, str], DownloadedObject] = {}
        self.acls: Dict[Tuple[str, str], bool] = {}
        self.fail_uploads = False

    def public_url(self, bucket: str, key: str) -> str:
        return f"https://{bucket}.{self.public_host}/{key}"

    def signed_url(self, bucket: str, key: str) -> str:
        return f"https://signed.example.com/{bucket}/{key}?X-Amz-Expires=3600"

    def upload(
        self,
        bucket: str,
        key: str,
        buffer: bytes,
        content_type: str,
        is_public: bool = False,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StoredObject:
        if self.fail_uploads:
            raise StorageError("Failed to upload file: endpoint unreachable")
        self.objects[(bucket, key)] = DownloadedObject(
            buffer=buffer,
            content_type=content_type,
            metadata={k.lower(): v for k, v in (metadata or {}).items()},
        )
        self.acls[(bucket, key)] = is_public
        url = self.public_url(bucket, key) if is_public else self.signed_url(bucket, key)
        return StoredObject(key=key, url=url)

    def download(self, bucket: str, key: str) -> DownloadedObject:
        try:
            return self.objects[(bucket, key)]
        except KeyError:
            raise OriginalFileNotFoundError(f"File not found: {key}")

    def find_first_key(self, bucket: str, prefix: str) -> Optional[str]:
        keys = sorted(k for b, k in self.objects if b == bucket and k.startswith(prefix))
        return keys[0] if keys else None

    def keys(self, bucket: str):
        return sorted(k for b, k in self.objects if b == bucket)


# ============================================================================
# MEDIA
# ============================================================================


def make_image_bytes(
    size=(1280, 720), color="blue", image_format="JPEG", mode="RGB"
) -> bytes:
    img = Image.new(mode, size, color=color)
    draw = ImageDraw.Draw(img)
    w, h = size
    draw.rectangle([w // 8, h // 8, w - w // 8, h - h // 8], outline="yellow", width=4)
    buffer = io.BytesIO()
    img.save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def watermark_path(temp_dir):
    """Opaque white 400x100 watermark."""
    path = temp_dir / "watermark.png"
    Image.new("RGBA", (400, 100), color=(255, 255, 255, 255)).save(path, "PNG")
    return path


@pytest.fixture
def sample_jpeg_bytes():
    return make_image_bytes()


@pytest.fixture
def sample_video_bytes():
    """Not a real video; the tests that use it never decode it."""
    return b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 256


# ============================================================================
# SERVICES
# ============================================================================


@pytest.fixture
def test_settings(watermark_path, temp_dir):
    return Settings(
        _env_file=None,
        environment="test",
        wasabi_access_key="test-access-key",
        wasabi_secret_key="test-secret-key",
        wasabi_region="test-region",
        wasabi_public_bucket="previews",
        wasabi_private_bucket="originals-bucket",
        watermark_path=str(watermark_path),
        static_directory=str(temp_dir),
    )


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def temp_files(temp_dir):
    return TempFileManager(base_temp_dir=str(temp_dir))


@pytest.fixture
def ffmpeg_available():
    return FFmpegCapability(available=True, version="ffmpeg version 6.1 test")


@pytest.fixture
def ffmpeg_unavailable():
    return FFmpegCapability.unavailable("FFmpeg not found in system PATH")


@pytest.fixture
def preview_service(test_settings, ffmpeg_unavailable, memory_storage):
    return create_preview_service(test_settings, ffmpeg_unavailable, storage=memory_storage)


@pytest.fixture
def test_client(test_settings, ffmpeg_unavailable, preview_service):
    """TestClient with services injected; the lifespan is not run."""
    from previewer.dependencies import (
        get_ffmpeg_capability,
        get_preview_service,
        get_settings,
    )
    from previewer.main import app

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_preview_service] = lambda: preview_service
    app.dependency_overrides[get_ffmpeg_capability] = lambda: ffmpeg_unavailable

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def image_bytes():
    """Factory for encoded test images."""
    return make_image_bytes
