# backend/previewer/services/video_pipeline/__init__.py
"""
Video preview pipeline.

ffmpeg_utils holds pure command builders, metadata_probe wraps ffprobe and
video_preview_service runs the fallback ladder.
"""

from typing import Optional

from ...config import Settings
from ...utils.temp_file_manager import TempFileManager
from .ffmpeg_utils import FFmpegCapability, probe_ffmpeg_capability
from .metadata_probe import VideoMetadataProbe
from .video_preview_service import VideoPreviewBuilder


def create_video_preview_builder(
    settings: Settings,
    capability: FFmpegCapability,
    temp_files: Optional[TempFileManager] = None,
) -> VideoPreviewBuilder:
    """Factory wiring the video builder, its probe and temp storage."""
    temp_files = temp_files or TempFileManager()
    metadata_probe = VideoMetadataProbe(
        capability=capability,
        temp_files=temp_files,
        timeout=settings.ffmpeg_timeout_seconds,
    )
    return VideoPreviewBuilder(
        capability=capability,
        watermark_path=settings.watermark_file,
        metadata_probe=metadata_probe,
        temp_files=temp_files,
        video_bitrate=settings.video_bitrate,
        audio_bitrate=settings.audio_bitrate,
        preset=settings.video_preset,
        watermark_ratio=settings.video_watermark_ratio,
        strict_metadata_probe=settings.strict_metadata_probe,
        ffmpeg_timeout=settings.ffmpeg_timeout_seconds,
        placeholder_thumbnail=settings.video_placeholder_thumbnail,
    )


__all__ = [
    "FFmpegCapability",
    "VideoMetadataProbe",
    "VideoPreviewBuilder",
    "create_video_preview_builder",
    "probe_ffmpeg_capability",
]
