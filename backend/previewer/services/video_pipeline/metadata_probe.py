# backend/previewer/services/video_pipeline/metadata_probe.py
"""
Video Metadata Probe - asks ffprobe for stream dimensions and duration.

Never substitutes defaults itself; callers decide how to react to a
MetadataProbeError.
"""

from ...constants import DEFAULT_FFMPEG_TIMEOUT_SECONDS, VIDEO_EXTENSION
from ...enums import LoggerName, LogSource
from ...exceptions import MetadataProbeError
from ...models.processing_model import VideoMetadata
from ...services.logger import get_service_logger
from ...utils.temp_file_manager import TempFileManager
from .ffmpeg_utils import FFmpegCapability, parse_video_metadata, run_ffprobe

logger = get_service_logger(LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE)


class VideoMetadataProbe:
    def __init__(
        self,
        capability: FFmpegCapability,
        temp_files: TempFileManager,
        timeout: int = DEFAULT_FFMPEG_TIMEOUT_SECONDS,
    ):
        self.capability = capability
        self.temp_files = temp_files
        self.timeout = timeout

    def probe(self, original: bytes) -> VideoMetadata:
        """
        Probe an in-memory video.

        Raises:
            MetadataProbeError: ffmpeg unavailable, ffprobe failure, no video stream
        """
        if not self.capability.available:
            raise MetadataProbeError("FFmpeg not available")
        if not original:
            raise MetadataProbeError("Cannot probe an empty video buffer")

        try:
            with self.temp_files.staged(
                original, "probe", f".{VIDEO_EXTENSION}"
            ) as input_path:
                probe_data = run_ffprobe(
                    input_path, self.capability.ffprobe_path, self.timeout
                )
        except OSError as e:
            raise MetadataProbeError(
                f"Failed to get video metadata: could not stage input ({e})"
            ) from e

        metadata = parse_video_metadata(probe_data)
        logger.debug(
            "Probed video metadata",
            extra_context={
                "width": metadata.width,
                "height": metadata.height,
                "duration": metadata.duration,
            },
        )
        return metadata
