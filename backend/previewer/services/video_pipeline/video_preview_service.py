# backend/previewer/services/video_pipeline/video_preview_service.py
"""
Video Preview Builder - watermarks uploaded videos with ffmpeg.

The builder walks a fallback ladder and reports a tagged outcome:

    CleanOutcome     watermarked MP4 produced by ffmpeg
    DegradedOutcome  original bytes returned with an explanatory note
    FailedOutcome    nothing playable can be returned

Only an empty input, a strict-mode probe failure or a failure to stage the
input on disk ends in FailedOutcome. Everything else degrades so the
caller always gets playable media.
"""

from pathlib import Path
from typing import Callable, Optional

from ...constants import (
    DEFAULT_AUDIO_BITRATE,
    DEFAULT_FFMPEG_TIMEOUT_SECONDS,
    DEFAULT_VIDEO_BITRATE,
    DEFAULT_VIDEO_HEIGHT,
    DEFAULT_VIDEO_PRESET,
    DEFAULT_VIDEO_WIDTH,
    NOTE_FFMPEG_PROCESSING_ERROR,
    NOTE_FFMPEG_SETUP_ERROR,
    NOTE_FFMPEG_UNAVAILABLE,
    NOTE_WATERMARK_MISSING,
    VIDEO_CONTENT_TYPE,
    VIDEO_EXTENSION,
    VIDEO_WATERMARK_RATIO,
)
from ...enums import LogEmoji, LoggerName, LogSource
from ...exceptions import MetadataProbeError, VideoProcessingError
from ...models.processing_model import (
    CleanOutcome,
    DegradedOutcome,
    FailedOutcome,
    ProcessingOptions,
    ProcessingResult,
    VideoMetadata,
    VideoOutcome,
)
from ..logger import get_service_logger
from ...utils.temp_file_manager import TempFileManager
from ..image_pipeline.image_utils import render_placeholder_still
from .ffmpeg_utils import (
    FFmpegCapability,
    build_watermark_command,
    compute_watermark_width,
    execute_ffmpeg_command,
    resolve_video_bitrate,
)
from .metadata_probe import VideoMetadataProbe

logger = get_service_logger(
    LoggerName.VIDEO_PIPELINE, LogSource.PIPELINE, default_emoji=LogEmoji.VIDEO
)

PlaceholderRenderer = Callable[[Optional[Path]], str]


class VideoPreviewBuilder:
    """
    Watermark videos, degrading to the original when ffmpeg cannot help.

    The ffmpeg capability is computed once at startup and injected here;
    the builder never probes the system itself.
    """

    def __init__(
        self,
        capability: FFmpegCapability,
        watermark_path: Path,
        metadata_probe: VideoMetadataProbe,
        temp_files: TempFileManager,
        video_bitrate: str = DEFAULT_VIDEO_BITRATE,
        audio_bitrate: str = DEFAULT_AUDIO_BITRATE,
        preset: str = DEFAULT_VIDEO_PRESET,
        watermark_ratio: float = VIDEO_WATERMARK_RATIO,
        strict_metadata_probe: bool = False,
        ffmpeg_timeout: int = DEFAULT_FFMPEG_TIMEOUT_SECONDS,
        placeholder_thumbnail: bool = True,
        placeholder_renderer: PlaceholderRenderer = render_placeholder_still,
    ):
        self.capability = capability
        self.watermark_path = Path(watermark_path)
        self.metadata_probe = metadata_probe
        self.temp_files = temp_files
        self.video_bitrate = video_bitrate
        self.audio_bitrate = audio_bitrate
        self.preset = preset
        self.watermark_ratio = watermark_ratio
        self.strict_metadata_probe = strict_metadata_probe
        self.ffmpeg_timeout = ffmpeg_timeout
        self.placeholder_thumbnail = placeholder_thumbnail
        self.placeholder_renderer = placeholder_renderer

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def build(
        self, original: bytes, options: Optional[ProcessingOptions] = None
    ) -> ProcessingResult:
        """
        Run the ladder and collapse its outcome into a ProcessingResult.

        Raises:
            VideoProcessingError: the ladder ended in FailedOutcome
        """
        outcome = self.process(original, options)

        if isinstance(outcome, FailedOutcome):
            raise VideoProcessingError(outcome.reason)

        if isinstance(outcome, DegradedOutcome):
            metadata = {"processingNote": outcome.note}
            if outcome.thumbnail:
                metadata["watermarkedThumbnail"] = outcome.thumbnail
            return ProcessingResult(
                buffer=outcome.buffer,
                content_type=VIDEO_CONTENT_TYPE,
                extension=VIDEO_EXTENSION,
                metadata=metadata,
            )

        return ProcessingResult(
            buffer=outcome.buffer,
            content_type=VIDEO_CONTENT_TYPE,
            extension=VIDEO_EXTENSION,
        )

    def process(
        self, original: bytes, options: Optional[ProcessingOptions] = None
    ) -> VideoOutcome:
        options = options or ProcessingOptions()

        if not original:
            logger.error("Rejected empty video buffer")
            return FailedOutcome("Invalid input video buffer")

        if not self.capability.available:
            logger.warning(
                "FFmpeg not available, returning original video",
                extra_context={"reason": self.capability.reason},
            )
            return self._degrade(original, NOTE_FFMPEG_UNAVAILABLE, with_thumbnail=True)

        if not self.watermark_path.is_file():
            logger.warning(
                "Watermark file not found, returning original video",
                extra_context={"watermark_path": str(self.watermark_path)},
            )
            return self._degrade(original, NOTE_WATERMARK_MISSING, with_thumbnail=True)

        try:
            metadata = self.metadata_probe.probe(original)
        except MetadataProbeError as e:
            if self.strict_metadata_probe:
                logger.error("Metadata probe failed in strict mode", exception=e)
                return FailedOutcome(str(e))
            logger.warning(
                f"Metadata probe failed, using default dimensions: {e}",
                extra_context={
                    "default_width": DEFAULT_VIDEO_WIDTH,
                    "default_height": DEFAULT_VIDEO_HEIGHT,
                },
            )
            metadata = VideoMetadata(
                width=DEFAULT_VIDEO_WIDTH, height=DEFAULT_VIDEO_HEIGHT, duration=0
            )

        watermark_width = compute_watermark_width(metadata.width, self.watermark_ratio)
        video_bitrate = resolve_video_bitrate(options.quality, self.video_bitrate)

        return self._transcode(original, watermark_width, video_bitrate)

    # -------------------------------------------------------------------------
    # Ladder steps
    # -------------------------------------------------------------------------

    def _transcode(
        self, original: bytes, watermark_width: int, video_bitrate: str
    ) -> VideoOutcome:
        input_path: Optional[Path] = None
        output_path: Optional[Path] = None

        try:
            try:
                input_path = self.temp_files.write_work_file(
                    original, "input", f".{VIDEO_EXTENSION}"
                )
                output_path = self.temp_files.create_work_path(
                    "output", f".{VIDEO_EXTENSION}"
                )
            except OSError as e:
                logger.error("Could not stage video for transcoding", exception=e)
                return FailedOutcome(f"Failed to stage video for processing: {e}")

            cmd = build_watermark_command(
                input_path=input_path,
                watermark_path=self.watermark_path,
                output_path=output_path,
                watermark_width=watermark_width,
                video_bitrate=video_bitrate,
                audio_bitrate=self.audio_bitrate,
                preset=self.preset,
                ffmpeg_path=self.capability.ffmpeg_path,
            )

            logger.debug(
                "Transcoding video with watermark",
                emoji=LogEmoji.PROCESSING,
                extra_context={
                    "watermark_width": watermark_width,
                    "video_bitrate": video_bitrate,
                },
            )

            success, detail = execute_ffmpeg_command(cmd, self.ffmpeg_timeout)
            if not success:
                return self._degrade(
                    original, NOTE_FFMPEG_PROCESSING_ERROR.format(reason=detail)
                )

            try:
                output = output_path.read_bytes()
            except OSError as e:
                return self._degrade(
                    original, NOTE_FFMPEG_SETUP_ERROR.format(reason=f"no output file ({e})")
                )

            if not output:
                return self._degrade(
                    original, NOTE_FFMPEG_SETUP_ERROR.format(reason="empty output file")
                )

            logger.info(
                "Video processing completed successfully",
                emoji=LogEmoji.SUCCESS,
                extra_context={"bytes_in": len(original), "bytes_out": len(output)},
            )
            return CleanOutcome(output)

        finally:
            self.temp_files.cleanup(input_path, output_path)

    def _degrade(
        self, original: bytes, note: str, with_thumbnail: bool = False
    ) -> DegradedOutcome:
        logger.warning(note)
        thumbnail = None
        if with_thumbnail and self.placeholder_thumbnail:
            thumbnail = self._render_placeholder()
        return DegradedOutcome(buffer=original, note=note, thumbnail=thumbnail)

    def _render_placeholder(self) -> Optional[str]:
        watermark = self.watermark_path if self.watermark_path.is_file() else None
        try:
            return self.placeholder_renderer(watermark)
        except Exception as e:
            logger.warning(
                f"Could not render placeholder thumbnail: {e}",
                emoji=LogEmoji.THUMBNAIL,
            )
            return None
