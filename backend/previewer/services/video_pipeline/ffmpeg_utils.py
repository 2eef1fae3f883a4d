# backend/previewer/services/video_pipeline/ffmpeg_utils.py
"""
FFmpeg utilities for video watermarking.

Pure functions for FFmpeg/FFprobe command generation, execution and output
parsing. Nothing here holds state; the capability value returned by
probe_ffmpeg_capability() is passed explicitly to the services that need it.
"""

import json
import subprocess
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ...constants import (
    DEFAULT_FFMPEG_TIMEOUT_SECONDS,
    DEFAULT_FFMPEG_VERSION_TIMEOUT_SECONDS,
    FFMPEG_INSTALL_GUIDANCE,
    VIDEO_WATERMARK_RATIO,
)
from ...enums import LogEmoji, LoggerName, LogSource
from ...exceptions import MetadataProbeError
from ...models.processing_model import VideoMetadata
from ...services.logger import get_service_logger

logger = get_service_logger(LoggerName.FFMPEG, LogSource.PIPELINE)

# Keep log lines and error notes readable when ffmpeg dumps a wall of stderr
STDERR_TAIL_CHARS = 500


# =============================================================================
# CAPABILITY PROBE
# =============================================================================


@dataclass(frozen=True)
class FFmpegCapability:
    """Whether the transcoder can be used, computed once at startup."""

    available: bool
    version: Optional[str] = None
    reason: Optional[str] = None
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    @classmethod
    def unavailable(cls, reason: str = "FFmpeg not checked") -> "FFmpegCapability":
        return cls(available=False, reason=reason)


def test_ffmpeg_available(
    ffmpeg_path: str = "ffmpeg",
    timeout: int = DEFAULT_FFMPEG_VERSION_TIMEOUT_SECONDS,
) -> Tuple[bool, str]:
    """
    Test if FFmpeg is available on the system.

    Returns:
        Tuple of (is_available, version_or_error_message)
    """
    try:
        result = subprocess.run(
            [ffmpeg_path, "-version"], capture_output=True, text=True, timeout=timeout
        )
        if result.returncode == 0:
            version_line = result.stdout.split("\n")[0]
            return True, version_line
        else:
            return False, f"FFmpeg returned error code {result.returncode}"
    except FileNotFoundError:
        return False, "FFmpeg not found in system PATH"
    except subprocess.TimeoutExpired:
        return False, "FFmpeg version check timed out"
    except Exception as e:
        return False, f"Error checking FFmpeg: {str(e)}"


def probe_ffmpeg_capability(
    ffmpeg_path: str = "ffmpeg",
    ffprobe_path: str = "ffprobe",
    timeout: int = DEFAULT_FFMPEG_VERSION_TIMEOUT_SECONDS,
) -> FFmpegCapability:
    """
    Determine once whether video watermarking is possible.

    Absence of ffmpeg is an expected condition: it is logged with install
    guidance and reported as unavailable, never raised.
    """
    available, detail = test_ffmpeg_available(ffmpeg_path, timeout)

    if available:
        logger.info(
            "FFmpeg is available",
            emoji=LogEmoji.VIDEO,
            extra_context={"version": detail, "ffmpeg_path": ffmpeg_path},
        )
        return FFmpegCapability(
            available=True,
            version=detail,
            ffmpeg_path=ffmpeg_path,
            ffprobe_path=ffprobe_path,
        )

    logger.info(
        "FFmpeg not found or not properly configured. Video watermarking will not "
        "be available. Please install ffmpeg to enable video watermarking.",
        extra_context={"reason": detail, "ffmpeg_path": ffmpeg_path},
    )
    logger.info(FFMPEG_INSTALL_GUIDANCE)

    return FFmpegCapability(
        available=False,
        reason=detail,
        ffmpeg_path=ffmpeg_path,
        ffprobe_path=ffprobe_path,
    )


# =============================================================================
# FILTER GRAPH
# =============================================================================


@dataclass(frozen=True)
class FilterStage:
    """One node of an ffmpeg -filter_complex graph."""

    name: str
    params: str
    inputs: Tuple[str, ...] = field(default_factory=tuple)
    outputs: Tuple[str, ...] = field(default_factory=tuple)

    def render(self) -> str:
        """
        Render as ffmpeg filtergraph syntax.

        FilterStage("scale", "96:-1", ("1:v",), ("watermark",)).render()
        -> "[1:v]scale=96:-1[watermark]"
        """
        ins = "".join(f"[{label}]" for label in self.inputs)
        outs = "".join(f"[{label}]" for label in self.outputs)
        body = f"{self.name}={self.params}" if self.params else self.name
        return f"{ins}{body}{outs}"


WATERMARK_LABEL = "watermark"
OUTPUT_LABEL = "output"


def build_watermark_filter_graph(watermark_width: int) -> List[FilterStage]:
    """
    Scale the watermark input and overlay it centred on the main video.

    Args:
        watermark_width: Target watermark width in pixels (height keeps aspect)
    """
    return [
        FilterStage(
            name="scale",
            params=f"{watermark_width}:-1",
            inputs=("1:v",),
            outputs=(WATERMARK_LABEL,),
        ),
        FilterStage(
            name="overlay",
            params="x=(main_w-overlay_w)/2:y=(main_h-overlay_h)/2",
            inputs=("0:v", WATERMARK_LABEL),
            outputs=(OUTPUT_LABEL,),
        ),
    ]


def render_filter_graph(stages: Sequence[FilterStage]) -> str:
    """Join stages into a single -filter_complex argument."""
    return ";".join(stage.render() for stage in stages)


def compute_watermark_width(
    video_width: int, ratio: float = VIDEO_WATERMARK_RATIO
) -> int:
    """
    Watermark width proportional to the source resolution.

    Rounds half up, so 640 -> 96 and 1920 -> 288.
    """
    width = Decimal(str(video_width)) * Decimal(str(ratio))
    return max(1, int(width.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def resolve_video_bitrate(quality: Optional[int], default: str) -> str:
    """A supplied quality is a kbps figure; otherwise use the configured default."""
    if quality:
        return f"{quality}k"
    return default


def build_watermark_command(
    input_path: Union[str, Path],
    watermark_path: Union[str, Path],
    output_path: Union[str, Path],
    watermark_width: int,
    video_bitrate: str,
    audio_bitrate: str,
    preset: str,
    ffmpeg_path: str = "ffmpeg",
) -> List[str]:
    """
    Build the FFmpeg command that burns the watermark into a video.

    Returns:
        FFmpeg command as list of strings
    """
    filter_graph = render_filter_graph(build_watermark_filter_graph(watermark_width))

    return [
        ffmpeg_path,
        "-y",  # Overwrite output files
        "-i",
        str(input_path),
        "-i",
        str(watermark_path),
        "-filter_complex",
        filter_graph,
        "-map",
        f"[{OUTPUT_LABEL}]",
        "-map",
        "0:a?",  # Keep audio when the source has any
        "-c:v",
        "libx264",
        "-c:a",
        "aac",
        "-preset",
        preset,
        "-b:v",
        video_bitrate,
        "-b:a",
        audio_bitrate,
        "-movflags",
        "+faststart",
        "-pix_fmt",
        "yuv420p",  # Ensure compatibility
        "-f",
        "mp4",
        str(output_path),
    ]


def _stderr_tail(stderr: Optional[str]) -> str:
    text = (stderr or "").strip()
    if len(text) > STDERR_TAIL_CHARS:
        return "..." + text[-STDERR_TAIL_CHARS:]
    return text


def execute_ffmpeg_command(
    cmd: List[str], timeout: int = DEFAULT_FFMPEG_TIMEOUT_SECONDS
) -> Tuple[bool, str]:
    """
    Execute FFmpeg command with proper error handling.

    Args:
        cmd: FFmpeg command as list of strings
        timeout: Command timeout in seconds

    Returns:
        Tuple of (success, output_or_error_message)
    """
    try:
        logger.debug(f"Executing FFmpeg command: {' '.join(cmd)}")

        result = subprocess.run(
            cmd, capture_output=True, text=True, timeout=timeout, check=False
        )

        if result.returncode == 0:
            logger.debug("FFmpeg command completed successfully")
            return True, result.stdout
        else:
            error_msg = f"FFmpeg failed with code {result.returncode}"
            tail = _stderr_tail(result.stderr)
            if tail:
                error_msg += f": {tail}"
            logger.error(error_msg)
            return False, error_msg

    except subprocess.TimeoutExpired:
        error_msg = f"FFmpeg command timed out after {timeout} seconds"
        logger.error(error_msg)
        return False, error_msg
    except Exception as e:
        error_msg = f"Error executing FFmpeg command: {str(e)}"
        logger.error(error_msg)
        return False, error_msg


# =============================================================================
# FFPROBE
# =============================================================================


def build_ffprobe_command(
    input_path: Union[str, Path], ffprobe_path: str = "ffprobe"
) -> List[str]:
    return [
        ffprobe_path,
        "-v",
        "error",
        "-print_format",
        "json",
        "-show_streams",
        "-show_format",
        str(input_path),
    ]


def run_ffprobe(
    input_path: Union[str, Path],
    ffprobe_path: str = "ffprobe",
    timeout: int = DEFAULT_FFMPEG_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """
    Run ffprobe and return its parsed JSON document.

    Raises:
        MetadataProbeError: spawn failure, timeout, non-zero exit or bad JSON
    """
    cmd = build_ffprobe_command(input_path, ffprobe_path)
    try:
        result = subprocess.run(
            cmd, capture_output=True, text=True, timeout=timeout, check=False
        )
    except FileNotFoundError as e:
        raise MetadataProbeError(f"Failed to get video metadata: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise MetadataProbeError(
            f"Failed to get video metadata: ffprobe timed out after {timeout} seconds"
        ) from e

    if result.returncode != 0:
        tail = _stderr_tail(result.stderr) or f"exit code {result.returncode}"
        raise MetadataProbeError(f"Failed to get video metadata: {tail}")

    try:
        return json.loads(result.stdout or "{}")
    except json.JSONDecodeError as e:
        raise MetadataProbeError(
            f"Failed to get video metadata: unreadable ffprobe output ({e})"
        ) from e


def _as_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def parse_video_metadata(probe_data: Dict[str, Any]) -> VideoMetadata:
    """
    Extract dimensions and duration of the first video stream.

    Raises:
        MetadataProbeError: no video stream, or a stream without usable dimensions
    """
    streams = probe_data.get("streams") or []
    video_stream = next(
        (s for s in streams if s.get("codec_type") == "video"), None
    )
    if video_stream is None:
        raise MetadataProbeError("No video stream found")

    try:
        width = int(video_stream.get("width"))
        height = int(video_stream.get("height"))
    except (TypeError, ValueError):
        raise MetadataProbeError("Video stream reports no dimensions")
    if width <= 0 or height <= 0:
        raise MetadataProbeError(f"Invalid video dimensions {width}x{height}")

    duration = _as_float(video_stream.get("duration"))
    if duration is None:
        duration = _as_float((probe_data.get("format") or {}).get("duration"))

    return VideoMetadata(width=width, height=height, duration=duration or 0.0)
