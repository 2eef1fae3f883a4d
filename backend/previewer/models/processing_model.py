# backend/previewer/models/processing_model.py
"""
Media processing models.

Options accepted by the builders, the result they hand back to the
orchestrator and the tagged outcomes of the video fallback ladder.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..enums import ProcessingOutcomeStatus


class ProcessingOptions(BaseModel):
    """
    Optional overrides for a single processing run.

    quality means WebP quality (1-100) for images and the video bitrate in
    kbps for videos. width/height only apply to images.
    """

    quality: Optional[int] = Field(None, gt=0, description="Encoder quality")
    width: Optional[int] = Field(None, gt=0, description="Target image width")
    height: Optional[int] = Field(None, gt=0, description="Target image height")

    model_config = ConfigDict(extra="ignore")


class VideoMetadata(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    duration: float = Field(default=0.0, ge=0)


@dataclass
class ProcessingResult:
    """Encoded output of an image or video builder."""

    buffer: bytes
    content_type: str
    extension: str
    # processingNote / watermarkedThumbnail; None on a clean success
    metadata: Optional[Dict[str, Any]] = None

    @property
    def processing_note(self) -> Optional[str]:
        return (self.metadata or {}).get("processingNote")

    @property
    def watermarked_thumbnail(self) -> Optional[str]:
        return (self.metadata or {}).get("watermarkedThumbnail")


# =============================================================================
# VIDEO FALLBACK LADDER OUTCOMES
# =============================================================================


@dataclass(frozen=True)
class CleanOutcome:
    """Watermarked video produced by ffmpeg."""

    buffer: bytes
    status: ProcessingOutcomeStatus = field(
        default=ProcessingOutcomeStatus.CLEAN, init=False
    )


@dataclass(frozen=True)
class DegradedOutcome:
    """Original bytes returned unmodified, annotated with the reason."""

    buffer: bytes
    note: str
    thumbnail: Optional[str] = None
    status: ProcessingOutcomeStatus = field(
        default=ProcessingOutcomeStatus.DEGRADED, init=False
    )


@dataclass(frozen=True)
class FailedOutcome:
    """Processing could not produce any playable media."""

    reason: str
    status: ProcessingOutcomeStatus = field(
        default=ProcessingOutcomeStatus.FAILED, init=False
    )


VideoOutcome = Union[CleanOutcome, DegradedOutcome, FailedOutcome]
