# backend/previewer/models/preview_model.py

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .processing_model import ProcessingOptions


class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> Dict:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# REQUESTS
# =============================================================================


class RetryRequest(CamelModel):
    file_id: Optional[str] = Field(None, description="Identifier of a stored original")
    options: Optional[ProcessingOptions] = None


@dataclass
class UploadedFile:
    """A single multipart upload, already read into memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


# =============================================================================
# RESPONSES
# =============================================================================


class PreviewResponse(CamelModel):
    url: str = Field(..., description="Public URL of the processed preview")
    original_url: Optional[str] = Field(None, description="Signed URL of the original")
    file_id: str = Field(..., description="Identifier usable with /retry")
    thumbnail_data: Optional[str] = Field(
        None, description="Base64 still substituted for an unwatermarked video"
    )
    processing_note: Optional[str] = Field(
        None, description="Explanation of a degraded outcome"
    )


class MessageResponse(CamelModel):
    message: str
    file_id: Optional[str] = None


class ProcessingErrorResponse(CamelModel):
    message: str
    file_id: Optional[str] = None
    original_url: Optional[str] = None
    error: str
    can_retry: bool = True


class FFmpegStatus(BaseModel):
    available: bool
    version: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    ffmpeg: FFmpegStatus


# =============================================================================
# STORAGE RECORDS
# =============================================================================


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str


@dataclass
class DownloadedObject:
    buffer: bytes
    content_type: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StoredOriginal:
    file_id: str
    key: str
    url: str


@dataclass
class OriginalFile:
    """An unprocessed upload as retained for retries. Never mutated."""

    file_id: str
    buffer: bytes
    filename: str
    mimetype: str
    key: str
    url: str
    stored_at: Optional[datetime] = None
