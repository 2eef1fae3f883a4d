# backend/previewer/models/__init__.py

from .preview_model import (
    DownloadedObject,
    FFmpegStatus,
    HealthResponse,
    MessageResponse,
    OriginalFile,
    PreviewResponse,
    ProcessingErrorResponse,
    RetryRequest,
    StoredObject,
    StoredOriginal,
    UploadedFile,
)
from .processing_model import (
    CleanOutcome,
    DegradedOutcome,
    FailedOutcome,
    ProcessingOptions,
    ProcessingResult,
    VideoMetadata,
    VideoOutcome,
)

__all__ = [
    "CleanOutcome",
    "DegradedOutcome",
    "DownloadedObject",
    "FailedOutcome",
    "FFmpegStatus",
    "HealthResponse",
    "MessageResponse",
    "OriginalFile",
    "PreviewResponse",
    "ProcessingErrorResponse",
    "ProcessingOptions",
    "ProcessingResult",
    "RetryRequest",
    "StoredObject",
    "StoredOriginal",
    "UploadedFile",
    "VideoMetadata",
    "VideoOutcome",
]
