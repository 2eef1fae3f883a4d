# backend/previewer/exceptions.py
"""
Custom exceptions for the preview service.

Centralized location for all custom exception classes to avoid
duplicating exception definitions across modules.
"""

from typing import Optional

# Exception design follows the three error tiers of the HTTP surface:
# request validation (400), recoverable processing failure (500 + canRetry)
# and everything else (generic 500).


class PreviewerError(Exception):
    """Base exception for all preview-service errors."""

    pass


class ConfigurationError(PreviewerError):
    """Custom exception for configuration and validation errors."""

    pass


class InvalidRequestError(PreviewerError):
    """Client supplied an unusable request (no file, wrong media family, ...)."""

    def __init__(self, message: str, file_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.file_id = file_id


class ProcessingError(PreviewerError):
    """Base exception for media builder failures."""

    pass


class ImageProcessingError(ProcessingError):
    """Custom exception for image preview generation failures."""

    pass


class VideoProcessingError(ProcessingError):
    """Custom exception for hard video preview failures (no fallback possible)."""

    pass


class MetadataProbeError(ProcessingError):
    """Custom exception for ffprobe metadata failures."""

    pass


class RecoverableProcessingError(PreviewerError):
    """
    Processing failed after the original was safely stored.

    Carries everything the client needs to call the retry endpoint.
    """

    def __init__(
        self,
        message: str,
        file_id: Optional[str],
        error: str,
        original_url: Optional[str] = None,
    ):
        super().__init__(f"{message}: {error}")
        self.message = message
        self.file_id = file_id
        self.error = error
        self.original_url = original_url


class StorageError(PreviewerError):
    """Custom exception for object storage failures."""

    pass


class OriginalFileNotFoundError(StorageError):
    """Custom exception for when a stored original cannot be located."""

    pass
