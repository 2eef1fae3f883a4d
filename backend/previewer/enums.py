# backend/previewer/enums.py
"""
Application Enums - Centralized enum definitions.

Kept in one module so constants, models and services can share them
without circular imports.
"""

from enum import Enum


# =============================================================================
# MEDIA PROCESSING
# =============================================================================


class MediaFamily(str, Enum):
    """Top-level MIME family an upload is dispatched on."""

    IMAGE = "image"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_mimetype(cls, mimetype: str) -> "MediaFamily":
        """Classify a declared MIME type by its prefix."""
        value = (mimetype or "").lower()
        if value.startswith("image/"):
            return cls.IMAGE
        if value.startswith("video/"):
            return cls.VIDEO
        return cls.UNSUPPORTED


class ProcessingOutcomeStatus(str, Enum):
    """Result tags for the video fallback ladder."""

    CLEAN = "clean"
    DEGRADED = "degraded"
    FAILED = "failed"


# =============================================================================
# LOGGING SYSTEM
# =============================================================================


class LogLevel(str, Enum):
    """Log level constants for centralized logging system."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogSource(str, Enum):
    """Log source constants for identifying log origins."""

    SYSTEM = "system"
    PIPELINE = "pipeline"
    STORAGE = "storage"
    MIDDLEWARE = "middleware"


class LogEmoji(str, Enum):
    """Type-safe emoji constants for log messages."""

    # Request/Response emojis
    INCOMING = "📥"
    OUTGOING = "📤"

    # Status emojis
    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    DEBUG = "🐞"
    CRITICAL = "☠️"

    # Work emojis
    PROCESSING = "🔄"
    RETRY = "🔁"

    # Media emojis
    VIDEO = "🎥"
    IMAGE = "🖼️"
    THUMBNAIL = "🖼️"

    # System emojis
    STARTUP = "🚀"
    SHUTDOWN = "🛑"
    CLEANUP = "🧹"
    STORAGE = "💾"
    UPLOAD = "☁️"
    DELETE = "🗑️"
    SEARCH = "🔍"


class LoggerName(str, Enum):
    """Logger name constants for categorizing log entries."""

    # API/Request loggers
    REQUEST_LOGGER = "request_logger"
    ERROR_HANDLER = "error_handler"
    MIDDLEWARE = "middleware"

    # Pipeline loggers
    VIDEO_PIPELINE = "video_pipeline"
    IMAGE_PIPELINE = "image_pipeline"

    # Service loggers
    PREVIEW_SERVICE = "preview_service"
    STORAGE_SERVICE = "storage_service"
    ORIGINAL_FILE_SERVICE = "original_file_service"

    # System loggers
    SYSTEM = "system"
    FFMPEG = "ffmpeg"
    UTILITY = "utility"
