# backend/previewer/constants.py
"""
Application constants.

Defaults for processing, storage key layout and the user-facing messages
returned by the preview endpoints.
"""

# =============================================================================
# IMAGE PROCESSING
# =============================================================================

DEFAULT_IMAGE_WIDTH = 1920
DEFAULT_IMAGE_HEIGHT = 1080
DEFAULT_IMAGE_QUALITY = 80
IMAGE_WATERMARK_WIDTH = 200
IMAGE_MIN_QUALITY = 1
IMAGE_MAX_QUALITY = 100

IMAGE_CONTENT_TYPE = "image/webp"
IMAGE_EXTENSION = "webp"

# =============================================================================
# VIDEO PROCESSING
# =============================================================================

DEFAULT_VIDEO_PRESET = "veryfast"
DEFAULT_VIDEO_BITRATE = "500k"
DEFAULT_AUDIO_BITRATE = "64k"
VIDEO_WATERMARK_RATIO = 0.15

# Used when ffprobe cannot tell us the real dimensions
DEFAULT_VIDEO_WIDTH = 1920
DEFAULT_VIDEO_HEIGHT = 1080

VIDEO_CONTENT_TYPE = "video/mp4"
VIDEO_EXTENSION = "mp4"

DEFAULT_FFMPEG_TIMEOUT_SECONDS = 600
DEFAULT_FFMPEG_VERSION_TIMEOUT_SECONDS = 10

PLACEHOLDER_THUMBNAIL_SIZE = (640, 360)
PLACEHOLDER_THUMBNAIL_BACKGROUND = (24, 24, 27)
PLACEHOLDER_THUMBNAIL_TEXT_COLOR = (235, 235, 235)
PLACEHOLDER_THUMBNAIL_CAPTION = "Video preview"
PLACEHOLDER_THUMBNAIL_QUALITY = 80

FFMPEG_INSTALL_GUIDANCE = (
    "Installation instructions:\n"
    "- macOS: brew install ffmpeg\n"
    "- Ubuntu/Debian: sudo apt update && sudo apt install ffmpeg\n"
    "- Windows: Download from https://ffmpeg.org/download.html and add to PATH"
)

NOTE_FFMPEG_UNAVAILABLE = (
    "Original video returned without watermark - ffmpeg not available. "
    "Please install ffmpeg to enable video watermarking."
)
NOTE_WATERMARK_MISSING = (
    "Original video returned without watermark - watermark file not found"
)
NOTE_FFMPEG_PROCESSING_ERROR = (
    "Original video returned without watermark - ffmpeg processing error: {reason}"
)
NOTE_FFMPEG_SETUP_ERROR = (
    "Original video returned without watermark - ffmpeg setup error: {reason}"
)

# =============================================================================
# STORAGE
# =============================================================================

ORIGINALS_PREFIX = "originals"
DEFAULT_ORIGINAL_EXTENSION = "bin"
DEFAULT_ORIGINAL_MIMETYPE = "application/octet-stream"
DEFAULT_SIGNED_URL_EXPIRY_SECONDS = 3600

# S3 user metadata keys (S3 lower-cases them on read)
METADATA_ORIGINAL_NAME = "original-name"
METADATA_ORIGINAL_MIMETYPE = "original-mimetype"
METADATA_STORED_AT = "stored-at"
METADATA_FILE_ID = "file-id"
METADATA_IS_RETRY = "is-retry"

ACL_PUBLIC_READ = "public-read"
ACL_PRIVATE = "private"

# =============================================================================
# HTTP
# =============================================================================

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
# Room for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD_BYTES = 64 * 1024

MESSAGE_NO_FILE = "No file uploaded"
MESSAGE_NO_FILE_ID = "No fileId provided"
MESSAGE_UNSUPPORTED_TYPE = "Unsupported file type"
MESSAGE_EXPECTED_IMAGE = "Unsupported file type - expected image"
MESSAGE_EXPECTED_VIDEO = "Unsupported file type - expected video"
MESSAGE_UNSUPPORTED_RETRY_TYPE = "Unsupported file type for retry"
MESSAGE_PROCESSING_FILE_ERROR = "Error processing file"
MESSAGE_PROCESSING_IMAGE_ERROR = "Error processing image"
MESSAGE_PROCESSING_VIDEO_ERROR = "Error processing video"
MESSAGE_RETRY_ERROR = "Error retrying file processing"
MESSAGE_INTERNAL_ERROR = "Internal server error"
MESSAGE_FILE_TOO_LARGE = "File too large"

APP_VERSION = "1.0.0"
