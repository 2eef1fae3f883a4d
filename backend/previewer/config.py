# backend/previewer/config.py
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_AUDIO_BITRATE,
    DEFAULT_FFMPEG_TIMEOUT_SECONDS,
    DEFAULT_FFMPEG_VERSION_TIMEOUT_SECONDS,
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_IMAGE_WIDTH,
    DEFAULT_SIGNED_URL_EXPIRY_SECONDS,
    DEFAULT_VIDEO_BITRATE,
    DEFAULT_VIDEO_PRESET,
    IMAGE_WATERMARK_WIDTH,
    MAX_UPLOAD_BYTES,
    VIDEO_WATERMARK_RATIO,
)
from .enums import LogLevel
from .exceptions import ConfigurationError


class Settings(BaseSettings):
    environment: str = "development"

    # API
    api_host: str = Field(default="0.0.0.0", description="API host to bind to")
    api_port: int = Field(
        default=3000, ge=1, le=65535, description="API port to bind to"
    )
    api_reload: bool = Field(
        default=False, description="Enable auto-reload for development"
    )

    # ============= OBJECT STORAGE (S3-compatible) =============
    # Access key, secret key and public bucket are required; they are
    # checked by validate_required() at application startup.
    wasabi_access_key: str = Field(default="", description="Storage access key")
    wasabi_secret_key: str = Field(default="", description="Storage secret key")
    wasabi_region: str = Field(default="us-central-1", description="Storage region")
    wasabi_endpoint: str = Field(
        default="https://s3.us-central-1.wasabisys.com",
        description="S3-compatible endpoint URL",
    )
    wasabi_public_bucket: str = Field(
        default="", description="Bucket receiving public preview objects"
    )
    wasabi_private_bucket: str = Field(
        default="",
        description="Bucket receiving originals (falls back to the public bucket)",
    )
    storage_public_host: str = Field(
        default="",
        description="Host used to build public URLs (defaults to s3.<region>.wasabisys.com)",
    )
    signed_url_expiry_seconds: int = Field(
        default=DEFAULT_SIGNED_URL_EXPIRY_SECONDS,
        ge=60,
        le=7 * 24 * 3600,
        description="Lifetime of signed URLs for private originals",
    )

    @property
    def public_host(self) -> str:
        """Host part of public object URLs."""
        if self.storage_public_host:
            return self.storage_public_host.strip("/")
        return f"s3.{self.wasabi_region}.wasabisys.com"

    @property
    def originals_bucket(self) -> str:
        """Bucket where unprocessed uploads are retained."""
        return self.wasabi_private_bucket or self.wasabi_public_bucket

    # ============= PROCESSING DEFAULTS =============
    image_width: int = Field(default=DEFAULT_IMAGE_WIDTH, ge=1, le=10000)
    image_height: int = Field(default=DEFAULT_IMAGE_HEIGHT, ge=1, le=10000)
    image_quality: int = Field(default=DEFAULT_IMAGE_QUALITY, ge=1, le=100)
    image_watermark_width: int = Field(default=IMAGE_WATERMARK_WIDTH, ge=1, le=5000)

    video_preset: str = Field(default=DEFAULT_VIDEO_PRESET)
    video_bitrate: str = Field(default=DEFAULT_VIDEO_BITRATE)
    audio_bitrate: str = Field(default=DEFAULT_AUDIO_BITRATE)
    video_watermark_ratio: float = Field(default=VIDEO_WATERMARK_RATIO, gt=0, le=1)
    video_placeholder_thumbnail: bool = Field(
        default=True,
        description="Attach a placeholder still when a video cannot be watermarked",
    )
    strict_metadata_probe: bool = Field(
        default=False,
        description="Fail video processing when ffprobe cannot read the upload",
    )

    watermark_path: str = Field(
        default="public/watermark.png", description="Watermark image asset"
    )

    @property
    def watermark_file(self) -> Path:
        """Watermark path resolved against the working directory."""
        path = Path(self.watermark_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path

    # ============= TRANSCODER =============
    ffmpeg_path: str = Field(default="ffmpeg")
    ffprobe_path: str = Field(default="ffprobe")
    ffmpeg_timeout_seconds: int = Field(
        default=DEFAULT_FFMPEG_TIMEOUT_SECONDS,
        ge=5,
        le=3600,
        description="Upper bound for a single ffmpeg/ffprobe invocation",
    )
    ffmpeg_version_timeout_seconds: int = Field(
        default=DEFAULT_FFMPEG_VERSION_TIMEOUT_SECONDS, ge=1, le=120
    )

    # ============= HTTP =============
    max_upload_bytes: int = Field(default=MAX_UPLOAD_BYTES, ge=1)
    static_directory: str = Field(default="public")

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (optional)"
    )
    log_json: bool = Field(default=False, description="Serialize log records as JSON")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v) -> LogLevel:
        """Validate log level is one of the allowed values"""
        allowed_levels = LogLevel.__members__.keys()
        v_upper = str(getattr(v, "value", v)).upper()
        if v_upper not in allowed_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(allowed_levels)}"
            )
        return LogLevel[v_upper]

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values"""
        allowed_envs = ["development", "test", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {', '.join(allowed_envs)}"
            )
        return v_lower

    def missing_required(self) -> List[str]:
        """Names of required settings that are empty."""
        required = {
            "wasabi_access_key": self.wasabi_access_key,
            "wasabi_secret_key": self.wasabi_secret_key,
            "wasabi_public_bucket": self.wasabi_public_bucket,
        }
        return [key for key, value in required.items() if not value]

    def validate_required(self) -> None:
        """
        Ensure storage credentials and the public bucket are configured.

        Raises:
            ConfigurationError: listing every missing key
        """
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}"
            )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore[call-arg]
