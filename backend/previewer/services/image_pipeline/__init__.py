# backend/previewer/services/image_pipeline/__init__.py
"""Image preview pipeline."""

from ...config import Settings
from .image_preview_service import ImagePreviewBuilder


def create_image_preview_builder(settings: Settings) -> ImagePreviewBuilder:
    """Factory wiring the image builder to configured defaults."""
    return ImagePreviewBuilder(
        watermark_path=settings.watermark_file,
        width=settings.image_width,
        height=settings.image_height,
        quality=settings.image_quality,
        watermark_width=settings.image_watermark_width,
    )


__all__ = ["ImagePreviewBuilder", "create_image_preview_builder"]
