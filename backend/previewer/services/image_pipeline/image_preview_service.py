# backend/previewer/services/image_pipeline/image_preview_service.py
"""
Image Preview Builder

Produces a fixed-size, watermarked WebP preview from an uploaded image.
Unlike the video path there is no fallback: any failure is raised.
"""

import io
from pathlib import Path
from typing import Optional

from PIL import Image as PILImage

from ...constants import (
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_IMAGE_WIDTH,
    IMAGE_CONTENT_TYPE,
    IMAGE_EXTENSION,
    IMAGE_MAX_QUALITY,
    IMAGE_MIN_QUALITY,
    IMAGE_WATERMARK_WIDTH,
)
from ...enums import LogEmoji, LoggerName, LogSource
from ...exceptions import ImageProcessingError
from ...models.processing_model import ProcessingOptions, ProcessingResult
from ...services.logger import get_service_logger
from .image_utils import (
    composite_centered,
    encode_webp,
    ensure_rgba_mode,
    load_image_from_bytes,
    load_image_from_path,
    resize_contain,
    scale_to_width,
)

logger = get_service_logger(
    LoggerName.IMAGE_PIPELINE, LogSource.PIPELINE, default_emoji=LogEmoji.IMAGE
)


class ImagePreviewBuilder:
    """
    Resize (contain) -> WebP -> centred watermark -> WebP.

    Defaults come from settings; ProcessingOptions override them per call.
    """

    def __init__(
        self,
        watermark_path: Path,
        width: int = DEFAULT_IMAGE_WIDTH,
        height: int = DEFAULT_IMAGE_HEIGHT,
        quality: int = DEFAULT_IMAGE_QUALITY,
        watermark_width: int = IMAGE_WATERMARK_WIDTH,
    ):
        self.watermark_path = Path(watermark_path)
        self.width = width
        self.height = height
        self.quality = self._clamp_quality(quality)
        self.watermark_width = watermark_width

    @staticmethod
    def _clamp_quality(quality: int) -> int:
        return max(IMAGE_MIN_QUALITY, min(IMAGE_MAX_QUALITY, int(quality)))

    def build(
        self, original: bytes, options: Optional[ProcessingOptions] = None
    ) -> ProcessingResult:
        """
        Create the watermarked preview.

        Raises:
            ImageProcessingError: corrupt input or unreadable watermark asset
        """
        options = options or ProcessingOptions()
        width = options.width or self.width
        height = options.height or self.height
        quality = self._clamp_quality(options.quality or self.quality)

        logger.debug(
            "Processing image preview",
            extra_context={"width": width, "height": height, "quality": quality},
        )

        try:
            if not original:
                raise ValueError("Invalid input image buffer")

            source = load_image_from_bytes(original)
            resized = encode_webp(resize_contain(source, width, height), quality)

            watermark = scale_to_width(
                ensure_rgba_mode(load_image_from_path(self.watermark_path)),
                self.watermark_width,
            )

            with PILImage.open(io.BytesIO(resized)) as preview:
                composed = composite_centered(preview, watermark)
            output = encode_webp(composed, quality)

        except Exception as e:
            logger.error("Error processing image", exception=e)
            raise ImageProcessingError(f"Failed to process image: {e}") from e

        logger.info(
            "Image processing completed successfully",
            extra_context={"bytes_in": len(original), "bytes_out": len(output)},
        )

        return ProcessingResult(
            buffer=output,
            content_type=IMAGE_CONTENT_TYPE,
            extension=IMAGE_EXTENSION,
        )
