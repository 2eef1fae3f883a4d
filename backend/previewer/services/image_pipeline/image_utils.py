# backend/previewer/services/image_pipeline/image_utils.py
"""
Image Utilities - Reusable Pillow operations for preview generation.

Provides decode, contain-fit resizing, watermark scaling, centred
compositing and encoding helpers shared by the image builder and the
video placeholder thumbnail.
"""

import base64
import io
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image as PILImage
from PIL import ImageDraw, ImageFont, ImageOps

from ...constants import (
    PLACEHOLDER_THUMBNAIL_BACKGROUND,
    PLACEHOLDER_THUMBNAIL_CAPTION,
    PLACEHOLDER_THUMBNAIL_QUALITY,
    PLACEHOLDER_THUMBNAIL_SIZE,
    PLACEHOLDER_THUMBNAIL_TEXT_COLOR,
    VIDEO_WATERMARK_RATIO,
)


def ensure_rgba_mode(image: PILImage.Image) -> PILImage.Image:
    """Convert image to RGBA so transparency survives compositing."""
    if image.mode != "RGBA":
        return image.convert("RGBA")
    return image


def load_image_from_bytes(data: bytes) -> PILImage.Image:
    """
    Decode an uploaded image, honouring its EXIF orientation.

    Raises:
        PIL.UnidentifiedImageError / OSError for corrupt input
    """
    image = PILImage.open(io.BytesIO(data))
    image.load()
    return ImageOps.exif_transpose(image)


def load_image_from_path(path: Union[str, Path]) -> PILImage.Image:
    with PILImage.open(path) as image:
        image.load()
        return image.copy()


def resize_contain(
    image: PILImage.Image, width: int, height: int
) -> PILImage.Image:
    """
    Fit image inside width x height preserving aspect ratio.

    The remaining area is padded with transparent pixels and the result is
    centred, so the output is always exactly width x height.
    """
    fitted = ImageOps.contain(
        ensure_rgba_mode(image), (width, height), PILImage.Resampling.LANCZOS
    )
    canvas = PILImage.new("RGBA", (width, height), (0, 0, 0, 0))
    offset = ((width - fitted.width) // 2, (height - fitted.height) // 2)
    canvas.paste(fitted, offset)
    return canvas


def scale_to_width(image: PILImage.Image, width: int) -> PILImage.Image:
    """Resize to an exact width, deriving the height from the aspect ratio."""
    original_width, original_height = image.size
    if original_width == width:
        return image
    height = max(1, round(original_height * width / original_width))
    return image.resize((width, height), PILImage.Resampling.LANCZOS)


def composite_centered(
    base: PILImage.Image, overlay: PILImage.Image
) -> PILImage.Image:
    """
    Alpha-composite overlay onto the centre of base.

    An overlay bigger than the base is shrunk to fit first.
    """
    base = ensure_rgba_mode(base).copy()
    overlay = ensure_rgba_mode(overlay)

    if overlay.width > base.width or overlay.height > base.height:
        overlay = ImageOps.contain(
            overlay, base.size, PILImage.Resampling.LANCZOS
        )

    position = ((base.width - overlay.width) // 2, (base.height - overlay.height) // 2)
    base.alpha_composite(overlay, dest=position)
    return base


def encode_webp(image: PILImage.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="WEBP", quality=quality, method=4)
    return buffer.getvalue()


def encode_jpeg(image: PILImage.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


def _text_size(
    draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont
) -> Tuple[int, int]:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return right - left, bottom - top


def render_placeholder_still(
    watermark_path: Optional[Path] = None,
    caption: str = PLACEHOLDER_THUMBNAIL_CAPTION,
    size: Tuple[int, int] = PLACEHOLDER_THUMBNAIL_SIZE,
    quality: int = PLACEHOLDER_THUMBNAIL_QUALITY,
) -> str:
    """
    Draw a stand-in still for a video that could not be watermarked.

    The frame is a solid background with a caption; the watermark is
    composited in the centre when the asset is readable. Nothing is taken
    from the real video.

    Returns:
        Base64-encoded JPEG
    """
    width, height = size
    frame = PILImage.new("RGBA", size, PLACEHOLDER_THUMBNAIL_BACKGROUND + (255,))
    caption_y = height // 2

    if watermark_path is not None and Path(watermark_path).is_file():
        watermark = scale_to_width(
            ensure_rgba_mode(load_image_from_path(watermark_path)),
            max(1, round(width * VIDEO_WATERMARK_RATIO)),
        )
        frame = composite_centered(frame, watermark)
        caption_y = min(height - 20, (height + watermark.height) // 2 + 12)

    draw = ImageDraw.Draw(frame)
    font = ImageFont.load_default()
    text_width, text_height = _text_size(draw, caption, font)
    draw.text(
        ((width - text_width) // 2, caption_y - text_height // 2),
        caption,
        fill=PLACEHOLDER_THUMBNAIL_TEXT_COLOR,
        font=font,
    )

    return base64.b64encode(encode_jpeg(frame, quality)).decode("ascii")
