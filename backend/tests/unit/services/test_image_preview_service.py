#!/usr/bin/env python3
"""
Unit tests for ImagePreviewBuilder and the Pillow helpers behind it.
"""

import io
from pathlib import Path

import pytest
from PIL import Image, ImageStat

from previewer.exceptions import ImageProcessingError
from previewer.models.processing_model import ProcessingOptions
from previewer.services.image_pipeline.image_preview_service import ImagePreviewBuilder
from previewer.services.image_pipeline.image_utils import (
    composite_centered,
    resize_contain,
    scale_to_width,
)


SHIPPED_WATERMARK = Path(__file__).resolve().parents[4] / "public" / "watermark.png"


def decode(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


@pytest.mark.unit
@pytest.mark.image
class TestImagePreviewBuilder:
    """Test suite for the image preview builder."""

    @pytest.fixture
    def builder(self, watermark_path):
        return ImagePreviewBuilder(watermark_path=watermark_path)

    # ============================================================================
    # OUTPUT SHAPE
    # ============================================================================

    def test_output_is_webp_at_default_size(self, builder, sample_jpeg_bytes):
        result = builder.build(sample_jpeg_bytes)

        assert result.content_type == "image/webp"
        assert result.extension == "webp"
        assert result.metadata is None
        preview = decode(result.buffer)
        assert preview.format == "WEBP"
        assert preview.size == (1920, 1080)

    def test_options_override_target_size(self, builder, sample_jpeg_bytes):
        result = builder.build(sample_jpeg_bytes, ProcessingOptions(width=800, height=600))

        assert decode(result.buffer).size == (800, 600)

    def test_constructor_defaults_apply(self, watermark_path, sample_jpeg_bytes):
        builder = ImagePreviewBuilder(watermark_path=watermark_path, width=640, height=480)

        assert decode(builder.build(sample_jpeg_bytes).buffer).size == (640, 480)

    def test_portrait_input_is_padded_transparently(self, builder, image_bytes):
        portrait = image_bytes(size=(300, 900), color="red", image_format="PNG")

        preview = decode(builder.build(portrait).buffer).convert("RGBA")

        # Left edge lies outside the contained image
        assert preview.getpixel((5, 540))[3] < 10

    def test_watermark_is_composited_in_the_centre(self, builder, image_bytes):
        source = image_bytes(size=(1920, 1080), color=(0, 0, 255))

        preview = decode(builder.build(source).buffer).convert("RGB")

        red, green, blue = preview.getpixel((960, 540))
        assert red > 200 and green > 200
        # Far from the centre the source shows through
        assert preview.getpixel((100, 540))[2] > 200
        assert preview.getpixel((100, 540))[0] < 60

    def test_shipped_watermark_is_visible(self, image_bytes):
        with Image.open(SHIPPED_WATERMARK) as mark:
            assert mark.width > 1 and mark.height > 1
            assert mark.convert("RGBA").getextrema()[3][1] > 128

        builder = ImagePreviewBuilder(watermark_path=str(SHIPPED_WATERMARK))
        source = image_bytes(size=(1920, 1080), color=(0, 0, 255))

        preview = decode(builder.build(source).buffer).convert("RGB")

        red, _, blue = ImageStat.Stat(preview.crop((860, 515, 1060, 565))).mean
        assert red > 40
        assert blue < 230

    def test_quality_changes_output_size(self, builder):
        noise = io.BytesIO()
        Image.effect_noise((640, 360), 64).convert("RGB").save(noise, format="PNG")

        low = builder.build(noise.getvalue(), ProcessingOptions(quality=5))
        high = builder.build(noise.getvalue(), ProcessingOptions(quality=100))

        assert len(low.buffer) < len(high.buffer)

    def test_quality_is_clamped(self, watermark_path):
        assert ImagePreviewBuilder(watermark_path, quality=500).quality == 100
        assert ImagePreviewBuilder(watermark_path, quality=-3).quality == 1

    # ============================================================================
    # FAILURES
    # ============================================================================

    def test_corrupt_input_raises(self, builder):
        with pytest.raises(ImageProcessingError, match="Failed to process image"):
            builder.build(b"definitely not an image")

    def test_empty_input_raises(self, builder):
        with pytest.raises(ImageProcessingError, match="Invalid input image buffer"):
            builder.build(b"")

    def test_missing_watermark_raises(self, temp_dir, sample_jpeg_bytes):
        builder = ImagePreviewBuilder(watermark_path=temp_dir / "missing.png")

        with pytest.raises(ImageProcessingError, match="Failed to process image"):
            builder.build(sample_jpeg_bytes)


@pytest.mark.unit
@pytest.mark.image
class TestImageUtils:
    def test_resize_contain_keeps_aspect_ratio(self):
        image = Image.new("RGB", (400, 200), "green")

        canvas = resize_contain(image, 200, 200)

        assert canvas.size == (200, 200)
        assert canvas.mode == "RGBA"
        # 400x200 fits as 200x100, centred vertically
        assert canvas.getpixel((100, 10))[3] == 0
        assert canvas.getpixel((100, 100))[3] == 255

    def test_scale_to_width(self):
        scaled = scale_to_width(Image.new("RGBA", (400, 100)), 200)
        assert scaled.size == (200, 50)

    def test_scale_to_width_upscales_small_watermarks(self):
        scaled = scale_to_width(Image.new("RGBA", (1, 1)), 200)
        assert scaled.size == (200, 200)

    def test_composite_centered(self):
        base = Image.new("RGBA", (100, 100), (0, 0, 0, 255))
        overlay = Image.new("RGBA", (20, 20), (255, 255, 255, 255))

        result = composite_centered(base, overlay)

        assert result.getpixel((50, 50)) == (255, 255, 255, 255)
        assert result.getpixel((10, 10)) == (0, 0, 0, 255)

    def test_composite_shrinks_oversized_overlay(self):
        base = Image.new("RGBA", (50, 50), (0, 0, 0, 255))
        overlay = Image.new("RGBA", (200, 100), (255, 255, 255, 255))

        result = composite_centered(base, overlay)

        assert result.size == (50, 50)
        assert result.getpixel((25, 25)) == (255, 255, 255, 255)
