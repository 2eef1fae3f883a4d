#!/usr/bin/env python3
"""Unit tests for Settings loading and validation."""

import pytest
from pydantic import ValidationError

from previewer.config import Settings
from previewer.enums import LogLevel
from previewer.exceptions import ConfigurationError


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.mark.unit
class TestSettings:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in (
            "WASABI_ACCESS_KEY",
            "WASABI_SECRET_KEY",
            "WASABI_PUBLIC_BUCKET",
            "WASABI_PRIVATE_BUCKET",
            "WASABI_REGION",
            "STORAGE_PUBLIC_HOST",
            "LOG_LEVEL",
            "ENVIRONMENT",
            "API_PORT",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_defaults(self):
        settings = make_settings()

        assert settings.api_port == 3000
        assert settings.wasabi_region == "us-central-1"
        assert settings.image_width == 1920
        assert settings.image_height == 1080
        assert settings.image_quality == 80
        assert settings.video_preset == "veryfast"
        assert settings.video_bitrate == "500k"
        assert settings.audio_bitrate == "64k"
        assert settings.log_level == LogLevel.INFO
        assert settings.strict_metadata_probe is False

    def test_environment_variables_are_read(self, monkeypatch):
        monkeypatch.setenv("WASABI_ACCESS_KEY", "AKIA")
        monkeypatch.setenv("WASABI_PUBLIC_BUCKET", "public-bucket")
        monkeypatch.setenv("API_PORT", "8080")

        settings = make_settings()

        assert settings.wasabi_access_key == "AKIA"
        assert settings.wasabi_public_bucket == "public-bucket"
        assert settings.api_port == 8080

    # ============================================================================
    # REQUIRED KEYS
    # ============================================================================

    def test_validate_required_lists_every_missing_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            make_settings().validate_required()

        message = str(exc_info.value)
        assert "wasabi_access_key" in message
        assert "wasabi_secret_key" in message
        assert "wasabi_public_bucket" in message
        assert "wasabi_private_bucket" not in message

    def test_validate_required_passes(self):
        make_settings(
            wasabi_access_key="a", wasabi_secret_key="b", wasabi_public_bucket="c"
        ).validate_required()

    # ============================================================================
    # DERIVED VALUES
    # ============================================================================

    def test_originals_bucket_falls_back_to_public(self):
        assert make_settings(wasabi_public_bucket="pub").originals_bucket == "pub"
        assert (
            make_settings(
                wasabi_public_bucket="pub", wasabi_private_bucket="priv"
            ).originals_bucket
            == "priv"
        )

    def test_public_host(self):
        assert make_settings(wasabi_region="eu-central-2").public_host == (
            "s3.eu-central-2.wasabisys.com"
        )
        assert (
            make_settings(storage_public_host="cdn.example.com/").public_host
            == "cdn.example.com"
        )

    def test_relative_watermark_resolves_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        settings = make_settings(watermark_path="public/watermark.png")

        assert settings.watermark_file == tmp_path / "public" / "watermark.png"

    # ============================================================================
    # VALIDATORS
    # ============================================================================

    def test_log_level_is_case_insensitive(self):
        assert make_settings(log_level="debug").log_level == LogLevel.DEBUG

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            make_settings(log_level="chatty")

    def test_environment_is_normalized(self):
        assert make_settings(environment="PRODUCTION").environment == "production"

    def test_invalid_environment(self):
        with pytest.raises(ValidationError, match="Invalid environment"):
            make_settings(environment="moon")

    @pytest.mark.parametrize(
        "field, value",
        [("api_port", 0), ("image_quality", 101), ("image_width", 0)],
    )
    def test_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            make_settings(**{field: value})
