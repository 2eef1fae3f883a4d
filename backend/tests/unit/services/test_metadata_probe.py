#!/usr/bin/env python3
"""Unit tests for VideoMetadataProbe (ffprobe mocked)."""

from unittest.mock import patch

import pytest

from previewer.exceptions import MetadataProbeError
from previewer.services.video_pipeline.metadata_probe import VideoMetadataProbe

RUN_FFPROBE = "previewer.services.video_pipeline.metadata_probe.run_ffprobe"

PROBE_DOCUMENT = {
    "streams": [{"codec_type": "video", "width": 1280, "height": 720, "duration": "3.0"}],
    "format": {"duration": "3.0"},
}


@pytest.mark.unit
@pytest.mark.video
class TestVideoMetadataProbe:
    def test_unavailable_ffmpeg_raises(self, ffmpeg_unavailable, temp_files):
        probe = VideoMetadataProbe(ffmpeg_unavailable, temp_files)

        with pytest.raises(MetadataProbeError, match="FFmpeg not available"):
            probe.probe(b"video")

    def test_empty_buffer_raises(self, ffmpeg_available, temp_files):
        probe = VideoMetadataProbe(ffmpeg_available, temp_files)

        with pytest.raises(MetadataProbeError):
            probe.probe(b"")

    def test_returns_metadata_and_removes_temp_file(
        self, ffmpeg_available, temp_files, sample_video_bytes
    ):
        probe = VideoMetadataProbe(ffmpeg_available, temp_files, timeout=7)
        seen = {}

        def fake_ffprobe(path, ffprobe_path, timeout):
            seen["path"] = path
            seen["content"] = path.read_bytes()
            seen["timeout"] = timeout
            return PROBE_DOCUMENT

        with patch(RUN_FFPROBE, side_effect=fake_ffprobe):
            metadata = probe.probe(sample_video_bytes)

        assert (metadata.width, metadata.height, metadata.duration) == (1280, 720, 3.0)
        assert seen["content"] == sample_video_bytes
        assert seen["timeout"] == 7
        assert not seen["path"].exists()

    def test_temp_file_removed_when_ffprobe_fails(
        self, ffmpeg_available, temp_files, sample_video_bytes
    ):
        probe = VideoMetadataProbe(ffmpeg_available, temp_files)

        with patch(RUN_FFPROBE, side_effect=MetadataProbeError("bad container")):
            with pytest.raises(MetadataProbeError, match="bad container"):
                probe.probe(sample_video_bytes)

        assert list(temp_files.work_dir.iterdir()) == []

    def test_no_video_stream_is_an_error(
        self, ffmpeg_available, temp_files, sample_video_bytes
    ):
        probe = VideoMetadataProbe(ffmpeg_available, temp_files)

        with patch(RUN_FFPROBE, return_value={"streams": [{"codec_type": "audio"}]}):
            with pytest.raises(MetadataProbeError, match="No video stream found"):
                probe.probe(sample_video_bytes)

    def test_negative_dimensions_are_an_error(
        self, ffmpeg_available, temp_files, sample_video_bytes
    ):
        probe = VideoMetadataProbe(ffmpeg_available, temp_files)
        document = {"streams": [{"codec_type": "video", "width": -2, "height": 360}]}

        with patch(RUN_FFPROBE, return_value=document):
            with pytest.raises(MetadataProbeError, match="Invalid video dimensions"):
                probe.probe(sample_video_bytes)

    def test_staging_failure_becomes_probe_error(
        self, ffmpeg_available, temp_files, sample_video_bytes
    ):
        probe = VideoMetadataProbe(ffmpeg_available, temp_files)

        with patch.object(temp_files, "write_work_file", side_effect=OSError("disk full")):
            with pytest.raises(MetadataProbeError, match="disk full"):
                probe.probe(sample_video_bytes)
