#!/usr/bin/env python3
"""Unit tests for OriginalFileService using the in-memory storage fake."""

import re
import uuid

import pytest

from previewer.exceptions import OriginalFileNotFoundError
from previewer.services.original_file_service import OriginalFileService

BUCKET = "originals-bucket"
KEY_PATTERN = re.compile(r"^originals/[0-9a-f\-]{36}\.(\w+)$")


@pytest.mark.unit
@pytest.mark.storage
class TestOriginalFileService:
    @pytest.fixture
    def originals(self, memory_storage):
        return OriginalFileService(memory_storage, BUCKET)

    # ============================================================================
    # STORE
    # ============================================================================

    def test_store_generates_uuid_key_with_extension(self, originals):
        stored = originals.store(b"jpeg", "Holiday.JPG", "image/jpeg")

        assert uuid.UUID(stored.file_id)
        assert stored.key == f"originals/{stored.file_id}.jpg"
        assert KEY_PATTERN.match(stored.key)

    def test_store_is_private_with_signed_url(self, originals, memory_storage):
        stored = originals.store(b"jpeg", "a.jpg", "image/jpeg")

        assert memory_storage.acls[(BUCKET, stored.key)] is False
        assert stored.url.startswith("https://signed.example.com/")

    def test_store_writes_descriptive_metadata(self, originals, memory_storage):
        stored = originals.store(b"jpeg", "my photo.jpg", "image/jpeg")

        metadata = memory_storage.objects[(BUCKET, stored.key)].metadata
        assert metadata["original-name"] == "my%20photo.jpg"
        assert metadata["original-mimetype"] == "image/jpeg"
        assert "stored-at" in metadata

    def test_store_without_extension_uses_bin(self, originals):
        stored = originals.store(b"data", "README", "application/octet-stream")

        assert stored.key.endswith(".bin")

    def test_each_store_gets_a_new_identifier(self, originals):
        first = originals.store(b"a", "a.jpg", "image/jpeg")
        second = originals.store(b"a", "a.jpg", "image/jpeg")

        assert first.file_id != second.file_id

    # ============================================================================
    # FETCH
    # ============================================================================

    def test_round_trip_is_exact(self, originals):
        buffer = bytes(range(256)) * 4
        stored = originals.store(buffer, "Ünïcode clip.mov", "video/quicktime")

        fetched = originals.fetch(stored.file_id)

        assert fetched.buffer == buffer
        assert fetched.filename == "Ünïcode clip.mov"
        assert fetched.mimetype == "video/quicktime"
        assert fetched.file_id == stored.file_id
        assert fetched.key == stored.key
        assert fetched.stored_at is not None

    def test_fetch_unknown_identifier(self, originals):
        with pytest.raises(OriginalFileNotFoundError):
            originals.fetch(str(uuid.uuid4()))

    @pytest.mark.parametrize("file_id", ["not-a-uuid", "../secrets", "*", ""])
    def test_fetch_rejects_malformed_identifier(self, originals, file_id):
        with pytest.raises(OriginalFileNotFoundError):
            originals.fetch(file_id)

    def test_fetch_falls_back_when_metadata_missing(self, originals, memory_storage):
        file_id = str(uuid.uuid4())
        memory_storage.upload(BUCKET, f"originals/{file_id}.png", b"png", "image/png")

        fetched = originals.fetch(file_id)

        assert fetched.filename == f"{file_id}.bin"
        assert fetched.mimetype == "image/png"

    def test_fetch_falls_back_to_octet_stream(self, originals, memory_storage):
        file_id = str(uuid.uuid4())
        memory_storage.upload(BUCKET, f"originals/{file_id}.dat", b"x", "")

        assert originals.fetch(file_id).mimetype == "application/octet-stream"

    def test_fetch_accepts_uppercase_identifier(self, originals):
        stored = originals.store(b"x", "a.png", "image/png")

        assert originals.fetch(stored.file_id.upper()).file_id == stored.file_id
