# backend/previewer/services/original_file_service.py
"""
Original File Service - retains unprocessed uploads so they can be retried.

Originals live under originals/<fileId>.<ext>. The extension is not known
when a retry comes in, so lookups list by the "originals/<fileId>." prefix.
"""

import uuid
from typing import Optional
from urllib.parse import quote, unquote

from ..constants import (
    DEFAULT_ORIGINAL_EXTENSION,
    DEFAULT_ORIGINAL_MIMETYPE,
    METADATA_ORIGINAL_MIMETYPE,
    METADATA_ORIGINAL_NAME,
    METADATA_STORED_AT,
    ORIGINALS_PREFIX,
)
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import OriginalFileNotFoundError
from ..models.preview_model import OriginalFile, StoredOriginal
from ..utils.file_helpers import filename_extension
from ..utils.time_utils import parse_iso_timestamp, utc_timestamp
from .logger import get_service_logger
from .storage_service import StorageService

logger = get_service_logger(
    LoggerName.ORIGINAL_FILE_SERVICE, LogSource.STORAGE, default_emoji=LogEmoji.STORAGE
)


def original_key(file_id: str, extension: str) -> str:
    return f"{ORIGINALS_PREFIX}/{file_id}.{extension}"


def _normalize_file_id(file_id: str) -> Optional[str]:
    try:
        return str(uuid.UUID(str(file_id)))
    except (TypeError, ValueError, AttributeError):
        return None


class OriginalFileService:
    def __init__(self, storage: StorageService, bucket: str):
        self.storage = storage
        self.bucket = bucket

    def store(self, buffer: bytes, filename: str, mimetype: str) -> StoredOriginal:
        """
        Upload an original privately under a fresh identifier.

        Raises:
            StorageError: upload failed
        """
        file_id = str(uuid.uuid4())
        key = original_key(file_id, filename_extension(filename))

        metadata = {
            # S3 metadata must be ASCII
            METADATA_ORIGINAL_NAME: quote(filename or "", safe=""),
            METADATA_ORIGINAL_MIMETYPE: mimetype or DEFAULT_ORIGINAL_MIMETYPE,
            METADATA_STORED_AT: utc_timestamp(),
        }

        stored = self.storage.upload(
            bucket=self.bucket,
            key=key,
            buffer=buffer,
            content_type=mimetype or DEFAULT_ORIGINAL_MIMETYPE,
            is_public=False,
            metadata=metadata,
        )

        logger.info(
            f"Stored original {filename}",
            emoji=LogEmoji.UPLOAD,
            extra_context={"file_id": file_id, "key": key, "size": len(buffer)},
        )
        return StoredOriginal(file_id=file_id, key=key, url=stored.url)

    def fetch(self, file_id: str) -> OriginalFile:
        """
        Locate and download an original by identifier.

        Raises:
            OriginalFileNotFoundError: malformed identifier or no stored object
            StorageError: listing or download failed
        """
        normalized = _normalize_file_id(file_id)
        if normalized is None:
            raise OriginalFileNotFoundError(f"Original file not found: {file_id}")

        key = self.storage.find_first_key(
            self.bucket, f"{ORIGINALS_PREFIX}/{normalized}."
        )
        if key is None:
            raise OriginalFileNotFoundError(f"Original file not found: {file_id}")

        logger.debug(
            f"Fetching original {key}",
            emoji=LogEmoji.SEARCH,
            extra_context={"file_id": normalized},
        )

        downloaded = self.storage.download(self.bucket, key)
        metadata = {k.lower(): v for k, v in downloaded.metadata.items()}

        raw_name = metadata.get(METADATA_ORIGINAL_NAME)
        filename = (
            unquote(raw_name)
            if raw_name
            else f"{normalized}.{DEFAULT_ORIGINAL_EXTENSION}"
        )
        mimetype = (
            metadata.get(METADATA_ORIGINAL_MIMETYPE)
            or downloaded.content_type
            or DEFAULT_ORIGINAL_MIMETYPE
        )
        stored_at = metadata.get(METADATA_STORED_AT)

        return OriginalFile(
            file_id=normalized,
            buffer=downloaded.buffer,
            filename=filename,
            mimetype=mimetype,
            key=key,
            url=self.storage.signed_url(self.bucket, key),
            stored_at=parse_iso_timestamp(stored_at) if stored_at else None,
        )
