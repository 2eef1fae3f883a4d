# backend/previewer/services/preview_service.py
"""
Preview Service - orchestrates upload -> retain original -> process -> publish.

Error tiers raised from here:
    InvalidRequestError         400, nothing retryable
    RecoverableProcessingError  500 with canRetry, original already stored
    anything else (StorageError included) propagates as an internal error
"""

from typing import Optional
from urllib.parse import quote

from ..config import Settings
from ..constants import (
    MESSAGE_EXPECTED_IMAGE,
    MESSAGE_EXPECTED_VIDEO,
    MESSAGE_NO_FILE,
    MESSAGE_NO_FILE_ID,
    MESSAGE_PROCESSING_FILE_ERROR,
    MESSAGE_PROCESSING_IMAGE_ERROR,
    MESSAGE_PROCESSING_VIDEO_ERROR,
    MESSAGE_RETRY_ERROR,
    MESSAGE_UNSUPPORTED_RETRY_TYPE,
    MESSAGE_UNSUPPORTED_TYPE,
    METADATA_FILE_ID,
    METADATA_IS_RETRY,
    METADATA_ORIGINAL_NAME,
)
from ..enums import LogEmoji, LoggerName, LogSource, MediaFamily
from ..exceptions import (
    InvalidRequestError,
    ProcessingError,
    RecoverableProcessingError,
    StorageError,
)
from ..models.preview_model import PreviewResponse, StoredOriginal, UploadedFile
from ..models.processing_model import ProcessingOptions, ProcessingResult
from ..utils.file_helpers import filename_stem
from ..utils.time_utils import unix_millis
from .image_pipeline import ImagePreviewBuilder, create_image_preview_builder
from .logger import get_service_logger
from .original_file_service import OriginalFileService
from .storage_service import StorageService, create_storage_service
from .video_pipeline import VideoPreviewBuilder, create_video_preview_builder
from .video_pipeline.ffmpeg_utils import FFmpegCapability

logger = get_service_logger(LoggerName.PREVIEW_SERVICE, LogSource.PIPELINE)


def preview_key(filename: str, extension: str) -> str:
    """<unixMillis>-<stem>.<ext>"""
    return f"{unix_millis()}-{filename_stem(filename)}.{extension}"


class PreviewService:
    """
    Entry point for every preview operation exposed over HTTP.

    All methods are synchronous; routers run them in a worker thread.
    """

    def __init__(
        self,
        storage: StorageService,
        originals: OriginalFileService,
        image_builder: ImagePreviewBuilder,
        video_builder: VideoPreviewBuilder,
        public_bucket: str,
    ):
        self.storage = storage
        self.originals = originals
        self.image_builder = image_builder
        self.video_builder = video_builder
        self.public_bucket = public_bucket

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def create_preview(self, upload: Optional[UploadedFile]) -> PreviewResponse:
        """
        Legacy endpoint: any image or video.

        The original is retained before the type check, so an unsupported
        upload is rejected with its fileId.
        """
        self._require_upload(upload)
        stored = self._store_original(upload)

        family = MediaFamily.from_mimetype(upload.content_type)
        if family == MediaFamily.UNSUPPORTED:
            logger.warning(
                f"Unsupported file type: {upload.content_type}",
                extra_context={"file_id": stored.file_id},
            )
            raise InvalidRequestError(MESSAGE_UNSUPPORTED_TYPE, file_id=stored.file_id)

        return self._process_and_publish(
            upload.data,
            upload.filename,
            family,
            stored.file_id,
            stored.url,
            MESSAGE_PROCESSING_FILE_ERROR,
        )

    def create_image_preview(self, upload: Optional[UploadedFile]) -> PreviewResponse:
        return self._create_typed_preview(
            upload, MediaFamily.IMAGE, MESSAGE_EXPECTED_IMAGE, MESSAGE_PROCESSING_IMAGE_ERROR
        )

    def create_video_preview(self, upload: Optional[UploadedFile]) -> PreviewResponse:
        return self._create_typed_preview(
            upload, MediaFamily.VIDEO, MESSAGE_EXPECTED_VIDEO, MESSAGE_PROCESSING_VIDEO_ERROR
        )

    def retry_processing(
        self, file_id: Optional[str], options: Optional[ProcessingOptions] = None
    ) -> PreviewResponse:
        """
        Re-run processing for a retained original with adjusted options.

        Lookup failures are reported as retryable so the client can try again.
        """
        if not file_id:
            raise InvalidRequestError(MESSAGE_NO_FILE_ID)

        logger.info(
            "Retrying file processing",
            emoji=LogEmoji.RETRY,
            extra_context={"file_id": file_id, "options": _options_context(options)},
        )

        try:
            original = self.originals.fetch(file_id)
        except StorageError as e:
            logger.error(f"Could not fetch original {file_id}", exception=e)
            raise RecoverableProcessingError(
                MESSAGE_RETRY_ERROR, file_id=file_id, error=str(e)
            ) from e

        family = MediaFamily.from_mimetype(original.mimetype)
        if family == MediaFamily.UNSUPPORTED:
            raise InvalidRequestError(
                MESSAGE_UNSUPPORTED_RETRY_TYPE, file_id=original.file_id
            )

        return self._process_and_publish(
            original.buffer,
            original.filename,
            family,
            original.file_id,
            original.url,
            MESSAGE_RETRY_ERROR,
            options=options,
            is_retry=True,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _require_upload(upload: Optional[UploadedFile]) -> None:
        if upload is None:
            raise InvalidRequestError(MESSAGE_NO_FILE)

    def _store_original(self, upload: UploadedFile) -> StoredOriginal:
        logger.info(
            f"Received {upload.filename}",
            emoji=LogEmoji.INCOMING,
            extra_context={"content_type": upload.content_type, "size": upload.size},
        )
        return self.originals.store(upload.data, upload.filename, upload.content_type)

    def _create_typed_preview(
        self,
        upload: Optional[UploadedFile],
        expected: MediaFamily,
        mismatch_message: str,
        error_message: str,
    ) -> PreviewResponse:
        self._require_upload(upload)
        if MediaFamily.from_mimetype(upload.content_type) != expected:
            raise InvalidRequestError(mismatch_message)

        stored = self._store_original(upload)
        return self._process_and_publish(
            upload.data, upload.filename, expected, stored.file_id, stored.url, error_message
        )

    def _build(
        self,
        family: MediaFamily,
        buffer: bytes,
        options: Optional[ProcessingOptions],
    ) -> ProcessingResult:
        if family == MediaFamily.IMAGE:
            return self.image_builder.build(buffer, options)
        return self.video_builder.build(buffer, options)

    def _process_and_publish(
        self,
        buffer: bytes,
        filename: str,
        family: MediaFamily,
        file_id: str,
        original_url: str,
        error_message: str,
        options: Optional[ProcessingOptions] = None,
        is_retry: bool = False,
    ) -> PreviewResponse:
        try:
            result = self._build(family, buffer, options)
        except ProcessingError as e:
            logger.error(
                f"{error_message}: {e}",
                exception=e,
                error_context={"file_id": file_id, "family": family.value},
            )
            raise RecoverableProcessingError(
                error_message, file_id=file_id, error=str(e), original_url=original_url
            ) from e

        metadata = {
            METADATA_FILE_ID: file_id,
            METADATA_ORIGINAL_NAME: quote(filename or "", safe=""),
        }
        if is_retry:
            metadata[METADATA_IS_RETRY] = "true"

        stored = self.storage.upload(
            bucket=self.public_bucket,
            key=preview_key(filename, result.extension),
            buffer=result.buffer,
            content_type=result.content_type,
            is_public=True,
            metadata=metadata,
        )

        logger.info(
            "Preview published",
            emoji=LogEmoji.SUCCESS,
            extra_context={
                "file_id": file_id,
                "key": stored.key,
                "degraded": result.processing_note is not None,
            },
        )

        return PreviewResponse(
            url=stored.url,
            original_url=original_url,
            file_id=file_id,
            thumbnail_data=result.watermarked_thumbnail,
            processing_note=result.processing_note,
        )


def _options_context(options: Optional[ProcessingOptions]) -> dict:
    if options is None:
        return {}
    return options.model_dump(exclude_none=True)


def create_preview_service(
    settings: Settings,
    capability: FFmpegCapability,
    storage: Optional[StorageService] = None,
) -> PreviewService:
    """
    Wire the orchestrator and its collaborators from settings.

    storage may be injected (tests use an in-memory fake).
    """
    if storage is None:
        storage = create_storage_service(settings)
    return PreviewService(
        storage=storage,
        originals=OriginalFileService(storage, settings.originals_bucket),
        image_builder=create_image_preview_builder(settings),
        video_builder=create_video_preview_builder(settings, capability),
        public_bucket=settings.wasabi_public_bucket,
    )
