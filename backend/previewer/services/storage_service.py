# backend/previewer/services/storage_service.py
"""
Object Storage Service - S3-compatible (Wasabi) uploads, downloads and URLs.

Wraps a boto3 S3 client. Every botocore failure leaves this module as a
StorageError so callers never need to know about botocore.
"""

from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import Settings
from ..constants import (
    ACL_PRIVATE,
    ACL_PUBLIC_READ,
    DEFAULT_SIGNED_URL_EXPIRY_SECONDS,
)
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import OriginalFileNotFoundError, StorageError
from ..models.preview_model import DownloadedObject, StoredObject
from .logger import get_service_logger

logger = get_service_logger(
    LoggerName.STORAGE_SERVICE, LogSource.STORAGE, default_emoji=LogEmoji.STORAGE
)

NOT_FOUND_ERROR_CODES = {"404", "NoSuchKey", "NotFound"}
S3_MAX_ATTEMPTS = 3


def create_s3_client(settings: Settings) -> Any:
    """Build a boto3 S3 client for the configured Wasabi endpoint."""
    session = boto3.session.Session(
        aws_access_key_id=settings.wasabi_access_key,
        aws_secret_access_key=settings.wasabi_secret_key,
    )
    config = Config(
        region_name=settings.wasabi_region,
        signature_version="s3v4",
        s3={"addressing_style": "path"},
        retries={
            "max_attempts": S3_MAX_ATTEMPTS,
            "mode": "standard",
        },
    )
    return session.client("s3", endpoint_url=settings.wasabi_endpoint, config=config)


def _error_code(exc: ClientError) -> Optional[str]:
    return exc.response.get("Error", {}).get("Code")


class StorageService:
    """
    Thin facade over the S3 API.

    Public objects are addressed by a predictable URL, private ones by a
    time-limited presigned URL.
    """

    def __init__(
        self,
        client: Any,
        region: str,
        public_host: Optional[str] = None,
        signed_url_expiry: int = DEFAULT_SIGNED_URL_EXPIRY_SECONDS,
    ):
        self.client = client
        self.region = region
        self.public_host = public_host or f"s3.{region}.wasabisys.com"
        self.signed_url_expiry = signed_url_expiry

    def public_url(self, bucket: str, key: str) -> str:
        return f"https://{bucket}.{self.public_host}/{key}"

    def signed_url(self, bucket: str, key: str) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=self.signed_url_expiry,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to sign URL for {bucket}/{key}", exception=e)
            raise StorageError(f"Failed to generate signed URL: {e}") from e

    def upload(
        self,
        bucket: str,
        key: str,
        buffer: bytes,
        content_type: str,
        is_public: bool = False,
        metadata: Optional[Dict[str, str]] = None,
    ) -> StoredObject:
        """
        Upload bytes and return where they can be read from.

        Raises:
            StorageError: the put was rejected or the endpoint is unreachable
        """
        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=buffer,
                ContentType=content_type,
                ACL=ACL_PUBLIC_READ if is_public else ACL_PRIVATE,
                Metadata=metadata or {},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(
                f"Failed to upload {bucket}/{key}",
                exception=e,
                error_context={"content_type": content_type, "size": len(buffer)},
            )
            raise StorageError(f"Failed to upload file: {e}") from e

        logger.debug(
            f"Uploaded {bucket}/{key}",
            emoji=LogEmoji.UPLOAD,
            extra_context={"size": len(buffer), "public": is_public},
        )

        url = self.public_url(bucket, key) if is_public else self.signed_url(bucket, key)
        return StoredObject(key=key, url=url)

    def download(self, bucket: str, key: str) -> DownloadedObject:
        """
        Raises:
            OriginalFileNotFoundError: no object under key
            StorageError: any other failure
        """
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
            body = response["Body"].read()
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_ERROR_CODES:
                raise OriginalFileNotFoundError(f"File not found: {key}") from e
            logger.error(f"Failed to download {bucket}/{key}", exception=e)
            raise StorageError(f"Failed to download file: {e}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to download {bucket}/{key}", exception=e)
            raise StorageError(f"Failed to download file: {e}") from e

        return DownloadedObject(
            buffer=body,
            content_type=response.get("ContentType"),
            metadata=response.get("Metadata") or {},
        )

    def find_first_key(self, bucket: str, prefix: str) -> Optional[str]:
        """Return the first key starting with prefix, or None."""
        try:
            response = self.client.list_objects_v2(
                Bucket=bucket, Prefix=prefix, MaxKeys=1
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to list {bucket}/{prefix}", exception=e)
            raise StorageError(f"Failed to list files: {e}") from e

        contents = response.get("Contents") or []
        if not contents:
            return None
        return contents[0]["Key"]


def create_storage_service(settings: Settings, client: Any = None) -> StorageService:
    if client is None:
        client = create_s3_client(settings)
    return StorageService(
        client=client,
        region=settings.wasabi_region,
        public_host=settings.public_host,
        signed_url_expiry=settings.signed_url_expiry_seconds,
    )
