#!/usr/bin/env python3
"""Unit tests for StorageService against a mocked boto3 client."""

import io
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from previewer.exceptions import OriginalFileNotFoundError, StorageError
from previewer.services.storage_service import (
    StorageService,
    create_s3_client,
    create_storage_service,
)


def client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.mark.unit
@pytest.mark.storage
class TestStorageService:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://signed.example.com/k"
        return client

    @pytest.fixture
    def storage(self, client):
        return StorageService(client, region="us-central-1", signed_url_expiry=3600)

    # ============================================================================
    # URLS
    # ============================================================================

    def test_public_url_defaults_to_region_host(self, storage):
        assert (
            storage.public_url("previews", "1-a.webp")
            == "https://previews.s3.us-central-1.wasabisys.com/1-a.webp"
        )

    def test_public_url_custom_host(self, client):
        storage = StorageService(client, region="eu", public_host="cdn.example.com")
        assert storage.public_url("b", "k") == "https://b.cdn.example.com/k"

    def test_signed_url_expires_in_configured_seconds(self, storage, client):
        assert storage.signed_url("originals", "originals/x.jpg") == "https://signed.example.com/k"
        client.generate_presigned_url.assert_called_once_with(
            "get_object",
            Params={"Bucket": "originals", "Key": "originals/x.jpg"},
            ExpiresIn=3600,
        )

    # ============================================================================
    # UPLOAD
    # ============================================================================

    def test_public_upload(self, storage, client):
        stored = storage.upload(
            "previews", "1-a.webp", b"data", "image/webp", is_public=True, metadata={"file-id": "x"}
        )

        client.put_object.assert_called_once_with(
            Bucket="previews",
            Key="1-a.webp",
            Body=b"data",
            ContentType="image/webp",
            ACL="public-read",
            Metadata={"file-id": "x"},
        )
        assert stored.key == "1-a.webp"
        assert stored.url == "https://previews.s3.us-central-1.wasabisys.com/1-a.webp"
        client.generate_presigned_url.assert_not_called()

    def test_private_upload_returns_signed_url(self, storage, client):
        stored = storage.upload("originals", "originals/x.jpg", b"data", "image/jpeg")

        assert client.put_object.call_args.kwargs["ACL"] == "private"
        assert stored.url == "https://signed.example.com/k"

    def test_upload_client_error_is_wrapped(self, storage, client):
        client.put_object.side_effect = client_error("AccessDenied", "PutObject")

        with pytest.raises(StorageError, match="Failed to upload file"):
            storage.upload("previews", "k", b"data", "image/webp", is_public=True)

    def test_upload_connection_error_is_wrapped(self, storage, client):
        client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")

        with pytest.raises(StorageError):
            storage.upload("previews", "k", b"data", "image/webp", is_public=True)

    # ============================================================================
    # DOWNLOAD / LIST
    # ============================================================================

    def test_download(self, storage, client):
        client.get_object.return_value = {
            "Body": io.BytesIO(b"original"),
            "ContentType": "image/jpeg",
            "Metadata": {"original-name": "a.jpg"},
        }

        downloaded = storage.download("originals", "originals/x.jpg")

        assert downloaded.buffer == b"original"
        assert downloaded.content_type == "image/jpeg"
        assert downloaded.metadata == {"original-name": "a.jpg"}

    def test_download_missing_key(self, storage, client):
        client.get_object.side_effect = client_error("NoSuchKey")

        with pytest.raises(OriginalFileNotFoundError):
            storage.download("originals", "originals/x.jpg")

    def test_download_other_error(self, storage, client):
        client.get_object.side_effect = client_error("InternalError")

        with pytest.raises(StorageError) as exc_info:
            storage.download("originals", "originals/x.jpg")
        assert not isinstance(exc_info.value, OriginalFileNotFoundError)

    def test_find_first_key(self, storage, client):
        client.list_objects_v2.return_value = {
            "Contents": [{"Key": "originals/abc.png"}],
        }

        assert storage.find_first_key("originals", "originals/abc.") == "originals/abc.png"
        client.list_objects_v2.assert_called_once_with(
            Bucket="originals", Prefix="originals/abc.", MaxKeys=1
        )

    def test_find_first_key_no_match(self, storage, client):
        client.list_objects_v2.return_value = {"KeyCount": 0}

        assert storage.find_first_key("originals", "originals/abc.") is None

    def test_find_first_key_error(self, storage, client):
        client.list_objects_v2.side_effect = client_error("AccessDenied", "ListObjectsV2")

        with pytest.raises(StorageError, match="Failed to list files"):
            storage.find_first_key("originals", "originals/abc.")


@pytest.mark.unit
@pytest.mark.storage
class TestStorageFactories:
    def test_create_s3_client_uses_configured_endpoint(self, test_settings):
        with patch("previewer.services.storage_service.boto3.session.Session") as session_cls:
            create_s3_client(test_settings)

        session_cls.assert_called_once_with(
            aws_access_key_id="test-access-key",
            aws_secret_access_key="test-secret-key",
        )
        _, kwargs = session_cls.return_value.client.call_args
        assert kwargs["endpoint_url"] == test_settings.wasabi_endpoint
        assert kwargs["config"].region_name == "test-region"

    def test_create_storage_service_with_injected_client(self, test_settings):
        client = MagicMock()

        storage = create_storage_service(test_settings, client=client)

        assert storage.client is client
        assert storage.public_host == "s3.test-region.wasabisys.com"
        assert storage.signed_url_expiry == test_settings.signed_url_expiry_seconds
