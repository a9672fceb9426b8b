"""Unit tests for the MinIO blob storage provider."""

import io
from unittest.mock import MagicMock, patch

import pytest

from src.commons.infrastructure.blob.minio_provider import MinioBlobStorage


class TestMinioBlobStorage:
    """Tests for MinioBlobStorage with a mocked SDK client."""

    @pytest.fixture
    def client(self):
        with patch(
            "src.commons.infrastructure.blob.minio_provider.Minio"
        ) as mock_class:
            yield mock_class.return_value

    @pytest.fixture
    def storage(self, client):
        return MinioBlobStorage("localhost:9000", "key", "secret")

    async def test_download_to_file(self, storage, client, tmp_path):
        target = tmp_path / "nested" / "asset.mp4"

        def fget_object(bucket, path, local):
            with open(local, "wb") as f:
                f.write(b"x" * 10)

        client.fget_object.side_effect = fget_object

        size = await storage.download_to_file("videos", "u1/a.mp4", target)

        assert size == 10
        client.fget_object.assert_called_once_with("videos", "u1/a.mp4", str(target))

    async def test_upload_bytes(self, storage, client):
        size = await storage.upload("videos", "u1/a.mp4", b"abc", "video/mp4")

        assert size == 3
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["bucket_name"] == "videos"
        assert kwargs["length"] == 3
        assert kwargs["content_type"] == "video/mp4"

    async def test_upload_stream_measures_length(self, storage, client):
        size = await storage.upload("videos", "a.mp4", io.BytesIO(b"12345"))

        assert size == 5
        assert client.put_object.call_args.kwargs["data"].read() == b"12345"

    async def test_delete_existing(self, storage, client):
        assert await storage.delete("videos", "a.mp4") is True
        client.remove_object.assert_called_once_with("videos", "a.mp4")

    async def test_health_check_failure(self, storage, client):
        client.list_buckets.side_effect = ConnectionError("refused")

        status = await storage.health_check()

        assert status.healthy is False
        assert status.details["endpoint"] == "localhost:9000"
