"""Unit tests for content-addressed local blob storage"""

from io import BytesIO

import pytest

from accident_analytics.infrastructure.storage import blob_key, content_digest


@pytest.mark.unit
class TestBlobKeys:
    def test_key_fans_out_on_digest_prefix(self):
        digest = content_digest(b"dashcam-bytes")

        assert blob_key(digest) == f"blobs/{digest[:2]}/{digest}"
        assert len(digest) == 64


@pytest.mark.unit
class TestLocalStorage:
    @pytest.mark.asyncio
    async def test_upload_and_read(self, storage):
        key = blob_key(content_digest(b"payload"))

        assert await storage.upload(BytesIO(b"payload"), key, "video/mp4") == key
        assert await storage.read(key) == b"payload"
        assert await storage.file_exists(key)

    @pytest.mark.asyncio
    async def test_stream_matches_read(self, storage):
        data = b"x" * 200_000
        key = blob_key(content_digest(data))
        await storage.upload(BytesIO(data), key, "video/mp4")

        chunks = [chunk async for chunk in storage.download_stream(key)]

        assert len(chunks) > 1
        assert b"".join(chunks) == data

    @pytest.mark.asyncio
    async def test_existing_blob_is_not_rewritten(self, storage):
        key = blob_key(content_digest(b"payload"))
        await storage.upload(BytesIO(b"payload"), key, "video/mp4")

        await storage.upload(BytesIO(b"different"), key, "video/mp4")

        assert await storage.read(key) == b"payload"

    @pytest.mark.asyncio
    async def test_missing_blob(self, storage):
        key = blob_key(content_digest(b"never stored"))

        assert not await storage.file_exists(key)
        with pytest.raises(FileNotFoundError):
            await storage.read(key)
        assert await storage.delete(key) is False

    @pytest.mark.asyncio
    async def test_delete(self, storage):
        key = blob_key(content_digest(b"payload"))
        await storage.upload(BytesIO(b"payload"), key, "video/mp4")

        assert await storage.delete(key) is True
        assert not await storage.file_exists(key)

    def test_traversal_rejected(self, storage):
        with pytest.raises(ValueError):
            storage._blob_path("../../etc/passwd")

    @pytest.mark.asyncio
    async def test_health_check(self, storage):
        assert await storage.health_check() is True
