"""Local Filesystem Blob Storage

Content-addressed evidence payloads under a base directory. Blobs are written
to a temporary name and renamed into place, so a reader never sees a partial
payload under its digest key.
"""

import logging
import os
from pathlib import Path
from typing import AsyncGenerator, BinaryIO
from uuid import uuid4

import aiofiles
import aiofiles.os

from accident_analytics.infrastructure.storage.provider import StorageProvider

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536


class LocalStorage(StorageProvider):
    """Evidence blobs on the local filesystem (development, single host)."""

    def __init__(self, base_path: str = None):
        self.base_path = Path(base_path or os.getenv("STORAGE_LOCAL_PATH", "./data/evidence")).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Evidence blobs in {self.base_path}")

    def _blob_path(self, key: str) -> Path:
        """
        Raises:
            ValueError: If the key escapes base_path
        """
        path = (self.base_path / key).resolve()
        if not path.is_relative_to(self.base_path):
            logger.error(f"Rejected storage key outside blob root: {key}")
            raise ValueError(f"Invalid storage key: {key}")
        return path

    async def upload(self, file_stream: BinaryIO, key: str, content_type: str) -> str:
        path = self._blob_path(key)
        if await aiofiles.os.path.exists(path):
            logger.debug(f"Blob already stored: {key}")
            return key

        path.parent.mkdir(parents=True, exist_ok=True)
        partial = path.with_name(f".{path.name}.{uuid4().hex}.part")

        file_stream.seek(0)
        async with aiofiles.open(partial, "wb") as out_file:
            while content := file_stream.read(CHUNK_SIZE):
                await out_file.write(content)
        await aiofiles.os.replace(partial, path)

        logger.info(f"Stored {content_type} blob {key}")
        return key

    async def download_stream(self, key: str) -> AsyncGenerator[bytes, None]:
        path = self._blob_path(key)
        if not await aiofiles.os.path.exists(path):
            raise FileNotFoundError(f"Blob not found: {key}")

        async with aiofiles.open(path, "rb") as in_file:
            while chunk := await in_file.read(CHUNK_SIZE):
                yield chunk

    async def read(self, key: str) -> bytes:
        path = self._blob_path(key)
        try:
            async with aiofiles.open(path, "rb") as in_file:
                return await in_file.read()
        except FileNotFoundError as e:
            raise FileNotFoundError(f"Blob not found: {key}") from e

    async def delete(self, key: str) -> bool:
        path = self._blob_path(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False

        logger.info(f"Released blob {key}")
        if not any(path.parent.iterdir()):
            await aiofiles.os.rmdir(path.parent)
        return True

    async def file_exists(self, key: str) -> bool:
        try:
            return await aiofiles.os.path.isfile(self._blob_path(key))
        except ValueError:
            return False

    async def health_check(self) -> bool:
        probe = self.base_path / f".probe-{uuid4().hex}"
        try:
            async with aiofiles.open(probe, "wb") as out_file:
                await out_file.write(b"ok")
            await aiofiles.os.remove(probe)
            return True
        except OSError as e:
            logger.error(f"Blob directory {self.base_path} not writable: {e}")
            return False
