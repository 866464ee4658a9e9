"""Evidence Blob Storage Interface

Abstract base class for content-addressed evidence payload storage.
Supports both local filesystem (development/self-hosted) and S3 (enterprise/K8s).
"""

import hashlib
from abc import ABC, abstractmethod
from typing import AsyncGenerator, BinaryIO


def content_digest(data: bytes) -> str:
    """SHA-256 hex digest used as the content address of a payload"""
    return hashlib.sha256(data).hexdigest()


def blob_key(digest: str) -> str:
    """Build the storage key for a content digest.

    Structure: blobs/{first two hex chars}/{digest}
    """
    return f"blobs/{digest[:2]}/{digest}"


class StorageProvider(ABC):
    """Abstract storage provider for evidence payloads."""

    @abstractmethod
    async def upload(self, file_stream: BinaryIO, key: str, content_type: str) -> str:
        """Store a payload under key and return the key.

        Args:
            file_stream: Binary file stream
            key: Storage key (see blob_key())
            content_type: MIME type

        Returns:
            Storage key that can be used to retrieve the payload
        """
        pass

    @abstractmethod
    async def download_stream(self, key: str) -> AsyncGenerator[bytes, None]:
        """Stream payload content as bytes.

        Raises:
            FileNotFoundError: If the payload doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a payload. Returns False if it was not found."""
        pass

    @abstractmethod
    async def file_exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if storage backend is healthy and accessible."""
        pass

    async def read(self, key: str) -> bytes:
        """Read a whole payload into memory"""
        chunks = []
        async for chunk in self.download_stream(key):
            chunks.append(chunk)
        return b"".join(chunks)
