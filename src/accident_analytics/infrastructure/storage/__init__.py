"""Evidence blob storage module.

Provides deployment-neutral payload storage via the StorageProvider interface.
"""

from accident_analytics.infrastructure.storage.factory import (
    get_storage_provider,
    reset_storage_provider,
    set_storage_provider,
)
from accident_analytics.infrastructure.storage.provider import StorageProvider, blob_key, content_digest
from accident_analytics.infrastructure.storage.local_storage import LocalStorage
from accident_analytics.infrastructure.storage.s3_storage import S3Storage

__all__ = [
    "get_storage_provider",
    "reset_storage_provider",
    "set_storage_provider",
    "StorageProvider",
    "blob_key",
    "content_digest",
    "LocalStorage",
    "S3Storage",
]
