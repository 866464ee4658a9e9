"""Blob Storage Factory

Builds the process-wide evidence blob store from settings
(STORAGE_PROVIDER = local | s3).
"""

import logging
from typing import Optional

from accident_analytics.config.settings import settings
from accident_analytics.infrastructure.storage.provider import StorageProvider
from accident_analytics.infrastructure.storage.local_storage import LocalStorage
from accident_analytics.infrastructure.storage.s3_storage import S3Storage

logger = logging.getLogger(__name__)

_storage_instance: Optional[StorageProvider] = None


def get_storage_provider() -> StorageProvider:
    """Get or create the global blob storage instance.

    Raises:
        ValueError: STORAGE_PROVIDER is unknown, or s3 without a bucket
    """
    global _storage_instance

    if _storage_instance is not None:
        return _storage_instance

    provider_type = settings.storage_provider.lower()
    logger.info(f"Initializing blob storage provider: {provider_type}")

    if provider_type == "s3":
        _storage_instance = S3Storage(
            bucket_name=settings.s3_bucket_name,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            prefix=settings.s3_prefix,
        )
    elif provider_type == "local":
        _storage_instance = LocalStorage(settings.storage_local_path)
    else:
        raise ValueError(f"Unknown STORAGE_PROVIDER: {settings.storage_provider}")

    return _storage_instance


def set_storage_provider(provider: StorageProvider) -> None:
    """Install a specific provider instance (tests, embedded use)."""
    global _storage_instance
    _storage_instance = provider


def reset_storage_provider():
    """Drop the cached instance; the next get_storage_provider() rebuilds it."""
    global _storage_instance
    _storage_instance = None
