"""S3/MinIO Blob Storage

Content-addressed evidence payloads in an S3-compatible bucket, via aioboto3.
"""

import logging
import os
from typing import AsyncGenerator, BinaryIO, Optional

import aioboto3
from botocore.exceptions import ClientError

from accident_analytics.infrastructure.storage.provider import StorageProvider

logger = logging.getLogger(__name__)

MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3Storage(StorageProvider):
    """Evidence blobs in S3 or MinIO, optionally below a key prefix."""

    def __init__(
        self,
        bucket_name: str = None,
        region: str = None,
        endpoint_url: str = None,
        prefix: str = "",
        access_key: str = None,
        secret_key: str = None
    ):
        """
        Raises:
            ValueError: If no bucket is configured
        """
        self.bucket_name = bucket_name or os.getenv("S3_BUCKET_NAME")
        if not self.bucket_name:
            raise ValueError("S3 evidence storage needs S3_BUCKET_NAME")

        self.region = region or os.getenv("S3_REGION", "us-east-1")
        self.endpoint_url = endpoint_url or os.getenv("S3_ENDPOINT_URL")
        self.prefix = prefix.strip("/")
        self.session = aioboto3.Session(
            aws_access_key_id=access_key or os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=secret_key or os.getenv("AWS_SECRET_ACCESS_KEY"),
            region_name=self.region
        )

        target = self.endpoint_url or "AWS"
        logger.info(f"Evidence blobs in s3://{self.bucket_name}/{self.prefix} ({target})")

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key

    def _client(self):
        return self.session.client("s3", region_name=self.region, endpoint_url=self.endpoint_url)

    async def _head(self, s3, key: str) -> Optional[dict]:
        try:
            return await s3.head_object(Bucket=self.bucket_name, Key=self._object_key(key))
        except ClientError as e:
            if _error_code(e) in MISSING_CODES:
                return None
            raise

    async def upload(self, file_stream: BinaryIO, key: str, content_type: str) -> str:
        async with self._client() as s3:
            if await self._head(s3, key) is not None:
                logger.debug(f"Blob already stored: {key}")
                return key

            file_stream.seek(0)
            await s3.upload_fileobj(
                file_stream,
                self.bucket_name,
                self._object_key(key),
                ExtraArgs={"ContentType": content_type}
            )

        logger.info(f"Stored {content_type} blob in S3: {key}")
        return key

    async def download_stream(self, key: str) -> AsyncGenerator[bytes, None]:
        async with self._client() as s3:
            try:
                response = await s3.get_object(Bucket=self.bucket_name, Key=self._object_key(key))
            except ClientError as e:
                if _error_code(e) in MISSING_CODES:
                    raise FileNotFoundError(f"Blob not found: {key}") from e
                logger.error(f"S3 read of {key} failed: {e}")
                raise

            async for chunk in response["Body"].iter_chunks():
                yield chunk

    async def read(self, key: str) -> bytes:
        async with self._client() as s3:
            try:
                response = await s3.get_object(Bucket=self.bucket_name, Key=self._object_key(key))
            except ClientError as e:
                if _error_code(e) in MISSING_CODES:
                    raise FileNotFoundError(f"Blob not found: {key}") from e
                raise
            async with response["Body"] as body:
                return await body.read()

    async def delete(self, key: str) -> bool:
        async with self._client() as s3:
            try:
                if await self._head(s3, key) is None:
                    return False
                await s3.delete_object(Bucket=self.bucket_name, Key=self._object_key(key))
            except ClientError as e:
                logger.error(f"S3 delete of {key} failed: {e}")
                return False

        logger.info(f"Released blob {key}")
        return True

    async def file_exists(self, key: str) -> bool:
        async with self._client() as s3:
            try:
                return await self._head(s3, key) is not None
            except ClientError as e:
                logger.error(f"S3 lookup of {key} failed: {e}")
                return False

    async def health_check(self) -> bool:
        try:
            async with self._client() as s3:
                await s3.head_bucket(Bucket=self.bucket_name)
            return True
        except ClientError as e:
            logger.error(f"Evidence bucket {self.bucket_name} unavailable: {_error_code(e)}")
            return False
