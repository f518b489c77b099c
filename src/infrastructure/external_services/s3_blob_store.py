"""
S3-compatible media storage for request images and video.

Works against MinIO locally and Cloudflare R2 / AWS S3 in production.
"""
import mimetypes
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import aioboto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from src.application.interfaces.blob_store import BlobRef, BlobStore
from src.config import settings
from src.domain.exceptions import UpstreamError

logger = structlog.get_logger(__name__)


class S3BlobStore(BlobStore):
    def __init__(
        self,
        bucket: str = settings.s3_bucket,
        endpoint_url: str | None = settings.s3_endpoint,
        access_key_id: str = settings.s3_access_key_id,
        secret_access_key: str = settings.s3_secret_access_key,
        region: str = settings.s3_region,
        public_url: str = settings.s3_public_url,
    ) -> None:
        self._bucket = bucket
        self._endpoint_url = endpoint_url
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._region = region
        self._public_url = public_url
        self._session = aioboto3.Session()

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[Any]:
        async with self._session.client(
            "s3",
            endpoint_url=self._endpoint_url,
            aws_access_key_id=self._access_key_id or None,
            aws_secret_access_key=self._secret_access_key or None,
            region_name=self._region,
        ) as client:
            yield client

    def public_url_for(self, key: str) -> str:
        if self._public_url:
            return f"{self._public_url.rstrip('/')}/{key}"
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def upload(
        self,
        data: bytes,
        *,
        folder: str,
        content_type: str,
        filename: str | None = None,
    ) -> BlobRef:
        extension = mimetypes.guess_extension(content_type) or ""
        key = f"{folder.strip('/')}/{uuid.uuid4().hex}{extension}"
        metadata = {"original-filename": filename} if filename else {}

        try:
            async with self._get_client() as client:
                await client.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=data,
                    ContentType=content_type,
                    Metadata=metadata,
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error("blob_upload_failed", key=key, error=str(exc))
            raise UpstreamError("blob_store", f"Failed to upload {filename or 'file'}.", str(exc)) from exc

        logger.info("blob_uploaded", key=key, size=len(data), content_type=content_type)
        return BlobRef(url=self.public_url_for(key), public_id=key)

    async def delete(self, public_id: str) -> None:
        try:
            async with self._get_client() as client:
                await client.delete_object(Bucket=self._bucket, Key=public_id)
        except (BotoCoreError, ClientError) as exc:
            logger.error("blob_delete_failed", key=public_id, error=str(exc))
            raise UpstreamError("blob_store", f"Failed to delete {public_id}.", str(exc)) from exc

        logger.info("blob_deleted", key=public_id)
