"""
Object store download adapters.

Fetches raw document bytes for the ingestion pipeline. boto3 is blocking,
so S3 reads run in a worker thread.

Dependencies: boto3, botocore
System role: First stage of document ingestion pipeline (raw bytes source)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ragengine.configs.object_store import ObjectStoreSettings
from ragengine.core.exceptions import PermanentExtractionFailure, TransientUpstreamError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NoSuchBucket"}


class ObjectStore(ABC):
    """Read-only access to raw document bytes by URI."""

    @abstractmethod
    async def get_object(self, uri: str) -> bytes:
        """
        Fetch the object at ``uri``.

        Raises:
            PermanentExtractionFailure: Object does not exist
            TransientUpstreamError: Store unreachable
        """


class S3ObjectStore(ObjectStore):
    """Read documents from S3 (``s3://bucket/key``)."""

    def __init__(self, region: str = "ap-southeast-2", endpoint_url: str | None = None, client=None) -> None:
        """
        Initialize S3 object store.

        Args:
            region: AWS region for the bucket
            endpoint_url: Custom endpoint (MinIO, LocalStack)
            client: Pre-built boto3 S3 client
        """
        self._s3_client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    async def get_object(self, uri: str) -> bytes:
        parsed = urlparse(uri)
        bucket, key = parsed.netloc, parsed.path.lstrip("/")
        if parsed.scheme != "s3" or not bucket or not key:
            raise PermanentExtractionFailure(f"Invalid S3 URI: {uri}")

        try:
            return await asyncio.to_thread(self._download, bucket, key)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in _MISSING_CODES:
                raise PermanentExtractionFailure(f"File not found in S3: {uri}") from e
            raise TransientUpstreamError(f"Failed to download from S3: {e}", service="object_store") from e
        except BotoCoreError as e:
            raise TransientUpstreamError(f"S3 unreachable: {e}", service="object_store") from e

    def _download(self, bucket: str, key: str) -> bytes:
        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        return response["Body"].read()


class LocalObjectStore(ObjectStore):
    """Read documents from the local filesystem (``file://`` or bare paths)."""

    def __init__(self, root: str | Path = ".") -> None:
        self._root = Path(root)

    async def get_object(self, uri: str) -> bytes:
        parsed = urlparse(uri)
        raw_path = parsed.path if parsed.scheme == "file" else uri
        path = Path(raw_path)
        if not path.is_absolute():
            path = self._root / path

        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise PermanentExtractionFailure(f"File not found: {path}") from e
        except OSError as e:
            raise TransientUpstreamError(f"Failed to read {path}: {e}", service="object_store") from e


class RoutingObjectStore(ObjectStore):
    """Dispatch on URI scheme: s3:// to S3, everything else to the filesystem."""

    def __init__(self, local: ObjectStore, s3_factory) -> None:
        self._local = local
        self._s3_factory = s3_factory
        self._s3: ObjectStore | None = None

    async def get_object(self, uri: str) -> bytes:
        if uri.startswith("s3://"):
            if self._s3 is None:
                self._s3 = self._s3_factory()
            return await self._s3.get_object(uri)
        return await self._local.get_object(uri)


def get_object_store(settings: ObjectStoreSettings | None = None) -> ObjectStore:
    """
    Build the object store used by ingestion.

    The boto3 client is created lazily on the first s3:// read so local
    development needs no AWS credentials.
    """
    if settings is None:
        from ragengine.configs import get_settings

        settings = get_settings().object_store

    logger.info(f"{__name__}:get_object_store - region={settings.region} local_root={settings.local_root}")
    return RoutingObjectStore(
        local=LocalObjectStore(settings.local_root),
        s3_factory=lambda: S3ObjectStore(region=settings.region, endpoint_url=settings.endpoint_url),
    )
