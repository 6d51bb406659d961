# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
S3 object store adapter.

Wraps an aiobotocore S3 client behind the three operations the snapshot
pipeline consumes: put, list (with last-modified times) and get. Clients
are created per invocation by open_s3_store(); nothing here is a
module-level singleton.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, AsyncIterator, List, Protocol

import structlog

from mongosnap.config import SnapshotConfig
from mongosnap.exceptions import StorageError, UploadError

logger = structlog.get_logger()


@dataclass(frozen=True)
class ObjectInfo:
    """One entry of a bucket listing."""

    key: str
    last_modified: datetime
    size: int = 0


class ObjectStore(Protocol):
    """Storage operations used by the backup and restore paths."""

    async def put_object(self, key: str, body: bytes, content_type: str) -> None: ...

    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]: ...

    async def get_object(self, key: str) -> bytes: ...


class S3ObjectStore:
    """ObjectStore backed by an aiobotocore S3 client."""

    def __init__(self, s3_client: Any, bucket: str, list_batch_size: int = 1000) -> None:
        self.s3_client = s3_client
        self.bucket = bucket
        self.list_batch_size = list_batch_size

    async def put_object(self, key: str, body: bytes, content_type: str) -> None:
        """
        Upload an object in a single put.

        Raises:
            UploadError: If the put fails
        """
        try:
            await self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except Exception as e:
            raise UploadError(
                f"Failed to upload object: {e}",
                details={"bucket": self.bucket, "key": key, "size": len(body)},
            ) from e

        logger.debug("object_uploaded", bucket=self.bucket, key=key, size=len(body))

    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        """
        List every object under prefix.

        Follows continuation tokens, so buckets larger than one listing
        page are listed completely.

        Raises:
            StorageError: If listing fails
        """
        objects: List[ObjectInfo] = []
        paginator = self.s3_client.get_paginator("list_objects_v2")

        params = {"Bucket": self.bucket, "MaxKeys": self.list_batch_size}
        if prefix:
            params["Prefix"] = prefix

        try:
            async for page in paginator.paginate(**params):
                for obj in page.get("Contents", []):
                    objects.append(
                        ObjectInfo(
                            key=obj["Key"],
                            last_modified=obj["LastModified"],
                            size=obj.get("Size", 0),
                        )
                    )
        except Exception as e:
            raise StorageError(
                f"Failed to list objects: {e}",
                details={"bucket": self.bucket, "prefix": prefix},
            ) from e

        logger.debug("objects_listed", bucket=self.bucket, prefix=prefix, total=len(objects))
        return objects

    async def get_object(self, key: str) -> bytes:
        """
        Download an object, reading the whole body into memory.

        Raises:
            StorageError: If the download fails
        """
        try:
            response = await self.s3_client.get_object(Bucket=self.bucket, Key=key)
            async with response["Body"] as stream:
                return await stream.read()
        except Exception as e:
            raise StorageError(
                f"Failed to download object: {e}",
                details={"bucket": self.bucket, "key": key},
            ) from e


@asynccontextmanager
async def open_s3_store(config: SnapshotConfig, session: Any) -> AsyncIterator[S3ObjectStore]:
    """
    Create an S3 client for one invocation and wrap it in an S3ObjectStore.

    Args:
        config: Snapshot configuration
        session: aiobotocore session

    Yields:
        S3ObjectStore bound to config.bucket
    """
    client_kwargs = {"region_name": config.region}
    if config.s3_endpoint_url:
        client_kwargs["endpoint_url"] = config.s3_endpoint_url

    async with session.create_client("s3", **client_kwargs) as s3_client:
        yield S3ObjectStore(s3_client, config.bucket, config.s3_list_batch_size)
