# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for mongosnap tests.

Provides in-memory database, object store, S3 client and notifier
doubles, plus test configuration helpers.
"""

import copy
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, List

import pytest
import pytest_asyncio

from mongosnap.database.base import ReplaceResult
from mongosnap.exceptions import StorageError, UploadError
from mongosnap.storage import ObjectInfo

# Set test environment variables
os.environ["MONGOSNAP_ADMIN_API_KEY"] = "test-api-key-12345"

FIXED_NOW = datetime(2026, 3, 14, 15, 9, 26, tzinfo=UTC)


# ============================================================================
# Database double
# ============================================================================

class FakeDatabase:
    """In-memory DocumentDatabase with injectable failures."""

    def __init__(self, collections: Dict[str, List[dict]] | None = None) -> None:
        self.collections: Dict[str, List[dict]] = {
            name: copy.deepcopy(docs) for name, docs in (collections or {}).items()
        }
        self.list_error: Exception | None = None
        self.read_errors: Dict[str, Exception] = {}
        self.delete_errors: Dict[str, Exception] = {}
        self.insert_errors: Dict[str, Exception] = {}
        self.replace_calls: List[tuple] = []
        self.close_calls = 0

    async def list_collection_names(self) -> List[str]:
        if self.list_error:
            raise self.list_error
        return list(self.collections)

    async def find_all(self, collection: str) -> List[dict]:
        if collection in self.read_errors:
            raise self.read_errors[collection]
        return copy.deepcopy(self.collections.get(collection, []))

    async def replace_collection(
        self,
        collection: str,
        documents: List[dict],
        transactional: bool = False,
    ) -> ReplaceResult:
        self.replace_calls.append((collection, len(documents), transactional))

        if collection in self.delete_errors:
            raise self.delete_errors[collection]

        deleted = len(self.collections.get(collection, []))

        if collection in self.insert_errors:
            # A transaction rolls the delete back; two plain writes do not
            if not transactional:
                self.collections[collection] = []
            raise self.insert_errors[collection]

        self.collections[collection] = copy.deepcopy(documents)
        return ReplaceResult(deleted_count=deleted, inserted_count=len(documents))

    async def close(self) -> None:
        self.close_calls += 1


# ============================================================================
# Object store doubles
# ============================================================================

@dataclass
class StoredObject:
    body: bytes
    content_type: str
    last_modified: datetime


class FakeObjectStore:
    """In-memory ObjectStore."""

    def __init__(self) -> None:
        self.objects: Dict[str, StoredObject] = {}
        self.put_error: Exception | None = None
        self.list_error: Exception | None = None
        self.put_calls = 0

    def add(self, key: str, body: bytes, last_modified: datetime, content_type: str = "") -> None:
        self.objects[key] = StoredObject(body, content_type, last_modified)

    async def put_object(self, key: str, body: bytes, content_type: str) -> None:
        self.put_calls += 1
        if self.put_error:
            raise self.put_error
        self.objects[key] = StoredObject(body, content_type, datetime.now(UTC))

    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        if self.list_error:
            raise self.list_error
        return [
            ObjectInfo(key=key, last_modified=obj.last_modified, size=len(obj.body))
            for key, obj in self.objects.items()
            if key.startswith(prefix)
        ]

    async def get_object(self, key: str) -> bytes:
        if key not in self.objects:
            raise StorageError(f"Failed to download object: NoSuchKey {key}")
        return self.objects[key].body


class FakeStreamingBody:
    """Mimics aiobotocore's streaming body."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    async def __aenter__(self) -> "FakeStreamingBody":
        return self

    async def __aexit__(self, *exc: Any) -> bool:
        return False

    async def read(self) -> bytes:
        return self._data


class FakePaginator:
    def __init__(self, client: "FakeS3Client") -> None:
        self.client = client

    def paginate(self, Bucket: str, MaxKeys: int = 1000, Prefix: str = ""):
        return self._pages(Bucket, MaxKeys, Prefix)

    async def _pages(self, bucket: str, max_keys: int, prefix: str):
        self.client.check_bucket(bucket)
        keys = sorted(k for k in self.client.objects if k.startswith(prefix))
        if not keys:
            yield {"KeyCount": 0, "IsTruncated": False}
            return
        for start in range(0, len(keys), max_keys):
            page_keys = keys[start:start + max_keys]
            self.client.pages_served += 1
            yield {
                "Contents": [
                    {
                        "Key": key,
                        "LastModified": self.client.objects[key][1],
                        "Size": len(self.client.objects[key][0]),
                    }
                    for key in page_keys
                ],
                "IsTruncated": start + max_keys < len(keys),
            }


class FakeS3Client:
    """The subset of an aiobotocore S3 client the store uses."""

    def __init__(self, bucket: str = "test-bucket") -> None:
        self.bucket = bucket
        self.objects: Dict[str, tuple] = {}
        self.put_requests: List[dict] = []
        self.pages_served = 0
        self.fail_put = False

    def check_bucket(self, bucket: str) -> None:
        if bucket != self.bucket:
            raise RuntimeError(f"NoSuchBucket: {bucket}")

    async def put_object(self, Bucket: str, Key: str, Body: bytes, ContentType: str) -> dict:
        self.check_bucket(Bucket)
        if self.fail_put:
            raise RuntimeError("AccessDenied")
        self.put_requests.append({"Key": Key, "ContentType": ContentType, "Size": len(Body)})
        self.objects[Key] = (Body, datetime.now(UTC))
        return {}

    async def get_object(self, Bucket: str, Key: str) -> dict:
        self.check_bucket(Bucket)
        if Key not in self.objects:
            raise RuntimeError(f"NoSuchKey: {Key}")
        return {"Body": FakeStreamingBody(self.objects[Key][0])}

    def get_paginator(self, operation: str) -> FakePaginator:
        assert operation == "list_objects_v2"
        return FakePaginator(self)


# ============================================================================
# Notifier double
# ============================================================================

class CapturingNotifier:
    """Records messages instead of posting them."""

    def __init__(self, error: Exception | None = None) -> None:
        self.messages: List[str] = []
        self.error = error

    async def send(self, text: str) -> None:
        self.messages.append(text)
        if self.error:
            raise self.error


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def test_config():
    """Create a test configuration."""
    from mongosnap.config import SnapshotConfig

    return SnapshotConfig(
        bucket="test-bucket",
        database_url="mongodb://localhost:27017/app",
        region="us-east-1",
        zstd_level=3,
    )


@pytest.fixture
def sample_collections() -> Dict[str, List[dict]]:
    return {
        "users": [
            {"_id": 1, "name": "ada", "roles": ["admin"], "profile": {"age": 36}},
            {"_id": 2, "name": "grace", "roles": [], "profile": {"age": 45}},
        ],
        "orders": [
            {"_id": "o-1", "user": 1, "items": [{"sku": "a", "qty": 2}], "total": 19.5},
        ],
        "products": [
            {"_id": "a", "title": "Widget", "tags": ["blue", "small"]},
            {"_id": "b", "title": "Gadget", "tags": []},
            {"_id": "c", "title": "Doohickey", "price": None},
        ],
    }


@pytest.fixture
def fake_database(sample_collections) -> FakeDatabase:
    return FakeDatabase(sample_collections)


@pytest.fixture
def fake_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def notifier() -> CapturingNotifier:
    return CapturingNotifier()


def make_store_factory(store):
    @asynccontextmanager
    async def factory(config, session):
        yield store

    return factory


def make_database_factory(database):
    async def factory(config):
        return database

    return factory


@pytest_asyncio.fixture
async def make_state(test_config, notifier, fake_store):
    """Build SnapshotState wired to doubles."""
    from mongosnap.core import initialize_snapshot_state

    async def _make(database, store=None, config=None, **overrides):
        return await initialize_snapshot_state(
            config or test_config,
            notifier=overrides.get("notifier", notifier),
            database_factory=overrides.get("database_factory", make_database_factory(database)),
            store_factory=make_store_factory(store or fake_store),
            clock=overrides.get("clock", lambda: FIXED_NOW),
        )

    return _make


def minutes_ago(minutes: int) -> datetime:
    return FIXED_NOW - timedelta(minutes=minutes)
