# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Snapshot locator tests: newest-archive selection.
"""

from datetime import datetime, timedelta, UTC

import pytest

from conftest import FakeObjectStore, FakeS3Client
from mongosnap.backup import find_latest_backup, list_backups, select_latest
from mongosnap.storage import ObjectInfo, S3ObjectStore


def _at(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, UTC)


@pytest.mark.asyncio
async def test_latest_is_greatest_last_modified():
    store = FakeObjectStore()
    store.add("A", b"", _at(10))
    store.add("B", b"", _at(20))
    store.add("C", b"", _at(15))

    assert await find_latest_backup(store) == "B"


@pytest.mark.asyncio
async def test_empty_bucket_returns_none():
    assert await find_latest_backup(FakeObjectStore()) is None


@pytest.mark.asyncio
async def test_tie_returns_member_of_tie_set():
    """Identical timestamps are not broken by name; any tied key may win."""
    store = FakeObjectStore()
    store.add("older", b"", _at(5))
    store.add("X", b"", _at(30))
    store.add("Y", b"", _at(30))

    assert await find_latest_backup(store) in {"X", "Y"}


def test_select_latest_on_empty_listing():
    assert select_latest([]) is None


def test_select_latest_ignores_key_order():
    objects = [
        ObjectInfo(key="zzz", last_modified=_at(1)),
        ObjectInfo(key="aaa", last_modified=_at(2)),
    ]

    assert select_latest(objects).key == "aaa"


@pytest.mark.asyncio
async def test_latest_found_beyond_first_listing_page():
    """The newest archive is found even when it is not on the first page."""
    client = FakeS3Client()
    base = datetime(2026, 1, 1, tzinfo=UTC)
    for i in range(1500):
        client.objects[f"a-{i:05d}"] = (b"", base)
    client.objects["z-newest"] = (b"", base + timedelta(days=1))
    store = S3ObjectStore(client, "test-bucket", list_batch_size=1000)

    assert await find_latest_backup(store) == "z-newest"
    assert client.pages_served == 2


@pytest.mark.asyncio
async def test_prefix_limits_candidates():
    store = FakeObjectStore()
    store.add("mongo/01-01-2026-00-00-00-backup", b"", _at(10))
    store.add("elsewhere/newer", b"", _at(99))

    assert await find_latest_backup(store, prefix="mongo/") == "mongo/01-01-2026-00-00-00-backup"


@pytest.mark.asyncio
async def test_strict_mode_skips_foreign_objects():
    store = FakeObjectStore()
    store.add("01-01-2026-00-00-00-backup", b"", _at(10))
    store.add("notes.txt", b"", _at(50))

    assert await find_latest_backup(store) == "notes.txt"
    assert await find_latest_backup(store, strict=True) == "01-01-2026-00-00-00-backup"


@pytest.mark.asyncio
async def test_list_backups_newest_first():
    store = FakeObjectStore()
    store.add("A", b"", _at(10))
    store.add("B", b"", _at(20))
    store.add("C", b"", _at(15))

    assert [o.key for o in await list_backups(store)] == ["B", "C", "A"]
