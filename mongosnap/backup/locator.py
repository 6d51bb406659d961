# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Snapshot Locator - Finds the most recent archive in the bucket.
"""

from typing import List

import structlog

from mongosnap.backup.archiver import is_artifact_key
from mongosnap.storage import ObjectInfo, ObjectStore

logger = structlog.get_logger()


def select_latest(objects: List[ObjectInfo]) -> ObjectInfo | None:
    """
    Pick the object with the greatest last-modified time.

    Ties are not broken by name: when several objects share the newest
    timestamp, any one of them may be returned.
    """
    if not objects:
        return None
    return max(objects, key=lambda obj: obj.last_modified)


async def list_backups(
    store: ObjectStore,
    prefix: str = "",
    strict: bool = False,
) -> List[ObjectInfo]:
    """
    List candidate archives, newest first.

    Args:
        store: Object store holding the archives
        prefix: Key prefix to list under
        strict: Keep only keys shaped like artifact keys

    Returns:
        Listing entries sorted by last-modified time, newest first
    """
    objects = await store.list_objects(prefix)
    if strict:
        objects = [obj for obj in objects if is_artifact_key(obj.key, prefix)]
    return sorted(objects, key=lambda obj: obj.last_modified, reverse=True)


async def find_latest_backup(
    store: ObjectStore,
    prefix: str = "",
    strict: bool = False,
) -> str | None:
    """
    Return the key of the most recently modified archive.

    Every listing page is read before choosing.

    Args:
        store: Object store holding the archives
        prefix: Key prefix to list under
        strict: Keep only keys shaped like artifact keys

    Returns:
        The newest key, or None when no candidate exists
    """
    objects = await store.list_objects(prefix)
    if strict:
        objects = [obj for obj in objects if is_artifact_key(obj.key, prefix)]

    latest = select_latest(objects)
    if latest is None:
        logger.warning("no_backup_found", prefix=prefix, listed=len(objects))
        return None

    logger.info(
        "latest_backup_located",
        key=latest.key,
        last_modified=latest.last_modified.isoformat(),
        candidates=len(objects),
    )
    return latest.key
