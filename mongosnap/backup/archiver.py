# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Snapshot Archiver - Backup path.

Reads every collection of the database, one after another, serializes
each one into an archive entry and uploads the packed archive under a
timestamp-derived key.

Consistency is per collection: collections are read sequentially, so an
archive is a set of independent point-in-time snapshots rather than one
database-wide snapshot.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Callable, Dict, List

import structlog

from mongosnap.archive import (
    ArchiveEntry,
    archive_content_type,
    build_archive,
    entry_name,
    serialize_documents,
)
from mongosnap.config import SnapshotConfig
from mongosnap.database.base import DocumentDatabase
from mongosnap.exceptions import EnumerationError, ReadError, UploadError
from mongosnap.storage import ObjectStore

logger = structlog.get_logger()

ARTIFACT_KEY_FORMAT = "%m-%d-%Y-%H-%M-%S"
ARTIFACT_KEY_SUFFIX = "-backup"
ARTIFACT_KEY_PATTERN = re.compile(r"^\d{2}-\d{2}-\d{4}-\d{2}-\d{2}-\d{2}-backup$")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class BackupResult:
    """
    Result of a backup.

    archive_built and persisted are reported separately: an upload failure
    leaves archive_built=True, persisted=False and upload_error set.
    """

    operation_id: str
    key: str | None
    collections: List[str]
    document_counts: Dict[str, int]
    archive_size: int
    archive_built: bool
    persisted: bool
    upload_error: str | None = None
    duration_seconds: float = 0.0
    content_type: str | None = None
    errors: List[str] = field(default_factory=list)

    @property
    def total_documents(self) -> int:
        return sum(self.document_counts.values())


def make_artifact_key(now: datetime, prefix: str = "") -> str:
    """
    Derive the artifact key from a capture time.

    Keys have second granularity: two backups started within the same
    second produce the same key and the later upload overwrites the
    earlier one.
    """
    return f"{prefix}{now.strftime(ARTIFACT_KEY_FORMAT)}{ARTIFACT_KEY_SUFFIX}"


def is_artifact_key(key: str, prefix: str = "") -> bool:
    """Check whether key is shaped like a key from make_artifact_key()."""
    if prefix and not key.startswith(prefix):
        return False
    return bool(ARTIFACT_KEY_PATTERN.match(key[len(prefix):]))


async def collect_entries(database: DocumentDatabase) -> tuple[List[ArchiveEntry], Dict[str, int]]:
    """
    Read and serialize every collection into archive entries.

    Collections are enumerated once; a collection created after
    enumeration is not included. The first read failure aborts the whole
    collection pass.

    Raises:
        EnumerationError: If the collection names cannot be listed
        ReadError: If a collection cannot be read
    """
    try:
        names = await database.list_collection_names()
    except Exception as e:
        raise EnumerationError(f"Failed to list collections: {e}") from e

    logger.info("collections_enumerated", count=len(names))

    entries: List[ArchiveEntry] = []
    counts: Dict[str, int] = {}

    for name in names:
        try:
            documents = await database.find_all(name)
        except Exception as e:
            raise ReadError(
                f"Failed to read collection {name}: {e}",
                details={"collection": name, "collections_read": len(entries)},
            ) from e

        payload = serialize_documents(documents)
        entries.append(ArchiveEntry(name=entry_name(name), payload=payload))
        counts[name] = len(documents)

        logger.debug(
            "collection_serialized",
            collection=name,
            documents=len(documents),
            size=len(payload),
        )

    return entries, counts


async def create_snapshot(
    config: SnapshotConfig,
    database: DocumentDatabase,
    store: ObjectStore,
    operation_id: str,
    clock: Clock = _utc_now,
) -> BackupResult:
    """
    Back up every collection into one archive and upload it.

    The key is computed from the clock after the archive is built, right
    before the upload. An upload failure is logged and reported in the
    result; it is not raised.

    Args:
        config: Snapshot configuration
        database: Open database
        store: Object store receiving the archive
        operation_id: Identifier of this invocation
        clock: Wall clock used for the artifact key

    Returns:
        BackupResult describing what was built and whether it was persisted

    Raises:
        EnumerationError: If the collection names cannot be listed
        ReadError: If a collection cannot be read
        ArchiveError: If the archive cannot be packed
    """
    start_time = datetime.now(UTC)
    logger.info("backup_started", operation_id=operation_id, bucket=config.bucket)

    entries, counts = await collect_entries(database)

    archive = await build_archive(
        entries,
        compress=config.compress_archives,
        level=config.zstd_level,
    )
    content_type = archive_content_type(config.compress_archives)
    key = make_artifact_key(clock(), config.key_prefix)

    persisted = False
    upload_error = None
    errors: List[str] = []

    try:
        await store.put_object(key, archive, content_type)
        persisted = True
        logger.info("snapshot_uploaded", key=key, size=len(archive))
    except Exception as e:
        upload_error = e.message if isinstance(e, UploadError) else str(e)
        errors.append(f"{key}: {upload_error}")
        logger.error("snapshot_upload_failed", key=key, error=upload_error)

    duration = (datetime.now(UTC) - start_time).total_seconds()

    result = BackupResult(
        operation_id=operation_id,
        key=key,
        collections=list(counts),
        document_counts=counts,
        archive_size=len(archive),
        archive_built=True,
        persisted=persisted,
        upload_error=upload_error,
        duration_seconds=duration,
        content_type=content_type,
        errors=errors,
    )

    logger.info(
        "backup_completed",
        operation_id=operation_id,
        key=key,
        collections=len(counts),
        documents=result.total_documents,
        persisted=persisted,
        duration=duration,
    )
    return result
