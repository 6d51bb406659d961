# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive Restorer - Restore path.

Fetches an archive, decodes it and replaces each archived collection's
contents with the archived documents, one entry at a time in archive
order.

Restore is per entry, never a database wipe: collections that are not in
the archive are left alone, and an entry whose payload is empty or not a
document list is skipped, leaving the live collection untouched.

A write failure is not isolated to its collection. It aborts the
remaining entries, so the database can end up mixed: earlier collections
replaced, the failing one possibly emptied (without transactions), later
ones untouched. The outcomes recorded up to that point travel on the
raised ApplyError.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, List

import structlog

from mongosnap.archive import ArchiveEntry, deserialize_documents, read_archive
from mongosnap.config import SnapshotConfig
from mongosnap.database.base import DocumentDatabase
from mongosnap.exceptions import ApplyError, DecodeError
from mongosnap.storage import ObjectStore

logger = structlog.get_logger()

REPLACED = "replaced"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class CollectionOutcome:
    """What restore did to one collection."""

    collection: str
    status: str
    deleted_count: int = 0
    inserted_count: int = 0
    reason: str | None = None


@dataclass
class RestoreResult:
    """Result of a restore operation."""

    operation_id: str
    key: str
    outcomes: List[CollectionOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def replaced_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == REPLACED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == SKIPPED)

    @property
    def inserted_documents(self) -> int:
        return sum(o.inserted_count for o in self.outcomes)


def parse_entry(entry: ArchiveEntry) -> tuple[List[Any] | None, str | None]:
    """
    Parse an entry payload into a document list.

    Returns:
        (documents, None) for a usable non-empty list of documents,
        (None, reason) otherwise
    """
    try:
        parsed = deserialize_documents(entry.payload)
    except DecodeError as e:
        return None, e.message

    if not isinstance(parsed, list):
        return None, f"payload is a {type(parsed).__name__}, not a list"
    if not parsed:
        return None, "payload is empty"
    if not all(isinstance(doc, Mapping) for doc in parsed):
        return None, "payload contains non-document values"
    return parsed, None


async def apply_entries(
    database: DocumentDatabase,
    entries: List[ArchiveEntry],
    transactional: bool = False,
) -> List[CollectionOutcome]:
    """
    Apply decoded archive entries to the database, in order.

    Args:
        database: Open database
        entries: Archive entries in archive order
        transactional: Replace each collection inside a transaction

    Returns:
        One outcome per data entry

    Raises:
        ApplyError: On the first failed delete or insert
    """
    outcomes: List[CollectionOutcome] = []

    for entry in entries:
        if not entry.is_data:
            logger.debug("restore_entry_ignored", entry=entry.name, is_dir=entry.is_dir)
            continue

        collection = entry.collection
        documents, reason = parse_entry(entry)

        if documents is None:
            outcomes.append(CollectionOutcome(collection=collection, status=SKIPPED, reason=reason))
            logger.warning("restore_entry_skipped", collection=collection, reason=reason)
            continue

        try:
            replaced = await database.replace_collection(
                collection, documents, transactional=transactional
            )
        except Exception as e:
            outcomes.append(
                CollectionOutcome(collection=collection, status=FAILED, reason=str(e))
            )
            logger.error(
                "collection_replace_failed",
                collection=collection,
                error=str(e),
                applied=len([o for o in outcomes if o.status == REPLACED]),
            )
            raise ApplyError(
                f"Failed to restore collection {collection}: {e}",
                details={"collection": collection, "transactional": transactional},
                outcomes=outcomes,
            ) from e

        outcomes.append(
            CollectionOutcome(
                collection=collection,
                status=REPLACED,
                deleted_count=replaced.deleted_count,
                inserted_count=replaced.inserted_count,
            )
        )
        logger.info(
            "collection_replaced",
            collection=collection,
            deleted=replaced.deleted_count,
            inserted=replaced.inserted_count,
        )

    return outcomes


async def restore_snapshot(
    config: SnapshotConfig,
    database: DocumentDatabase,
    store: ObjectStore,
    key: str,
    operation_id: str,
) -> RestoreResult:
    """
    Fetch the archive stored under key and apply it to the database.

    The archive is read fully into memory and decoded before anything is
    written, so an undecodable archive changes nothing.

    Args:
        config: Snapshot configuration
        database: Open database
        store: Object store holding the archive
        key: Artifact key to restore
        operation_id: Identifier of this invocation

    Returns:
        RestoreResult with one outcome per data entry

    Raises:
        StorageError: If the archive cannot be fetched
        DecodeError: If the archive cannot be decoded
        ApplyError: If a collection cannot be replaced
    """
    start_time = datetime.now(UTC)
    logger.info("restore_started", operation_id=operation_id, key=key)

    data = await store.get_object(key)
    entries = await read_archive(data)

    logger.info("archive_decoded", key=key, size=len(data), entries=len(entries))

    outcomes = await apply_entries(database, entries, transactional=config.use_transactions)

    duration = (datetime.now(UTC) - start_time).total_seconds()
    result = RestoreResult(
        operation_id=operation_id,
        key=key,
        outcomes=outcomes,
        duration_seconds=duration,
    )

    logger.info(
        "restore_completed",
        operation_id=operation_id,
        key=key,
        replaced=result.replaced_count,
        skipped=result.skipped_count,
        documents=result.inserted_documents,
        duration=duration,
    )
    return result
