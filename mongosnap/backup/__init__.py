# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Snapshot Engine - Backup archiving, archive location and restore.
"""

from mongosnap.backup.archiver import (
    BackupResult,
    create_snapshot,
    is_artifact_key,
    make_artifact_key,
)

from mongosnap.backup.locator import (
    find_latest_backup,
    list_backups,
    select_latest,
)

from mongosnap.backup.restorer import (
    CollectionOutcome,
    RestoreResult,
    apply_entries,
    restore_snapshot,
)

__all__ = [
    # Archiver
    "BackupResult",
    "create_snapshot",
    "is_artifact_key",
    "make_artifact_key",
    # Locator
    "find_latest_backup",
    "list_backups",
    "select_latest",
    # Restorer
    "CollectionOutcome",
    "RestoreResult",
    "apply_entries",
    "restore_snapshot",
]
