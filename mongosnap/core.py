# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Mongo Snapshot Manager Core - Invocation orchestration.

This module wires the components of one backup or restore invocation:
database connection, object store, archiver or locator+restorer, and the
notification that reports the outcome. Each invocation:

1. Opens the database (a connection failure short-circuits; nothing is closed)
2. Opens an S3 client for the duration of the invocation
3. Runs the backup or restore pipeline
4. Closes the database exactly once, whatever happened
5. Sends exactly one notification
6. Returns an InvocationResult (200 on success, 500 on failure)
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, UTC
from typing import Any, AsyncContextManager, Awaitable, Callable, Dict, TypedDict

import structlog
from ulid import ULID

from mongosnap.backup.archiver import BackupResult, Clock, create_snapshot
from mongosnap.backup.locator import find_latest_backup
from mongosnap.backup.restorer import RestoreResult, restore_snapshot
from mongosnap.config import SnapshotConfig
from mongosnap.database import DocumentDatabase, connect_database
from mongosnap.errors import explain_no_backup_found
from mongosnap.exceptions import (
    ApplyError,
    DatabaseConnectionError,
    NoBackupFound,
    SnapshotError,
)
from mongosnap.notify import Notifier, create_notifier, dispatch_notification
from mongosnap.storage import ObjectStore, open_s3_store

logger = structlog.get_logger()

DatabaseFactory = Callable[[SnapshotConfig], Awaitable[DocumentDatabase]]
StoreFactory = Callable[[SnapshotConfig, Any], AsyncContextManager[ObjectStore]]

STATUS_OK = 200
STATUS_FAILED = 500


@dataclass
class InvocationResult:
    """The externally observable result of one invocation."""

    status_code: int
    message: str
    error: str | None = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == STATUS_OK

    @property
    def body(self) -> Dict[str, Any]:
        """JSON body: {message, [error], ...details}."""
        body: Dict[str, Any] = {"message": self.message}
        if self.error is not None:
            body["error"] = self.error
        body.update(self.details)
        return body


@dataclass
class SnapshotMetrics:
    """Counters for snapshot invocations."""

    total_backups: int
    total_restores: int
    total_failures: int
    last_backup_at: datetime | None
    last_backup_key: str | None
    last_restore_at: datetime | None
    last_restore_key: str | None
    last_error: str | None


class SnapshotState(TypedDict):
    """Runtime state shared by invocations in one process."""

    s3_session: Any  # aiobotocore session
    notifier: Notifier
    database_factory: DatabaseFactory
    store_factory: StoreFactory
    clock: Clock
    last_backup_at: datetime | None
    last_backup_key: str | None
    last_restore_at: datetime | None
    last_restore_key: str | None
    total_backups: int
    total_restores: int
    total_failures: int
    last_error: str | None


def _utc_now() -> datetime:
    return datetime.now(UTC)


async def initialize_snapshot_state(
    config: SnapshotConfig,
    *,
    notifier: Notifier | None = None,
    database_factory: DatabaseFactory | None = None,
    store_factory: StoreFactory | None = None,
    clock: Clock | None = None,
) -> SnapshotState:
    """
    Initialize runtime state for snapshot invocations.

    Every collaborator can be injected; the defaults connect to MongoDB,
    create an S3 client per invocation and post to config.webhook_url.

    Args:
        config: Snapshot configuration
        notifier: Notification sink (default: webhook or log)
        database_factory: Coroutine opening the database
        store_factory: Async context manager factory yielding an ObjectStore
        clock: Wall clock used for artifact keys and timestamps

    Returns:
        Initialized SnapshotState dictionary
    """
    from aiobotocore.session import get_session

    logger.info(
        "snapshot_state_initialized",
        bucket=config.bucket,
        webhook_configured=config.webhook_url is not None,
    )

    return SnapshotState(
        s3_session=get_session(),
        notifier=notifier or create_notifier(config.webhook_url),
        database_factory=database_factory or connect_database,
        store_factory=store_factory or open_s3_store,
        clock=clock or _utc_now,
        last_backup_at=None,
        last_backup_key=None,
        last_restore_at=None,
        last_restore_key=None,
        total_backups=0,
        total_restores=0,
        total_failures=0,
        last_error=None,
    )


async def _open_database(config: SnapshotConfig, state: SnapshotState) -> DocumentDatabase:
    try:
        return await state["database_factory"](config)
    except DatabaseConnectionError:
        raise
    except Exception as e:
        raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e


async def _close_database(database: DocumentDatabase, operation_id: str) -> None:
    try:
        await database.close()
        logger.debug("database_connection_closed", operation_id=operation_id)
    except Exception as e:
        logger.warning("database_close_failed", operation_id=operation_id, error=str(e))


def _describe(error: Exception) -> str:
    if isinstance(error, SnapshotError):
        return error.message
    return str(error) or type(error).__name__


def _failure(
    state: SnapshotState,
    operation: str,
    operation_id: str,
    error: Exception,
) -> InvocationResult:
    description = _describe(error)
    state["total_failures"] += 1
    state["last_error"] = description

    details: Dict[str, Any] = {"operation_id": operation_id}
    if isinstance(error, ApplyError):
        details["collections"] = [asdict(o) for o in error.outcomes]

    logger.error(
        "invocation_failed",
        operation=operation,
        operation_id=operation_id,
        error_type=type(error).__name__,
        error=description,
    )
    return InvocationResult(
        status_code=STATUS_FAILED,
        message=f"{operation.capitalize()} failed",
        error=description,
        details=details,
    )


async def _run_backup(
    config: SnapshotConfig,
    state: SnapshotState,
    operation_id: str,
) -> BackupResult:
    database = await _open_database(config, state)
    try:
        async with state["store_factory"](config, state["s3_session"]) as store:
            return await create_snapshot(
                config, database, store, operation_id, clock=state["clock"]
            )
    finally:
        await _close_database(database, operation_id)


async def _run_restore(
    config: SnapshotConfig,
    state: SnapshotState,
    operation_id: str,
) -> RestoreResult:
    database = await _open_database(config, state)
    try:
        async with state["store_factory"](config, state["s3_session"]) as store:
            key = await find_latest_backup(
                store, config.key_prefix, strict=config.strict_key_match
            )
            if key is None:
                raise NoBackupFound(
                    explain_no_backup_found(config.bucket, config.key_prefix),
                    details={"bucket": config.bucket, "prefix": config.key_prefix},
                )
            return await restore_snapshot(config, database, store, key, operation_id)
    finally:
        await _close_database(database, operation_id)


async def run_backup_invocation(config: SnapshotConfig, state: SnapshotState) -> InvocationResult:
    """
    Run one backup and report it.

    An archive that was built but could not be uploaded is reported with
    status 200 and persisted=false, unless config.fail_on_upload_error is
    set, in which case it is a 500.

    Args:
        config: Snapshot configuration
        state: Runtime state

    Returns:
        InvocationResult with status 200 or 500
    """
    operation_id = str(ULID())
    logger.info("invocation_started", operation="backup", operation_id=operation_id)

    try:
        backup = await _run_backup(config, state, operation_id)
    except Exception as e:
        result = _failure(state, "backup", operation_id, e)
        await dispatch_notification(
            state["notifier"], f"Backup failed: {result.error}", success=False
        )
        return result

    state["last_backup_at"] = state["clock"]()

    details = {
        "operation_id": operation_id,
        "key": backup.key,
        "persisted": backup.persisted,
        "archive_size": backup.archive_size,
        "collections": backup.document_counts,
    }

    if backup.persisted:
        state["total_backups"] += 1
        state["last_backup_key"] = backup.key
        result = InvocationResult(
            status_code=STATUS_OK,
            message="Backup completed successfully",
            details=details,
        )
        notification = (
            f"Backup completed successfully: {backup.key} "
            f"({len(backup.collections)} collections, {backup.total_documents} documents)"
        )
    elif config.fail_on_upload_error:
        state["total_failures"] += 1
        state["last_error"] = backup.upload_error
        result = InvocationResult(
            status_code=STATUS_FAILED,
            message="Backup failed",
            error=backup.upload_error,
            details=details,
        )
        notification = f"Backup failed: {backup.upload_error}"
    else:
        state["total_backups"] += 1
        state["last_error"] = backup.upload_error
        details["upload_error"] = backup.upload_error
        result = InvocationResult(
            status_code=STATUS_OK,
            message="Backup created but upload failed",
            details=details,
        )
        notification = f"Backup created but upload failed: {backup.key}: {backup.upload_error}"

    await dispatch_notification(state["notifier"], notification, success=result.ok)
    return result


async def run_restore_invocation(config: SnapshotConfig, state: SnapshotState) -> InvocationResult:
    """
    Restore the most recent archive and report it.

    Args:
        config: Snapshot configuration
        state: Runtime state

    Returns:
        InvocationResult with status 200 or 500
    """
    operation_id = str(ULID())
    logger.info("invocation_started", operation="restore", operation_id=operation_id)

    try:
        restore = await _run_restore(config, state, operation_id)
    except Exception as e:
        result = _failure(state, "restore", operation_id, e)
        await dispatch_notification(
            state["notifier"], f"Restore failed: {result.error}", success=False
        )
        return result

    state["total_restores"] += 1
    state["last_restore_at"] = state["clock"]()
    state["last_restore_key"] = restore.key

    result = InvocationResult(
        status_code=STATUS_OK,
        message="Restore completed successfully",
        details={
            "operation_id": operation_id,
            "key": restore.key,
            "collections": [asdict(o) for o in restore.outcomes],
        },
    )
    await dispatch_notification(
        state["notifier"],
        f"Restore completed successfully from {restore.key} "
        f"({restore.replaced_count} collections replaced, {restore.skipped_count} skipped)",
        success=True,
    )
    return result


def get_metrics(state: SnapshotState) -> SnapshotMetrics:
    """Get current invocation counters."""
    return SnapshotMetrics(
        total_backups=state["total_backups"],
        total_restores=state["total_restores"],
        total_failures=state["total_failures"],
        last_backup_at=state["last_backup_at"],
        last_backup_key=state["last_backup_key"],
        last_restore_at=state["last_restore_at"],
        last_restore_key=state["last_restore_key"],
        last_error=state["last_error"],
    )


async def shutdown_snapshot_state(state: SnapshotState) -> None:
    """Cleanup resources."""
    # S3 clients and database connections are scoped to invocations
    state["s3_session"] = None
    logger.info(
        "snapshot_state_shutdown_complete",
        total_backups=state["total_backups"],
        total_restores=state["total_restores"],
    )
