# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Mongo Snapshot FastAPI Integration - Admin endpoints for FastAPI applications.

This module provides:
- Lifespan management (state creation/shutdown)
- Protected endpoints triggering backup and restore
- Backup listing and status
"""

import os
from contextlib import asynccontextmanager
from dataclasses import asdict

import structlog
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mongosnap.backup.locator import list_backups
from mongosnap.config import SnapshotConfig
from mongosnap.core import (
    SnapshotState,
    get_metrics,
    initialize_snapshot_state,
    run_backup_invocation,
    run_restore_invocation,
    shutdown_snapshot_state,
)
from mongosnap.exceptions import StorageError

logger = structlog.get_logger()

# Security
security = HTTPBearer(auto_error=False)


async def verify_api_key(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> bool:
    """
    Verify API key from Authorization header.

    The API key is read from the MONGOSNAP_ADMIN_API_KEY environment variable.
    Requests must include: Authorization: Bearer <api_key>

    Raises:
        HTTPException: If API key is missing or invalid
    """
    api_key = os.getenv("MONGOSNAP_ADMIN_API_KEY")

    if not api_key:
        raise HTTPException(
            status_code=500,
            detail="MONGOSNAP_ADMIN_API_KEY environment variable not set",
        )

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Authorization header required",
        )

    if credentials.credentials != api_key:
        raise HTTPException(
            status_code=403,
            detail="Invalid API key",
        )

    return True


def register_snapshot_routes(
    app: FastAPI,
    config: SnapshotConfig,
    state: SnapshotState,
    prefix: str = "/admin/snapshots",
) -> None:
    """
    Register snapshot admin endpoints on a FastAPI app.

    All endpoints require Bearer token authentication.

    Args:
        app: FastAPI application
        config: Snapshot configuration
        state: Runtime state
        prefix: URL prefix for endpoints (default: /admin/snapshots)
    """

    async def _list_archives() -> list:
        try:
            async with state["store_factory"](config, state["s3_session"]) as store:
                return await list_backups(
                    store, config.key_prefix, strict=config.strict_key_match
                )
        except StorageError as e:
            logger.error("archive_listing_failed", error=e.message)
            raise HTTPException(status_code=502, detail=e.message) from e

    @app.post(f"{prefix}/backup", dependencies=[Depends(verify_api_key)])
    async def trigger_backup() -> JSONResponse:
        """
        Back up every collection to a new archive.

        Responds with the invocation's own status code (200 or 500).
        """
        result = await run_backup_invocation(config, state)
        return JSONResponse(status_code=result.status_code, content=result.body)

    @app.post(f"{prefix}/restore", dependencies=[Depends(verify_api_key)])
    async def trigger_restore() -> JSONResponse:
        """
        Restore the most recent archive.

        Responds with the invocation's own status code (200 or 500).
        """
        result = await run_restore_invocation(config, state)
        return JSONResponse(status_code=result.status_code, content=result.body)

    @app.get(f"{prefix}/backups", dependencies=[Depends(verify_api_key)])
    async def list_archives(limit: int = 50) -> list:
        """
        List archives, newest first.

        Args:
            limit: Maximum number of archives to return
        """
        backups = await _list_archives()
        return [
            {
                "key": obj.key,
                "last_modified": obj.last_modified.isoformat(),
                "size": obj.size,
            }
            for obj in backups[:limit]
        ]

    @app.get(f"{prefix}/latest", dependencies=[Depends(verify_api_key)])
    async def latest_archive() -> dict:
        """
        Get the archive a restore would use.
        """
        backups = await _list_archives()
        if not backups:
            raise HTTPException(status_code=404, detail="No backup found")

        latest = backups[0]
        return {
            "key": latest.key,
            "last_modified": latest.last_modified.isoformat(),
            "size": latest.size,
        }

    @app.get(f"{prefix}/status", dependencies=[Depends(verify_api_key)])
    async def get_status() -> dict:
        """
        Get invocation counters and the last error.
        """
        metrics = asdict(get_metrics(state))
        for name in ("last_backup_at", "last_restore_at"):
            if metrics[name] is not None:
                metrics[name] = metrics[name].isoformat()
        metrics["bucket"] = config.bucket
        return metrics

    @app.get(f"{prefix}/config", dependencies=[Depends(verify_api_key)])
    async def get_config() -> dict:
        """
        Get current configuration (credentials redacted).
        """
        return config.redacted()


@asynccontextmanager
async def snapshot_lifespan(app: FastAPI, config: SnapshotConfig, prefix: str = "/admin/snapshots"):
    """
    Lifespan context manager for FastAPI.

        app = FastAPI(lifespan=lambda app: snapshot_lifespan(app, config))

    Args:
        app: FastAPI application
        config: Snapshot configuration
        prefix: URL prefix for admin endpoints
    """
    logger.info("snapshot_lifespan_starting", bucket=config.bucket)

    state = await initialize_snapshot_state(config)
    app.state.snapshot_state = state
    app.state.snapshot_config = config

    register_snapshot_routes(app, config, state, prefix)

    logger.info("snapshot_lifespan_started")

    try:
        yield
    finally:
        logger.info("snapshot_lifespan_stopping")
        await shutdown_snapshot_state(state)
        logger.info("snapshot_lifespan_stopped")


def get_snapshot_state(app: FastAPI) -> SnapshotState:
    """
    Get snapshot state from a FastAPI app.

    Raises:
        RuntimeError: If the lifespan has not run
    """
    state = getattr(app.state, "snapshot_state", None)
    if not state:
        raise RuntimeError("Snapshot state not initialized. Use snapshot_lifespan first.")
    return state
