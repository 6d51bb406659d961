# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Example FastAPI Application with Mongo Snapshot Integration.

This example demonstrates how to expose backup and restore of a MongoDB
database as protected admin endpoints of a FastAPI application.

Run with:
    uvicorn examples.basic_app:app --reload

Environment variables:
    AWS_ACCESS_KEY_ID: AWS access key
    AWS_SECRET_ACCESS_KEY: AWS secret key
    MONGODB_URI: MongoDB connection string
    S3_BUCKET: Bucket holding the archives
    NOTIFY_WEBHOOK_URL: Webhook for status messages (optional)
    MONGOSNAP_ADMIN_API_KEY: API key for admin endpoints
"""

import os

from fastapi import FastAPI

from mongosnap.builder import (
    build_config,
    create_empty_config,
    pipe,
    strict_key_match,
    with_bucket,
    with_database,
    with_key_prefix,
)
from mongosnap.env import create_config_from_env
from mongosnap.integrations.fastapi import snapshot_lifespan


def create_snapshot_config():
    """
    Create snapshot configuration.

    Deployments configure everything through the environment; local
    development falls back to a MongoDB on localhost.
    """
    if os.getenv("MONGODB_URI") or os.getenv("DATABASE_URL"):
        return create_config_from_env()

    configure = pipe(
        lambda c: with_bucket(c, os.getenv("S3_BUCKET", "dev-snapshots")),
        lambda c: with_database(c, "mongodb://localhost:27017/app"),
        lambda c: with_key_prefix(c, "dev/"),
        strict_key_match,
    )
    return build_config(configure(create_empty_config()))


snapshot_config = create_snapshot_config()

app = FastAPI(
    title="My App with Mongo Snapshots",
    description="Example application exposing MongoDB backup and restore",
    version="1.0.0",
    lifespan=lambda app: snapshot_lifespan(app, snapshot_config),
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to My App with Mongo Snapshots",
        "docs": "/docs",
        "snapshot_admin": "/admin/snapshots/status",
    }


# ============================================================================
# Snapshot Admin Endpoints (registered by snapshot_lifespan)
# ============================================================================
#
# POST /admin/snapshots/backup   - Back up every collection
# POST /admin/snapshots/restore  - Restore the newest archive
# GET  /admin/snapshots/backups  - List archives, newest first
# GET  /admin/snapshots/latest   - Archive a restore would use
# GET  /admin/snapshots/status   - Invocation counters
# GET  /admin/snapshots/config   - Configuration (redacted)
