# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Mongo Snapshot Manager - Point-in-time logical backup and restore for MongoDB.

Backs up every collection of a database into one versioned archive on S3
and restores the most recent archive back into the database, reporting
each run to a webhook. Package name: mongosnap.
"""

__version__ = "0.1.0"

# Configuration creation (user-facing API)
from mongosnap.builder import create_config
from mongosnap.config import SnapshotConfig

# Core functions
from mongosnap.core import (
    InvocationResult,
    initialize_snapshot_state,
    run_backup_invocation,
    run_restore_invocation,
    get_metrics,
    shutdown_snapshot_state,
)

# Environment-based configuration
from mongosnap.env import create_config_from_env

__all__ = [
    # Version
    "__version__",
    # Configuration
    "create_config",
    "create_config_from_env",
    "SnapshotConfig",
    # Core orchestration functions
    "InvocationResult",
    "initialize_snapshot_state",
    "run_backup_invocation",
    "run_restore_invocation",
    "get_metrics",
    "shutdown_snapshot_state",
]
