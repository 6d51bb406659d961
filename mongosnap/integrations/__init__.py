# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Framework Integrations - FastAPI admin endpoints.
"""

from mongosnap.integrations.fastapi import (
    get_snapshot_state,
    register_snapshot_routes,
    snapshot_lifespan,
    verify_api_key,
)

__all__ = [
    "get_snapshot_state",
    "register_snapshot_routes",
    "snapshot_lifespan",
    "verify_api_key",
]
