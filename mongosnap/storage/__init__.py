# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Object Storage - Archive persistence on S3 and S3-compatible stores.
"""

from mongosnap.storage.s3 import (
    ObjectInfo,
    ObjectStore,
    S3ObjectStore,
    open_s3_store,
)

__all__ = [
    "ObjectInfo",
    "ObjectStore",
    "S3ObjectStore",
    "open_s3_store",
]
