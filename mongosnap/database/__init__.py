# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Database Access - Collection enumeration, reads and replacement.
"""

from mongosnap.database.base import DocumentDatabase, ReplaceResult
from mongosnap.database.mongo import MongoDocumentDatabase, connect_database

__all__ = [
    "DocumentDatabase",
    "ReplaceResult",
    "MongoDocumentDatabase",
    "connect_database",
]
