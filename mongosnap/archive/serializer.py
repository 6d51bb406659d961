# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Document serialization for archive entries.

Collections are written as MongoDB Extended JSON (canonical mode) arrays.
Every value keeps its BSON type across a backup/restore round trip
(Int64, double, ObjectId, datetime, Decimal128) and the payload stays
readable text.
"""

from typing import Any, Iterable, Mapping

from bson import json_util
from bson.errors import BSONError

from mongosnap.exceptions import DecodeError

JSON_OPTIONS = json_util.CANONICAL_JSON_OPTIONS


def serialize_documents(documents: Iterable[Mapping[str, Any]]) -> bytes:
    """
    Serialize a collection's documents to UTF-8 Extended JSON.

    Args:
        documents: Documents as returned by the database driver

    Returns:
        UTF-8 encoded JSON array
    """
    return json_util.dumps(list(documents), json_options=JSON_OPTIONS, indent=2).encode("utf-8")


def deserialize_documents(payload: bytes) -> Any:
    """
    Parse an entry payload.

    The parsed value is returned as-is; callers decide whether it is a
    usable document list.

    Raises:
        DecodeError: If the payload is not valid UTF-8 Extended JSON
    """
    try:
        return json_util.loads(payload.decode("utf-8"), json_options=JSON_OPTIONS)
    except (UnicodeDecodeError, ValueError, TypeError, BSONError) as e:
        raise DecodeError(
            f"Invalid document payload: {e}",
            details={"size": len(payload)},
        ) from e
