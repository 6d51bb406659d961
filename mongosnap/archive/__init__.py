# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive Codec - Snapshot archive packing, compression and document serialization.
"""

from mongosnap.archive.codec import (
    DATA_EXTENSION,
    ArchiveEntry,
    archive_content_type,
    build_archive,
    entry_name,
    read_archive,
)

from mongosnap.archive.compressor import (
    compress_archive,
    decompress_archive,
    is_zstd_frame,
)

from mongosnap.archive.serializer import (
    deserialize_documents,
    serialize_documents,
)

__all__ = [
    # Codec
    "DATA_EXTENSION",
    "ArchiveEntry",
    "archive_content_type",
    "build_archive",
    "entry_name",
    "read_archive",
    # Compressor
    "compress_archive",
    "decompress_archive",
    "is_zstd_frame",
    # Serializer
    "deserialize_documents",
    "serialize_documents",
]
