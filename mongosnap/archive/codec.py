# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Snapshot archive codec.

An archive is a tar container with one `<collection>.json` member per
collection, in the order the collections were read. When compression is
enabled the whole tar stream is wrapped in a single zstd frame. Reading
detects the zstd magic number, so both forms decode.
"""

import io
import tarfile
import time
from dataclasses import dataclass
from typing import Iterable, List

import structlog

from mongosnap.archive.compressor import (
    DEFAULT_ZSTD_LEVEL,
    compress_archive,
    decompress_archive,
    is_zstd_frame,
)
from mongosnap.exceptions import ArchiveError, DecodeError

logger = structlog.get_logger()

DATA_EXTENSION = ".json"

CONTENT_TYPE_ZSTD = "application/zstd"
CONTENT_TYPE_TAR = "application/x-tar"


@dataclass(frozen=True)
class ArchiveEntry:
    """A named payload inside a snapshot archive."""

    name: str
    payload: bytes = b""
    is_dir: bool = False

    @property
    def is_data(self) -> bool:
        """True for collection payloads, False for directories and foreign files."""
        return not self.is_dir and self.name.endswith(DATA_EXTENSION)

    @property
    def collection(self) -> str:
        """Collection name encoded in the entry name."""
        return self.name[: -len(DATA_EXTENSION)] if self.is_data else self.name


def entry_name(collection: str) -> str:
    """Archive entry name for a collection."""
    return f"{collection}{DATA_EXTENSION}"


def archive_content_type(compressed: bool) -> str:
    return CONTENT_TYPE_ZSTD if compressed else CONTENT_TYPE_TAR


def pack_entries(entries: Iterable[ArchiveEntry], mtime: float | None = None) -> bytes:
    """
    Pack entries into an uncompressed tar buffer.

    Raises:
        ArchiveError: If two entries share a name
    """
    mtime = time.time() if mtime is None else mtime
    seen: set[str] = set()
    buffer = io.BytesIO()

    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for entry in entries:
            if entry.name in seen:
                raise ArchiveError(
                    f"Duplicate archive entry: {entry.name}",
                    details={"entry": entry.name},
                )
            seen.add(entry.name)

            info = tarfile.TarInfo(name=entry.name)
            info.mtime = int(mtime)
            if entry.is_dir:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(entry.payload)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(entry.payload))

    return buffer.getvalue()


def unpack_entries(data: bytes) -> List[ArchiveEntry]:
    """
    Read every member of a tar buffer into memory, in archive order.

    Raises:
        DecodeError: If data is not a readable tar stream
    """
    entries: List[ArchiveEntry] = []

    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tar:
            for member in tar:
                if member.isdir():
                    entries.append(ArchiveEntry(name=member.name, is_dir=True))
                    continue
                if not member.isfile():
                    logger.debug("archive_member_ignored", name=member.name, type=member.type)
                    continue

                handle = tar.extractfile(member)
                payload = handle.read() if handle is not None else b""
                entries.append(ArchiveEntry(name=member.name, payload=payload))
    except tarfile.TarError as e:
        raise DecodeError(
            f"Invalid archive: {e}",
            details={"size": len(data)},
        ) from e

    return entries


async def build_archive(
    entries: Iterable[ArchiveEntry],
    compress: bool = True,
    level: int = DEFAULT_ZSTD_LEVEL,
) -> bytes:
    """
    Produce the archive as a single byte buffer.

    Args:
        entries: Archive entries in the order they should be stored
        compress: Wrap the tar stream in zstd
        level: zstd compression level

    Returns:
        Archive bytes ready for upload
    """
    packed = pack_entries(entries)
    if not compress:
        return packed
    return await compress_archive(packed, level)


async def read_archive(data: bytes) -> List[ArchiveEntry]:
    """
    Decode a fetched archive into its entries.

    Raises:
        DecodeError: If the data is neither a zstd-wrapped nor a plain tar archive
    """
    if not data:
        raise DecodeError("Invalid archive: empty object")

    if is_zstd_frame(data):
        data = await decompress_archive(data)

    return unpack_entries(data)
