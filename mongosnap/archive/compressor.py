# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Archive Compressor - zstd compression for snapshot archives.

Large buffers are compressed in a worker thread so the event loop is not
blocked while a multi-megabyte archive is being packed.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import structlog
import zstandard as zstd

from mongosnap.exceptions import ArchiveError, DecodeError

logger = structlog.get_logger()

# Thread pool for CPU-bound compression
_executor = ThreadPoolExecutor(max_workers=2)

DEFAULT_ZSTD_LEVEL = 19

# Every zstd frame starts with this magic number
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"

# Buffers above this size are (de)compressed off the event loop
_OFFLOAD_THRESHOLD = 1024 * 1024


def is_zstd_frame(data: bytes) -> bool:
    """Check whether data starts with a zstd frame header."""
    return data[:4] == ZSTD_MAGIC


async def compress_archive(data: bytes, level: int = DEFAULT_ZSTD_LEVEL) -> bytes:
    """
    Compress a packed archive with zstd.

    Args:
        data: Uncompressed archive bytes
        level: zstd compression level (1-22)

    Returns:
        Compressed bytes

    Raises:
        ArchiveError: If compression fails
    """
    try:
        compressed = await _run(_compress_zstd_sync, data, level)
    except Exception as e:
        raise ArchiveError(
            f"Compression failed: {e}",
            details={"original_size": len(data)},
        ) from e

    compression_ratio = len(data) / len(compressed) if compressed else 0
    logger.debug(
        "compression_complete",
        original_size=len(data),
        compressed_size=len(compressed),
        compression_ratio=f"{compression_ratio:.2f}x",
    )
    return compressed


async def decompress_archive(data: bytes) -> bytes:
    """
    Decompress a zstd-compressed archive.

    Raises:
        DecodeError: If the data is not a valid zstd stream
    """
    try:
        return await _run(_decompress_zstd_sync, data)
    except Exception as e:
        raise DecodeError(
            f"Decompression failed: {e}",
            details={"compressed_size": len(data)},
        ) from e


async def _run(func, *args):
    if len(args[0]) > _OFFLOAD_THRESHOLD:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_executor, func, *args)
    return func(*args)


def _compress_zstd_sync(data: bytes, level: int) -> bytes:
    """Synchronous zstd compression."""
    cctx = zstd.ZstdCompressor(level=level)
    return cctx.compress(data)


def _decompress_zstd_sync(data: bytes) -> bytes:
    """Synchronous zstd decompression."""
    dctx = zstd.ZstdDecompressor()
    return dctx.decompress(data)
