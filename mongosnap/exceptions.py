# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Mongo Snapshot Manager Exceptions - Custom exceptions for the mongosnap package.
"""

from typing import List


class SnapshotError(Exception):
    """Base exception for all mongosnap errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(SnapshotError):
    """Raised when configuration is invalid."""

    pass


class DatabaseConnectionError(SnapshotError):
    """Raised when the database is unreachable or misconfigured."""

    pass


class EnumerationError(SnapshotError):
    """Raised when listing the database's collections fails."""

    pass


class ReadError(SnapshotError):
    """Raised when reading a collection's documents fails."""

    pass


class ArchiveError(SnapshotError):
    """Raised when an archive cannot be built."""

    pass


class DecodeError(ArchiveError):
    """Raised when a fetched archive cannot be parsed."""

    pass


class StorageError(SnapshotError):
    """Raised when object storage operations fail."""

    pass


class UploadError(StorageError):
    """Raised when an archive upload fails."""

    pass


class NoBackupFound(SnapshotError):
    """Raised when restore finds no candidate archive."""

    pass


class ApplyError(SnapshotError):
    """
    Raised when replacing a collection's contents fails during restore.

    The outcomes recorded before the failure (and the failing one) are kept
    on the exception so callers can see which collections were already
    replaced.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        outcomes: List | None = None,
    ):
        super().__init__(message, details)
        self.outcomes = list(outcomes or [])


class NotificationError(SnapshotError):
    """Raised when a notification cannot be delivered."""

    pass
