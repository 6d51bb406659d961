# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Mongo Snapshot Manager Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation to prevent
accidental modification during runtime.
"""

from dataclasses import dataclass
from typing import List
from urllib.parse import urlsplit
import re

from mongosnap.errors import explain_invalid_database_url, explain_invalid_webhook_url


MONGODB_SCHEMES = ("mongodb", "mongodb+srv")


def _validate_bucket_name(bucket: str) -> bool:
    """
    Validate S3 bucket name according to AWS rules.

    Rules:
    - 3-63 characters
    - Lowercase letters, numbers, hyphens
    - Must start and end with letter or number
    - No consecutive periods
    - Not formatted as IP address
    """
    if not bucket or len(bucket) < 3 or len(bucket) > 63:
        return False

    # Must be lowercase letters, numbers, hyphens, or periods
    if not re.match(r"^[a-z0-9][a-z0-9.-]*[a-z0-9]$", bucket):
        return False

    # No consecutive periods
    if ".." in bucket:
        return False

    # Not IP address format
    if re.match(r"^\d+\.\d+\.\d+\.\d+$", bucket):
        return False

    return True


def _validate_database_url(url: str) -> bool:
    """Only MongoDB connection strings are accepted."""
    if not url:
        return False
    return urlsplit(url).scheme.lower() in MONGODB_SCHEMES


def _validate_http_url(url: str) -> bool:
    parts = urlsplit(url)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _redact_url(url: str | None) -> str | None:
    """Strip credentials and query strings from a URL for display."""
    if not url:
        return url
    parts = urlsplit(url)
    # netloc may list several hosts ("a:27017,b:27017"), so keep it whole
    hosts = parts.netloc.rsplit("@", 1)[-1]
    return f"{parts.scheme}://{hosts}{parts.path}"


@dataclass(frozen=True)
class SnapshotConfig:
    """
    Immutable configuration for snapshot backup and restore.

    This configuration is frozen after creation so that a single
    invocation always sees one consistent set of settings.
    """

    # Required: S3 bucket holding the archives
    bucket: str

    # Required: MongoDB connection string
    database_url: str

    # Database to back up (default: the database named in the URL)
    database_name: str | None = None

    # AWS region (default: us-east-1)
    region: str = "us-east-1"

    # Custom S3 endpoint (MinIO, LocalStack, ...)
    s3_endpoint_url: str | None = None

    # Prefix prepended to every artifact key, e.g. "mongo/"
    key_prefix: str = ""

    # Webhook receiving {"text": ...} status messages
    webhook_url: str | None = None

    # Compress the archive with zstd
    compress_archives: bool = True

    # zstd compression level (1-22)
    zstd_level: int = 19

    # Replace each collection inside a multi-document transaction, one
    # attempt, aborted on error (requires a replica set or sharded cluster)
    use_transactions: bool = False

    # Report the backup as failed when the archive could not be uploaded
    fail_on_upload_error: bool = False

    # Only consider keys shaped like artifact keys when locating backups
    strict_key_match: bool = False

    # Page size for S3 listing
    s3_list_batch_size: int = 1000

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        # Validate bucket name
        if not _validate_bucket_name(self.bucket):
            errors.append(f"Invalid bucket name: {self.bucket}")

        # Validate database URL
        if not _validate_database_url(self.database_url):
            errors.append(explain_invalid_database_url(self.database_url))

        # Validate webhook URL if set
        if self.webhook_url is not None and not _validate_http_url(self.webhook_url):
            errors.append(explain_invalid_webhook_url(self.webhook_url))

        if self.s3_endpoint_url and not _validate_http_url(self.s3_endpoint_url):
            errors.append(f"Invalid s3_endpoint_url: {self.s3_endpoint_url}")

        if self.key_prefix.startswith("/"):
            errors.append(f"key_prefix must not start with '/', got {self.key_prefix!r}")

        if not 1 <= self.zstd_level <= 22:
            errors.append(f"zstd_level must be between 1 and 22, got {self.zstd_level}")

        if not 1 <= self.s3_list_batch_size <= 1000:
            errors.append(
                f"s3_list_batch_size must be between 1 and 1000, got {self.s3_list_batch_size}"
            )

        # Raise all errors at once
        if errors:
            from mongosnap.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    def with_updates(self, **kwargs) -> "SnapshotConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return SnapshotConfig(**current)

    def redacted(self) -> dict:
        """Configuration as a dict with credentials removed."""
        return {
            "bucket": self.bucket,
            "database_url": _redact_url(self.database_url),
            "database_name": self.database_name,
            "region": self.region,
            "s3_endpoint_url": self.s3_endpoint_url,
            "key_prefix": self.key_prefix,
            "webhook_configured": self.webhook_url is not None,
            "compress_archives": self.compress_archives,
            "zstd_level": self.zstd_level,
            "use_transactions": self.use_transactions,
            "fail_on_upload_error": self.fail_on_upload_error,
            "strict_key_match": self.strict_key_match,
        }
