# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration helpers.

A small wrapper around create_config() that reads the well-known
environment variables of a snapshot deployment.
"""

from __future__ import annotations

import os

from mongosnap.builder import create_config
from mongosnap.config import SnapshotConfig
from mongosnap.errors import (
    explain_invalid_bool_env,
    explain_missing_bucket_env,
    explain_missing_database_url_env,
)
from mongosnap.exceptions import ConfigurationError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(explain_invalid_bool_env(name, value))


def _parse_int(name: str, value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid {name} value: {value!r}. Expected an integer.") from exc


def create_config_from_env() -> SnapshotConfig:
    """
    Create a SnapshotConfig from environment variables.

    Required:
        - MONGODB_URI (or DATABASE_URL): MongoDB connection string
        - S3_BUCKET: Bucket holding the archives

    Optional environment variables:
        - NOTIFY_WEBHOOK_URL: Webhook receiving status messages
        - AWS_REGION: AWS region (default: us-east-1)
        - S3_ENDPOINT_URL: S3-compatible endpoint
        - MONGOSNAP_DATABASE: Database name (default: from the URL)
        - MONGOSNAP_KEY_PREFIX: Prefix for artifact keys
        - MONGOSNAP_COMPRESS: Compress archives with zstd (default: true)
        - MONGOSNAP_ZSTD_LEVEL: zstd level 1-22 (default: 19)
        - MONGOSNAP_USE_TRANSACTIONS: Transactional collection replace (default: false)
        - MONGOSNAP_FAIL_ON_UPLOAD_ERROR: Fail the backup when upload fails (default: false)
        - MONGOSNAP_STRICT_KEY_MATCH: Only consider artifact-shaped keys (default: false)
    """

    database_url = os.getenv("MONGODB_URI") or os.getenv("DATABASE_URL")
    if not database_url:
        raise ConfigurationError(explain_missing_database_url_env())

    bucket = os.getenv("S3_BUCKET")
    if not bucket:
        raise ConfigurationError(explain_missing_bucket_env())

    return create_config(
        bucket=bucket,
        database_url=database_url,
        database_name=os.getenv("MONGOSNAP_DATABASE") or None,
        region=os.getenv("AWS_REGION", "us-east-1"),
        webhook_url=os.getenv("NOTIFY_WEBHOOK_URL") or None,
        key_prefix=os.getenv("MONGOSNAP_KEY_PREFIX", ""),
        s3_endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
        compress_archives=_parse_bool(
            "MONGOSNAP_COMPRESS", os.getenv("MONGOSNAP_COMPRESS"), True
        ),
        zstd_level=_parse_int("MONGOSNAP_ZSTD_LEVEL", os.getenv("MONGOSNAP_ZSTD_LEVEL"), 19),
        use_transactions=_parse_bool(
            "MONGOSNAP_USE_TRANSACTIONS", os.getenv("MONGOSNAP_USE_TRANSACTIONS"), False
        ),
        fail_on_upload_error=_parse_bool(
            "MONGOSNAP_FAIL_ON_UPLOAD_ERROR",
            os.getenv("MONGOSNAP_FAIL_ON_UPLOAD_ERROR"),
            False,
        ),
        strict_key_match=_parse_bool(
            "MONGOSNAP_STRICT_KEY_MATCH", os.getenv("MONGOSNAP_STRICT_KEY_MATCH"), False
        ),
    )
