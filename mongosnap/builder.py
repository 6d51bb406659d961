# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Mongo Snapshot Manager Builder - Functional builder pattern for configuration.

This module provides pure functions for building SnapshotConfig objects.
Each function takes a config dict and returns a new dict with the
modification applied (immutable updates).
"""

from typing import Any, Callable, Dict

from mongosnap.config import SnapshotConfig


# Type alias for builder functions
ConfigDict = Dict[str, Any]
BuilderFunc = Callable[[ConfigDict], ConfigDict]


def create_empty_config() -> ConfigDict:
    """
    Create an initial empty configuration dictionary.

    Returns:
        Dict with default values for all configuration fields
    """
    return {
        "bucket": "",
        "database_url": "",
        "database_name": None,
        "region": "us-east-1",
        "s3_endpoint_url": None,
        "key_prefix": "",
        "webhook_url": None,
        "compress_archives": True,
        "zstd_level": 19,
        "use_transactions": False,
        "fail_on_upload_error": False,
        "strict_key_match": False,
        "s3_list_batch_size": 1000,
    }


def with_bucket(config: ConfigDict, bucket_name: str) -> ConfigDict:
    """
    Set the S3 bucket name.

    Args:
        config: Current configuration dictionary
        bucket_name: Name of the S3 bucket holding archives

    Returns:
        New configuration dictionary with bucket set
    """
    return {**config, "bucket": bucket_name}


def with_region(config: ConfigDict, region: str) -> ConfigDict:
    """
    Set the AWS region.

    Args:
        config: Current configuration dictionary
        region: AWS region (e.g., 'us-east-1', 'eu-west-1')

    Returns:
        New configuration dictionary with region set
    """
    return {**config, "region": region}


def with_database(
    config: ConfigDict,
    database_url: str,
    database_name: str | None = None,
) -> ConfigDict:
    """
    Set the MongoDB connection string and, optionally, the database name.

    When database_name is omitted, the database named in the URL path
    is used.
    """
    return {**config, "database_url": database_url, "database_name": database_name}


def with_s3_endpoint(config: ConfigDict, endpoint_url: str) -> ConfigDict:
    """Point the S3 client at an S3-compatible endpoint."""
    return {**config, "s3_endpoint_url": endpoint_url}


def with_key_prefix(config: ConfigDict, prefix: str) -> ConfigDict:
    """
    Store archives under a key prefix.

    Args:
        config: Current configuration dictionary
        prefix: Key prefix, e.g. 'mongo/prod/'

    Returns:
        New configuration dictionary with key prefix set
    """
    return {**config, "key_prefix": prefix}


def with_webhook(config: ConfigDict, webhook_url: str) -> ConfigDict:
    """Send status notifications to a webhook."""
    return {**config, "webhook_url": webhook_url}


def with_compression_level(config: ConfigDict, level: int) -> ConfigDict:
    """
    Set the zstd compression level.

    Args:
        config: Current configuration dictionary
        level: zstd level (1-22)

    Returns:
        New configuration dictionary with compression enabled at level
    """
    return {**config, "compress_archives": True, "zstd_level": level}


def disable_compression(config: ConfigDict) -> ConfigDict:
    """
    Store plain tar archives.

    Plain archives can be inspected with standard tar tooling.
    """
    return {**config, "compress_archives": False}


def use_transactions(config: ConfigDict) -> ConfigDict:
    """
    Replace each collection inside a multi-document transaction.

    Requires a replica set or sharded cluster. Without it, a failed insert
    after the delete step leaves the collection empty.
    """
    return {**config, "use_transactions": True}


def fail_on_upload_error(config: ConfigDict) -> ConfigDict:
    """
    Report a backup as failed when the archive could not be uploaded.

    By default the upload failure is only recorded in the result.
    """
    return {**config, "fail_on_upload_error": True}


def strict_key_match(config: ConfigDict) -> ConfigDict:
    """Ignore objects whose key is not shaped like an artifact key."""
    return {**config, "strict_key_match": True}


def with_s3_batch_size(config: ConfigDict, batch_size: int) -> ConfigDict:
    """
    Set the S3 listing page size.

    Args:
        config: Current configuration dictionary
        batch_size: Keys per list_objects_v2 page (max 1000)

    Returns:
        New configuration dictionary with batch size set
    """
    return {**config, "s3_list_batch_size": batch_size}


def build_config(config: ConfigDict) -> SnapshotConfig:
    """
    Build and validate the final configuration.

    Args:
        config: Configuration dictionary

    Returns:
        Validated, immutable SnapshotConfig instance

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    return SnapshotConfig(**config)


def pipe(*funcs: BuilderFunc) -> BuilderFunc:
    """
    Compose multiple builder functions into one.

    Example:
        configure = pipe(
            lambda c: with_bucket(c, "my-bucket"),
            lambda c: with_database(c, "mongodb://localhost/app"),
            use_transactions,
        )
        config = build_config(configure(create_empty_config()))
    """

    def composed(config: ConfigDict) -> ConfigDict:
        result = config
        for func in funcs:
            result = func(result)
        return result

    return composed


def create_config(
    bucket: str,
    database_url: str,
    *,
    database_name: str | None = None,
    region: str = "us-east-1",
    webhook_url: str | None = None,
    key_prefix: str = "",
    s3_endpoint_url: str | None = None,
    **kwargs: Any,
) -> SnapshotConfig:
    """
    Create snapshot configuration from simple parameters.

    This is the recommended user-facing API for creating configurations.

    Args:
        bucket: S3 bucket name (required)
        database_url: MongoDB connection string (required)
        database_name: Database to snapshot (default: from the URL)
        region: AWS region (default: "us-east-1")
        webhook_url: Notification webhook (optional)
        key_prefix: Prefix for artifact keys (default: "")
        s3_endpoint_url: S3-compatible endpoint (optional)
        **kwargs: Additional configuration options

    Returns:
        Validated, immutable SnapshotConfig instance

    Example:
        config = create_config(
            bucket="my-backups",
            database_url="mongodb://localhost:27017/app",
            webhook_url="https://hooks.slack.com/services/...",
            use_transactions=True,
        )
    """
    config_dict = create_empty_config()
    config_dict = with_bucket(config_dict, bucket)
    config_dict = with_database(config_dict, database_url, database_name)

    if region:
        config_dict = with_region(config_dict, region)

    if webhook_url:
        config_dict = with_webhook(config_dict, webhook_url)

    if key_prefix:
        config_dict = with_key_prefix(config_dict, key_prefix)

    if s3_endpoint_url:
        config_dict = with_s3_endpoint(config_dict, s3_endpoint_url)

    # Apply any additional kwargs
    for key, value in kwargs.items():
        if key in config_dict:
            config_dict[key] = value

    return build_config(config_dict)
