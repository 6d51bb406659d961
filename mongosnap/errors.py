# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for Mongo Snapshot Manager.

These helpers centralize wording for common configuration errors so that
all modules present consistent, actionable messages.
"""


def explain_missing_bucket_env() -> str:
    """
    Explain that the S3 bucket environment variable is missing.
    """

    return (
        "S3 bucket is not configured. "
        "Set the S3_BUCKET environment variable or pass bucket=... to create_config()."
    )


def explain_missing_database_url_env() -> str:
    """
    Explain that the database connection URL is missing.
    """

    return (
        "Database connection URL is not configured. "
        "Set MONGODB_URI (or DATABASE_URL) or pass database_url=... to create_config()."
    )


def explain_invalid_database_url(value: str | None) -> str:
    """
    Explain that the database URL does not look like a MongoDB URL.
    """

    # Never echo the URL itself, it usually carries credentials.
    scheme = (value or "").split("://", 1)[0] if value and "://" in value else ""
    return (
        f"Invalid database URL scheme: {scheme!r}. "
        "Expected a 'mongodb://' or 'mongodb+srv://' connection string."
    )


def explain_invalid_bool_env(name: str, value: str | None) -> str:
    """
    Explain that a boolean environment variable is invalid.
    """

    return (
        f"Invalid {name} value: {value!r}. "
        "Expected one of: 'true', 'false', '1', '0', 'yes', 'no'."
    )


def explain_invalid_webhook_url(value: str | None) -> str:
    """
    Explain that the notification webhook URL is invalid.
    """

    if not value:
        return "Notification webhook URL is empty."

    return (
        "Invalid notification webhook URL. "
        "NOTIFY_WEBHOOK_URL must be an http:// or https:// URL."
    )


def explain_no_backup_found(bucket: str, prefix: str) -> str:
    """
    Explain that restore could not find any archive to apply.
    """

    location = f"s3://{bucket}/{prefix}" if prefix else f"s3://{bucket}"
    return (
        f"No backup archive found in {location}. "
        "Run a backup first or check the bucket and MONGOSNAP_KEY_PREFIX settings."
    )
