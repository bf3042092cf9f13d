"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class IngestionSettings:
    """
    Runtime settings for the mail ingestion cycle.
    """

    scheduler_enabled: bool = True
    cron: str = "* * * * *"
    allowed_extensions: tuple[str, ...] = (".txt",)
    overlay_window: int = 7
    batch_size: int = 1000


@dataclass(frozen=True)
class MailSettings:
    """
    Microsoft Graph mailbox settings.

    The mailbox is read with a delegated refresh token; either the token
    itself or a file holding it must be configured.
    """

    enabled: bool = True
    client_id: str | None = None
    client_secret: str | None = None
    refresh_token: str | None = None
    refresh_token_file: str | None = None
    token_url: str = "https://login.microsoftonline.com/consumers/oauth2/v2.0/token"
    scope: str = "offline_access Mail.Read Mail.ReadWrite"
    base_url: str = "https://graph.microsoft.com/v1.0"
    page_size: int = 50


@dataclass(frozen=True)
class StorageSettings:
    """
    Object store settings for raw uploaded files.
    """

    root_dir: str = "data/blobs"


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Shared HTTP behavior settings for external connectors.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@lru_cache(maxsize=1)
def get_ingestion_settings() -> IngestionSettings:
    """
    Return cached ingestion settings from environment variables.
    """

    raw_extensions = _get_str_env("INGESTION_ALLOWED_EXTENSIONS", ".txt")
    extensions = tuple(
        ext if ext.startswith(".") else f".{ext}"
        for ext in (part.strip().lower() for part in raw_extensions.split(","))
        if ext
    )
    return IngestionSettings(
        scheduler_enabled=_get_bool_env("INGESTION_SCHEDULER_ENABLED", True),
        cron=_get_str_env("INGESTION_CRON", "* * * * *"),
        allowed_extensions=extensions or (".txt",),
        overlay_window=max(0, _get_int_env("SEED_OVERLAY_WINDOW", 7)),
        batch_size=max(1, _get_int_env("SNAPSHOT_ROW_BATCH_SIZE", 1000)),
    )


@lru_cache(maxsize=1)
def get_mail_settings() -> MailSettings:
    """
    Return Microsoft Graph mailbox settings from environment variables.
    """

    return MailSettings(
        enabled=_get_bool_env("MAIL_ENABLED", True),
        client_id=_get_optional_str_env("GRAPH_CLIENT_ID"),
        client_secret=_get_optional_str_env("GRAPH_CLIENT_SECRET"),
        refresh_token=_get_optional_str_env("GRAPH_REFRESH_TOKEN"),
        refresh_token_file=_get_optional_str_env("GRAPH_REFRESH_TOKEN_FILE"),
        token_url=_get_str_env(
            "GRAPH_TOKEN_URL",
            "https://login.microsoftonline.com/consumers/oauth2/v2.0/token",
        ),
        scope=_get_str_env("GRAPH_SCOPE", "offline_access Mail.Read Mail.ReadWrite"),
        base_url=_get_str_env("GRAPH_BASE_URL", "https://graph.microsoft.com/v1.0").rstrip("/"),
        page_size=max(1, _get_int_env("GRAPH_PAGE_SIZE", 50)),
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    return StorageSettings(root_dir=_get_str_env("BLOB_STORAGE_DIR", "data/blobs"))


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared connector HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )
