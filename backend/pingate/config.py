"""Environment-driven configuration."""

import logging
import os
from typing import Optional

from .constants import API_TIMEOUT_SECONDS, DEFAULT_API_HOST
from .dynamo import DynamoKeyValueStore
from .exceptions import ValidationError
from .store import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("memory", "file", "dynamo")
DEFAULT_STORE_BACKEND = "file"
DEFAULT_STORE_PATH = "pin_store.json"


def get_store_backend() -> str:
    return os.environ.get("PIN_STORE_BACKEND", DEFAULT_STORE_BACKEND).strip().lower()


def get_store_path() -> str:
    return os.environ.get("PIN_STORE_PATH") or DEFAULT_STORE_PATH


def get_table_name() -> Optional[str]:
    return os.environ.get("PIN_TABLE_NAME")


def get_api_host() -> str:
    return (os.environ.get("API_HOST") or DEFAULT_API_HOST).rstrip("/")


def get_api_timeout() -> float:
    raw = os.environ.get("API_TIMEOUT_SECONDS")
    if not raw:
        return float(API_TIMEOUT_SECONDS)
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid API_TIMEOUT_SECONDS={raw!r}")
        return float(API_TIMEOUT_SECONDS)
    return timeout if timeout > 0 else float(API_TIMEOUT_SECONDS)


def get_log_level() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def build_store() -> KeyValueStore:
    """
    Build the key-value store selected by PIN_STORE_BACKEND.

    Raises:
        ValidationError: If the backend is unknown or misconfigured
    """
    backend = get_store_backend()

    if backend == "memory":
        logger.warning("Using in-memory PIN store - settings will not survive restart")
        return MemoryKeyValueStore()

    if backend == "file":
        return JsonFileKeyValueStore(get_store_path())

    if backend == "dynamo":
        table_name = get_table_name()
        if not table_name:
            raise ValidationError("PIN_TABLE_NAME is required for the dynamo store")
        return DynamoKeyValueStore(table_name)

    raise ValidationError(f"PIN_STORE_BACKEND must be one of {STORE_BACKENDS}")
