from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw.strip())


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    # Storage layout
    data_path: str
    backup_suffix: str
    temp_suffix: str

    # Serialization
    json_indent: int

    # Record repository
    cache_ttl_seconds: int

    # Logging
    log_level: str


def get_settings() -> Settings:
    # Relative paths are resolved against the project root by the file manager.
    data_path = _env_str("DATA_PATH", "data")

    backup_suffix = _env_str("BACKUP_SUFFIX", ".backup")
    temp_suffix = _env_str("TEMP_SUFFIX", ".tmp")
    if backup_suffix == temp_suffix:
        raise ValueError("BACKUP_SUFFIX and TEMP_SUFFIX must differ")

    json_indent = _env_int("JSON_INDENT", 2)
    cache_ttl_seconds = _env_int("CACHE_TTL_SECONDS", 300)

    log_level = _env_str("LOG_LEVEL", "INFO").upper()

    return Settings(
        data_path=data_path,
        backup_suffix=backup_suffix,
        temp_suffix=temp_suffix,
        json_indent=json_indent,
        cache_ttl_seconds=cache_ttl_seconds,
        log_level=log_level,
    )
