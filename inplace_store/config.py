"""Configuration management module for inplace-store."""

from __future__ import annotations

import logging
import os
import tomllib
import warnings
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Base Paths
DEFAULT_TEMP_STORAGE_DIR = Path.home() / ".cache" / "inplace-store"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "inplace-store" / "config.toml"
CONFIG_PATH = Path(os.getenv("INPLACE_STORE_CONFIG", str(DEFAULT_CONFIG_PATH))).expanduser()

# Folder (under the temp storage dir) holding one destination cache file per parent entity
DEST_PATH_FOLDER = "destPath"

DEFAULT_CHUNK_SIZE = 1024 * 1024
DEFAULT_LOCK_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    temp_storage_dir: Path
    chunk_size: int = DEFAULT_CHUNK_SIZE
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT

    @property
    def dest_path_dir(self) -> Path:
        return self.temp_storage_dir / DEST_PATH_FOLDER


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:
        warnings.warn(f"Failed to parse inplace-store config at {path}: {exc}", stacklevel=2)
        return {}


def load_config(path: Path | None = None) -> dict:
    """Return parsed config content from CONFIG_PATH (or an explicit path)."""
    return _read_config_file(path or CONFIG_PATH)


def _resolve_temp_storage_dir(config: dict) -> Path:
    env_value = os.getenv("INPLACE_STORE_TEMP_DIR")
    if env_value:
        return Path(env_value).expanduser()

    config_value = config.get("temp_storage_dir")
    if isinstance(config_value, str) and config_value.strip():
        return Path(config_value).expanduser()

    return DEFAULT_TEMP_STORAGE_DIR


def _resolve_number(env_name: str, config: dict, key: str, default, cast):
    raw = os.getenv(env_name)
    source = env_name
    if raw is None:
        raw = config.get(key)
        source = f"{key} in {CONFIG_PATH}"
    if raw is None:
        return default
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        warnings.warn(f"Ignoring invalid {source}={raw!r}; using {default}", stacklevel=3)
        return default
    if value <= 0:
        warnings.warn(f"Ignoring non-positive {source}={raw!r}; using {default}", stacklevel=3)
        return default
    return value


def load_settings(config_path: Path | None = None) -> Settings:
    """Resolve settings: env var > config file > defaults."""
    config = load_config(config_path)
    settings = Settings(
        temp_storage_dir=_resolve_temp_storage_dir(config),
        chunk_size=_resolve_number(
            "INPLACE_STORE_CHUNK_SIZE", config, "chunk_size", DEFAULT_CHUNK_SIZE, int
        ),
        lock_timeout=_resolve_number(
            "INPLACE_STORE_LOCK_TIMEOUT", config, "lock_timeout", DEFAULT_LOCK_TIMEOUT, float
        ),
    )
    logger.debug("Loaded settings: %s", settings)
    return settings
