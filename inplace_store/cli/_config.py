"""Configuration resolution: CLI flag > env var > config file > default."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from inplace_store.config import Settings, load_settings


def resolve_settings(args_temp_dir: str | Path | None) -> Settings:
    """Load settings, letting ``--temp-dir`` override the temp storage directory."""
    settings = load_settings()
    if args_temp_dir is not None:
        settings = replace(settings, temp_storage_dir=Path(args_temp_dir).expanduser())
    return settings


def build_handler(args):
    from inplace_store.storage import InPlaceStorageHandler

    return InPlaceStorageHandler.from_config(resolve_settings(getattr(args, "temp_dir", None)))
