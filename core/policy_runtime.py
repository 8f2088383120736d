"""Configuration loading and logging bootstrap."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from core.settings import AppSettings

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML from file, returning empty mapping when missing."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dictionaries."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_effective_config(root: Path, override_path: Path | None = None) -> dict[str, Any]:
    """Load ``config/default.yaml`` and merge an optional user file over it."""
    merged = load_yaml(root / "config" / "default.yaml")
    if override_path is not None:
        if not override_path.exists():
            raise ValueError(f"Config file not found: {override_path}")
        merged = merge_dicts(merged, load_yaml(override_path))
    return merged


def load_settings(root: Path, override_path: Path | None = None) -> AppSettings:
    """Load and validate settings."""
    return AppSettings.from_mapping(load_effective_config(root, override_path))


def resolve_path(root: Path, value: str | None) -> Path | None:
    if not value:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else (root / path).resolve()


def configure_logging(level: str = "INFO") -> None:
    """Install a stream handler on the root logger unless one is already set up."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
