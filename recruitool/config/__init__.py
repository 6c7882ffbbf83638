"""Configuration namespace for recruitool."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .migration import LegacySourceConfig, MigrationConfig, TargetStoreConfig
from .utils import resolve_env_reference, resolve_path

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "LegacySourceConfig",
    "MigrationConfig",
    "TargetStoreConfig",
    "resolve_env_reference",
    "resolve_path",
]
