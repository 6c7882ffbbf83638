"""Application-level configuration models."""

from __future__ import annotations

from pydantic import Field

from recruitool.config.base import BaseConfig
from recruitool.config.migration import MigrationConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the migrator."""

    migration: MigrationConfig = Field(
        default_factory=MigrationConfig,
        description="Legacy source and target database settings",
    )


__all__ = ["AppConfig"]
