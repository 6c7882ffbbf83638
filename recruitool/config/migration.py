"""Migration configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator

from recruitool.config.base import BaseConfig


class LegacySourceConfig(BaseConfig):
    """Location of the legacy SQL dump."""

    dump_path: Path = Field(Path("old.sql"), description="Legacy SQL dump with ';'-terminated statements")
    encoding: str = Field("utf-8", description="Text encoding of the dump file")


class TargetStoreConfig(BaseConfig):
    """Connection settings for the redesigned database."""

    database: str = Field(
        "recruitool.db",
        description="SQLite database path or 'env:VAR_NAME' reference",
    )
    timeout: float = Field(5.0, gt=0, description="Seconds to wait for a database lock")

    @field_validator("database")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Target database must not be empty.")
        return value


class MigrationConfig(BaseConfig):
    """Settings for one migration run."""

    source: LegacySourceConfig = Field(default_factory=LegacySourceConfig)
    target: TargetStoreConfig = Field(default_factory=TargetStoreConfig)
    atomic: bool = Field(
        True,
        description="Roll back every target write when the run fails",
    )
    report_path: Path | None = Field(None, description="Optional JSON file receiving the run report")


__all__ = ["LegacySourceConfig", "TargetStoreConfig", "MigrationConfig"]
