"""Command line interface for the Recruitool migrator."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from loguru import logger

from .config import AppConfig, load_config, resolve_path
from .config.inspector import check_config, explain_config
from .migration import MigrationError, RecruitoolMigrator

DEFAULT_CONFIG_NAME = "recruitool.toml"


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    explicit_config: bool = False
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            if not self.explicit_config and not self.config_path.exists():
                logger.info("No {} found; using default settings", self.config_path.name)
                self._config = AppConfig()
            else:
                logger.info("Loading configuration from {}", self.config_path)
                self._config = load_config(AppConfig, self.config_path)
        return self._config


app = typer.Typer(help="Migrate the legacy recruitment database into the Recruitool schema")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")
migrate_app = typer.Typer(help="Data migration commands")
app.add_typer(migrate_app, name="migrate")


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - defensive guard
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        help=f"Path to the TOML configuration file (defaults to ./{DEFAULT_CONFIG_NAME} when present)",
    ),
) -> None:
    """Initialise CLI state."""

    if config is None:
        ctx.obj = CLIState(config_path=(Path.cwd() / DEFAULT_CONFIG_NAME).resolve())
    else:
        ctx.obj = CLIState(config_path=config.resolve(), explicit_config=True)


@migrate_app.command("run", help="Migrate a legacy SQL dump into the target database")
def migrate_run(
    ctx: typer.Context,
    dump: Path | None = typer.Option(
        None,
        "--dump",
        help="Legacy SQL dump (defaults to migration.source.dump_path)",
    ),
    target: str | None = typer.Option(
        None,
        "--target",
        help="Target SQLite database (defaults to migration.target.database)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Migrate, report and roll back every target write"),
    report: Path | None = typer.Option(
        None,
        "--report",
        help="Write the JSON run report to this path (defaults to migration.report_path)",
    ),
) -> None:
    state = _get_state(ctx)
    try:
        config = state.ensure_config()
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Cannot load configuration: {}", exc)
        _exit(1)
        return

    config_dir = state.config_path.parent
    migration = config.migration.model_copy(deep=True)
    migration.source.dump_path = dump.resolve() if dump is not None else resolve_path(migration.source.dump_path, config_dir)
    if target is not None:
        migration.target.database = target
    if report is not None:
        migration.report_path = report.resolve()
    elif migration.report_path is not None:
        migration.report_path = resolve_path(migration.report_path, config_dir)

    logger.info("Migrating legacy dump {}", migration.source.dump_path)
    try:
        result = RecruitoolMigrator(migration, dry_run=dry_run).run()
    except MigrationError as exc:
        logger.error("Migration aborted ({}): {}", type(exc).__name__, exc)
        _exit(1)
        return
    except EnvironmentError as exc:
        logger.error("Migration aborted: {}", exc)
        _exit(1)
        return

    typer.echo(json.dumps(result, indent=2, ensure_ascii=False))


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, _ = check_config(state.config_path)

    if format == "json":
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {}", result["config_path"])
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            location = detail["loc"] or "<root>"
            logger.error("  - {}: {} ({})", location, detail["message"], detail["type"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        print(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    logger.info("Configuration schema ({} fields):", len(fields))
    for field in fields:
        default_value = field["default"]
        if isinstance(default_value, (dict, list)):
            default_repr = json.dumps(default_value, ensure_ascii=False, default=str)
        else:
            default_repr = str(default_value)
        logger.info(
            "  - {name}: type={type}, required={required}, default={default}, description={description}",
            name=field["name"],
            type=field["type"],
            required="yes" if field["required"] else "no",
            default=default_repr,
            description=field["description"] or "(no description)",
        )


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
