"""Utilities for inspecting and validating configuration files."""

from __future__ import annotations

from pathlib import Path
from types import UnionType
from typing import Any, Iterable, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config
from .utils import resolve_env_reference, resolve_path

ConfigModel = AppConfig

# Exit codes reported by ``config check``.
EXIT_OK = 0
EXIT_INVALID_FORMAT = 1
EXIT_UNREADABLE = 2
EXIT_INVALID_VALUES = 3


class ConfigInspectionError(RuntimeError):
    """Raised when configuration inspection fails unexpectedly."""


def check_config(path: Path, *, config_cls: type[ConfigModel] = ConfigModel) -> tuple[dict[str, Any], int, ConfigModel | None]:
    """Validate the configuration file and collect warnings.

    Returns a tuple of ``(result_dict, exit_code, config_instance_or_None)``.
    """

    try:
        config = load_config(config_cls, path)
    except FileNotFoundError as exc:
        return _error(path, "missing_file", str(exc)), EXIT_UNREADABLE, None
    except PermissionError as exc:
        return _error(path, "permission_error", str(exc)), EXIT_UNREADABLE, None
    except ValidationError as exc:
        details = [
            {
                "loc": _format_error_location(err["loc"]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        result = _error(path, "validation_error", "Configuration validation failed")
        result["error"]["details"] = details
        return result, EXIT_INVALID_VALUES, None
    except ValueError as exc:
        return _error(path, "invalid_format", str(exc)), EXIT_INVALID_FORMAT, None
    except Exception as exc:  # pragma: no cover - unexpected failures
        raise ConfigInspectionError("Unexpected configuration inspection error") from exc

    result = {
        "status": "ok",
        "config_path": str(path),
        "warnings": _collect_warnings(config, Path(path).parent),
    }
    return result, EXIT_OK, config


def explain_config(*, config_cls: type[ConfigModel] = ConfigModel) -> list[dict[str, Any]]:
    """Describe configuration fields for documentation purposes."""

    documentation: list[dict[str, Any]] = []

    def _walk(model_cls: type[BaseModel], prefix: str = "") -> None:
        for field_name, field in model_cls.model_fields.items():
            documentation.append(
                {
                    "name": f"{prefix}{field_name}",
                    "type": _format_annotation(field.annotation),
                    "required": field.is_required(),
                    "default": _format_default(field),
                    "description": field.description or "",
                }
            )
            nested = _nested_model(field.annotation)
            if nested is not None:
                _walk(nested, f"{prefix}{field_name}.")

    _walk(config_cls)
    return documentation


def _error(path: Path, kind: str, message: str) -> dict[str, Any]:
    return {
        "status": "error",
        "config_path": str(path),
        "error": {"type": kind, "message": message},
    }


def _format_error_location(location: Iterable[Union[int, str]]) -> str:
    return ".".join(str(part) for part in location)


def _collect_warnings(config: ConfigModel, config_dir: Path) -> list[str]:
    warnings: list[str] = []
    migration = config.migration

    dump_path = resolve_path(migration.source.dump_path, config_dir)
    if not dump_path.exists():
        warnings.append(f"Legacy dump '{dump_path}' does not exist yet")

    try:
        resolve_env_reference(migration.target.database)
    except EnvironmentError as exc:
        warnings.append(str(exc))

    if not migration.atomic:
        warnings.append("'atomic' is disabled; a failed run leaves partially migrated rows behind")

    return warnings


def _format_annotation(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin is None:
        if isinstance(annotation, type):
            return annotation.__name__
        return repr(annotation).replace("typing.", "")

    args = get_args(annotation)
    if origin in {Union, UnionType}:
        non_none = [arg for arg in args if arg is not type(None)]  # noqa: E721
        if len(non_none) == 1 and len(args) == 2:
            return f"Optional[{_format_annotation(non_none[0])}]"
        return f"Union[{', '.join(_format_annotation(arg) for arg in args)}]"

    origin_name = getattr(origin, "__name__", repr(origin).replace("typing.", ""))
    if args:
        return f"{origin_name}[{', '.join(_format_annotation(arg) for arg in args)}]"
    return origin_name


def _format_default(field: FieldInfo) -> Any:
    if field.default_factory is not None:
        try:
            value = field.default_factory()
        except Exception:  # pragma: no cover - factory failure is unexpected
            return "<factory>"
    elif field.is_required():
        return None
    else:
        value = field.default

    if isinstance(value, Path):
        return str(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    if get_origin(annotation) in {Union, UnionType}:
        for arg in get_args(annotation):
            if isinstance(arg, type) and issubclass(arg, BaseModel):
                return arg
    return None


__all__ = ["check_config", "explain_config", "ConfigInspectionError"]
