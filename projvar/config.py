"""Configuration loading for projvar (.projvar.yml)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import yaml

from .constants import DEFAULT_KEY_PREFIX
from .keys import Key
from .settings import FailOn, Overwrite, RetrievedMode
from .tools.hosting import HostingType

CONFIG_FILE_NAME = ".projvar.yml"

_E = TypeVar("_E", bound=Enum)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ProjvarConfig:
    """Represents the settings defined in .projvar.yml; ``None`` means "not configured"."""

    root: Path
    key_prefix: Optional[str] = None
    date_format: Optional[str] = None
    hosting_type: Optional[HostingType] = None
    overwrite: Optional[Overwrite] = None
    fail_on: Optional[FailOn] = None
    only_required: Optional[bool] = None
    set_all: Optional[bool] = None
    required: Optional[List[Key]] = None
    show_retrieved: Optional[RetrievedMode] = None


def load_config(config_path: Path) -> ProjvarConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjvarConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping at the root")

    key_prefix = _as_str(data.get("key_prefix"))
    hosting_name = _as_str(data.get("hosting_type"))
    hosting_type = None
    if hosting_name is not None:
        try:
            hosting_type = HostingType.parse(hosting_name)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    required = None
    if "required" in data:
        required = _as_key_list(data.get("required"), prefix=key_prefix or DEFAULT_KEY_PREFIX)

    return ProjvarConfig(
        root=root,
        key_prefix=key_prefix,
        date_format=_as_str(data.get("date_format")),
        hosting_type=hosting_type,
        overwrite=_as_enum(Overwrite, data.get("overwrite"), "overwrite"),
        fail_on=_as_enum(FailOn, data.get("fail_on"), "fail_on"),
        only_required=_as_bool(data.get("only_required")),
        set_all=_as_bool(data.get("set_all")),
        required=required,
        show_retrieved=_as_enum(RetrievedMode, data.get("show_retrieved"), "show_retrieved"),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILE_NAME).resolve()
    if config_path.name != CONFIG_FILE_NAME:
        return (config_path.parent / CONFIG_FILE_NAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_enum(enum_type: Type[_E], value: Any, field_name: str) -> Optional[_E]:
    text = _as_str(value)
    if text is None:
        return None
    lowered = text.strip().lower()
    for member in enum_type:
        if member.value == lowered:
            return member
    choices = ", ".join(str(member.value) for member in enum_type)
    raise ConfigError(f"Invalid value '{text}' for '{field_name}' (expected one of: {choices})")


def _as_key_list(value: Any, *, prefix: str) -> List[Key]:
    keys: List[Key] = []
    for name in _as_str_list(value):
        try:
            keys.append(Key.parse(name, prefix=prefix))
        except ValueError as exc:
            raise ConfigError(f"Invalid entry in 'required': {exc}") from exc
    return keys


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = ["CONFIG_FILE_NAME", "ConfigError", "ProjvarConfig", "load_config"]
