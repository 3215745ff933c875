"""Run settings shared by sources, validators and sinks."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from .constants import DATE_FORMAT, DEFAULT_KEY_PREFIX
from .keys import Key, default_required_keys
from .tools.hosting import (
    HostingType,
    public_site_from_host,
    public_site_from_hosting_domain,
)

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .config import ProjvarConfig


class Overwrite(Enum):
    """Which pre-existing output values sinks may replace."""

    ALL = "all"
    NONE = "none"
    MAIN = "main"
    ALTERNATIVE = "alternative"

    def main(self) -> bool:
        """Whether the primary variable (e.g. ``PROJECT_VERSION``) may be replaced."""
        return self in (Overwrite.ALL, Overwrite.MAIN)

    def alt(self) -> bool:
        """Whether alternative variables (e.g. ``VERSION``) may be replaced."""
        return self in (Overwrite.ALL, Overwrite.ALTERNATIVE)


class FailOn(Enum):
    """Policy deciding which problems abort a run."""

    ANY_MISSING_VALUE = "missing"
    ERROR = "error"


class RetrievedMode(Enum):
    """What to report about retrieved raw values."""

    NONE = "none"
    PRIMARY = "primary"
    ALL = "all"


@dataclass(frozen=True)
class ShowRetrieved:
    """Diagnostics request: what to report and where (``None`` means the log)."""

    mode: RetrievedMode = RetrievedMode.NONE
    target: Optional[Path] = None


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one resolution run."""

    repo_path: Path = Path(".")
    required_keys: frozenset[Key] = field(default_factory=default_required_keys)
    overwrite: Overwrite = Overwrite.ALL
    date_format: str = DATE_FORMAT
    fail_on: FailOn = FailOn.ERROR
    show_retrieved: ShowRetrieved = field(default_factory=ShowRetrieved)
    hosting_type: HostingType = HostingType.Unknown
    only_required: bool = False
    set_all: bool = False
    key_prefix: str = DEFAULT_KEY_PREFIX

    def is_required(self, key: Key) -> bool:
        return key in self.required_keys

    def hosting_type_for(self, host: str | None) -> HostingType:
        """Hosting type of a repo URL host, honouring an explicit override."""
        if self.hosting_type is not HostingType.Unknown:
            return self.hosting_type
        return HostingType.from_site(public_site_from_host(host))

    def hosting_type_for_pages(self, host: str | None) -> HostingType:
        """Hosting type of a pages host (``user.github.io``), honouring an override."""
        if self.hosting_type is not HostingType.Unknown:
            return self.hosting_type
        return HostingType.from_site(public_site_from_hosting_domain(host))

    @classmethod
    def from_config(
        cls, config: "ProjvarConfig", *, repo_path: Path | None = None, **overrides: Any
    ) -> "Settings":
        """Build settings from a loaded config file, letting non-``None`` overrides win."""
        values: dict[str, Any] = {"repo_path": repo_path or config.root}
        if config.key_prefix is not None:
            values["key_prefix"] = config.key_prefix
        if config.date_format is not None:
            values["date_format"] = config.date_format
        if config.hosting_type is not None:
            values["hosting_type"] = config.hosting_type
        if config.overwrite is not None:
            values["overwrite"] = config.overwrite
        if config.fail_on is not None:
            values["fail_on"] = config.fail_on
        if config.only_required is not None:
            values["only_required"] = config.only_required
        if config.set_all is not None:
            values["set_all"] = config.set_all
        if config.required is not None:
            values["required_keys"] = frozenset(config.required)
        if config.show_retrieved is not None:
            values["show_retrieved"] = ShowRetrieved(mode=config.show_retrieved)
        settings = cls(**values)
        applicable = {name: value for name, value in overrides.items() if value is not None}
        return replace(settings, **applicable) if applicable else settings


__all__ = [
    "FailOn",
    "Overwrite",
    "RetrievedMode",
    "Settings",
    "ShowRetrieved",
]
