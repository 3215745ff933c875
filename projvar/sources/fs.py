"""Values read from the project directory and the build machine."""

from __future__ import annotations

import platform
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional

from ..constants import NON_PROJECT_DIR_NAMES
from ..keys import Key, ensure_exhaustive
from ..logging import get_logger
from ..models import Confidence
from .base import Source, Tier

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext

_LOGGER = get_logger("sources.fs")

_ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "arm64",
    "arm64": "arm64",
}
_OS_ALIASES = {
    "darwin": "macos",
    "linux": "linux",
    "windows": "windows",
}


class FilesystemSource(Source):
    """Reads ``VERSION``, ``LICENSES/`` and the directory name, plus platform facts."""

    confidences = {
        Key.BuildArch: Confidence.LOW,
        Key.BuildOs: Confidence.LOW,
        Key.BuildOsFamily: Confidence.LOW,
        Key.Name: Confidence.LOW,
    }

    def is_usable(self, ctx: "RunContext") -> bool:
        return ctx.settings.repo_path.is_dir()

    def hierarchy_rank(self) -> Tier:
        return Tier.FILESYSTEM

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        reader = _READERS[key]
        if reader is None:
            return None
        try:
            return reader(ctx)
        except OSError as exc:
            raise self._error(f"Failed to read {key.value} from the filesystem: {exc}", key) from exc


def build_arch() -> str:
    machine = platform.machine().lower()
    if machine.startswith("arm"):
        return _ARCH_ALIASES.get(machine, "arm")
    return _ARCH_ALIASES.get(machine, machine)


def build_os() -> str:
    system = platform.system().lower()
    return _OS_ALIASES.get(system, system)


def build_os_family() -> str:
    return "windows" if build_os() == "windows" else "unix"


def _build_date(ctx: "RunContext") -> str:
    return datetime.now().strftime(ctx.settings.date_format)


def _licenses(ctx: "RunContext") -> Optional[str]:
    licenses_dir = ctx.settings.repo_path / "LICENSES"
    if not licenses_dir.is_dir():
        return None
    names = sorted(path.stem for path in licenses_dir.iterdir() if path.suffix == ".txt")
    return ", ".join(names)


def _name(ctx: "RunContext") -> Optional[str]:
    dir_name = Path(ctx.settings.repo_path).resolve().name
    if not dir_name or dir_name.lower() in NON_PROJECT_DIR_NAMES:
        _LOGGER.debug("Directory name '%s' says nothing about the project", dir_name)
        return None
    return dir_name


def _version(ctx: "RunContext") -> Optional[str]:
    version_file = ctx.settings.repo_path / "VERSION"
    if not version_file.is_file():
        return None
    return version_file.read_text(encoding="utf-8").strip()


_READERS: Dict[Key, Optional[Callable[["RunContext"], Optional[str]]]] = {
    Key.BuildArch: lambda ctx: build_arch(),
    Key.BuildBranch: None,
    Key.BuildDate: _build_date,
    Key.BuildHostingUrl: None,
    Key.BuildNumber: None,
    Key.BuildOs: lambda ctx: build_os(),
    Key.BuildOsFamily: lambda ctx: build_os_family(),
    Key.BuildTag: None,
    Key.Ci: None,
    Key.License: None,
    Key.Licenses: _licenses,
    Key.Name: _name,
    Key.NameMachineReadable: None,
    Key.RepoCloneUrl: None,
    Key.RepoCloneUrlGit: None,
    Key.RepoCloneUrlHttp: None,
    Key.RepoCloneUrlSsh: None,
    Key.RepoCommitPrefixUrl: None,
    Key.RepoIssuesUrl: None,
    Key.RepoRawVersionedPrefixUrl: None,
    Key.RepoVersionedDirPrefixUrl: None,
    Key.RepoVersionedFilePrefixUrl: None,
    Key.RepoWebUrl: None,
    Key.Version: _version,
    Key.VersionDate: None,
}
ensure_exhaustive(_READERS, "filesystem readers")


__all__ = ["FilesystemSource", "build_arch", "build_os", "build_os_family"]
