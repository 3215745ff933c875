"""Registry of the project properties projvar knows how to resolve."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Mapping, Tuple

from .constants import DEFAULT_KEY_PREFIX

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Key(Enum):
    """Closed set of resolvable properties, in canonical (alphabetical) order."""

    BuildArch = "BuildArch"
    BuildBranch = "BuildBranch"
    BuildDate = "BuildDate"
    BuildHostingUrl = "BuildHostingUrl"
    BuildNumber = "BuildNumber"
    BuildOs = "BuildOs"
    BuildOsFamily = "BuildOsFamily"
    BuildTag = "BuildTag"
    Ci = "Ci"
    License = "License"
    Licenses = "Licenses"
    Name = "Name"
    NameMachineReadable = "NameMachineReadable"
    RepoCloneUrl = "RepoCloneUrl"
    RepoCloneUrlGit = "RepoCloneUrlGit"
    RepoCloneUrlHttp = "RepoCloneUrlHttp"
    RepoCloneUrlSsh = "RepoCloneUrlSsh"
    RepoCommitPrefixUrl = "RepoCommitPrefixUrl"
    RepoIssuesUrl = "RepoIssuesUrl"
    RepoRawVersionedPrefixUrl = "RepoRawVersionedPrefixUrl"
    RepoVersionedDirPrefixUrl = "RepoVersionedDirPrefixUrl"
    RepoVersionedFilePrefixUrl = "RepoVersionedFilePrefixUrl"
    RepoWebUrl = "RepoWebUrl"
    Version = "Version"
    VersionDate = "VersionDate"

    @property
    def index(self) -> int:
        return _KEY_INDEX[self]

    @property
    def output_name(self) -> str:
        """Name without prefix, e.g. ``REPO_WEB_URL`` for ``RepoWebUrl``."""
        return _CAMEL_BOUNDARY.sub("_", self.value).upper()

    @classmethod
    def parse(cls, text: str, *, prefix: str = DEFAULT_KEY_PREFIX) -> "Key":
        """Resolve a key from its member name or its (optionally prefixed) output name."""
        candidate = text.strip()
        for key in cls:
            if candidate == key.value:
                return key
        upper = candidate.upper()
        if prefix and upper.startswith(prefix.upper()):
            upper = upper[len(prefix) :]
        for key in cls:
            if upper == key.output_name:
                return key
        raise ValueError(f"Unknown property key '{text}'")


ALL_KEYS: Tuple[Key, ...] = tuple(Key)
_KEY_INDEX = {key: position for position, key in enumerate(ALL_KEYS)}


def ensure_exhaustive(table: Mapping[Key, object], what: str) -> None:
    """Raise ``TypeError`` unless ``table`` has an entry for every Key."""
    missing = [key.value for key in ALL_KEYS if key not in table]
    if missing:
        raise TypeError(f"{what} does not cover keys: {', '.join(missing)}")


@dataclass(frozen=True)
class Variable:
    """Static metadata describing one property."""

    output_name: str
    description: str
    default_required: bool = False
    alt_names: Tuple[str, ...] = field(default_factory=tuple)

    def key(self, prefix: str | None = DEFAULT_KEY_PREFIX) -> str:
        """Return the variable name as emitted, including the configured prefix."""
        return f"{prefix or ''}{self.output_name}"


def _var(
    key: Key,
    description: str,
    *,
    required: bool = False,
    alt_names: Iterable[str] = (),
) -> Variable:
    return Variable(
        output_name=key.output_name,
        description=description,
        default_required=required,
        alt_names=tuple(alt_names),
    )


_REGISTRY: dict[Key, Variable] = {
    Key.BuildArch: _var(
        Key.BuildArch,
        "Computer hardware architecture we are building on. (common values: 'x86', 'x86_64')",
        alt_names=("BUILD_ARCH", "CI_RUNNER_EXECUTABLE_ARCH"),
    ),
    Key.BuildBranch: _var(
        Key.BuildBranch,
        "The development branch name.",
        alt_names=("BRANCH", "BUILD_BRANCH", "TRAVIS_BRANCH", "CI_COMMIT_BRANCH", "BITBUCKET_BRANCH"),
    ),
    Key.BuildDate: _var(
        Key.BuildDate,
        "Date of this build.",
        required=True,
        alt_names=("BUILD_DATE",),
    ),
    Key.BuildHostingUrl: _var(
        Key.BuildHostingUrl,
        "Web URL under which the generated output will be available.",
        alt_names=("HOSTING_URL", "CI_PAGES_URL"),
    ),
    Key.BuildNumber: _var(
        Key.BuildNumber,
        "The build number (1, 2, 3) starts at 1 for each repo and branch.",
        alt_names=("BUILD_NUMBER", "TRAVIS_BUILD_NUMBER", "BITBUCKET_BUILD_NUMBER"),
    ),
    Key.BuildOs: _var(
        Key.BuildOs,
        "Operating system we are building on. (common values: 'linux', 'macos', 'windows')",
        alt_names=("BUILD_OS", "OS", "RUNNER_OS", "TRAVIS_OS_NAME"),
    ),
    Key.BuildOsFamily: _var(
        Key.BuildOsFamily,
        "Operating system family we are building on. (should be either 'unix' or 'windows')",
        alt_names=("BUILD_OS_FAMILY", "OS_FAMILY"),
    ),
    Key.BuildTag: _var(
        Key.BuildTag,
        "The tag of the commit that kicked off the build. Only available on tags.",
        alt_names=("TAG", "BUILD_TAG", "CI_COMMIT_TAG", "TRAVIS_TAG", "BITBUCKET_TAG"),
    ),
    Key.Ci: _var(
        Key.Ci,
        "'true' if running on a CI/build-bot.",
        alt_names=("CI",),
    ),
    Key.License: _var(
        Key.License,
        "Main license of the sources, as an SPDX identifier.",
        alt_names=("LICENSE",),
    ),
    Key.Licenses: _var(
        Key.Licenses,
        "All licenses of the sources, as a ', ' separated list of SPDX identifiers.",
        alt_names=("LICENSES",),
    ),
    Key.Name: _var(
        Key.Name,
        "The human-readable name of the project.",
        required=True,
        alt_names=("NAME", "CI_PROJECT_NAME", "APP_NAME"),
    ),
    Key.NameMachineReadable: _var(
        Key.NameMachineReadable,
        "The machine-readable name of the project (only [0-9a-zA-Z_-]).",
        alt_names=("NAME_MACHINE_READABLE",),
    ),
    Key.RepoCloneUrl: _var(
        Key.RepoCloneUrl,
        "The repo clone URL, preferably anonymous HTTPS.",
        required=True,
        alt_names=("REPO_CLONE_URL", "CI_REPOSITORY_URL"),
    ),
    Key.RepoCloneUrlGit: _var(
        Key.RepoCloneUrlGit,
        "The repo clone URL using the git transfer protocol.",
        alt_names=("REPO_CLONE_URL_GIT",),
    ),
    Key.RepoCloneUrlHttp: _var(
        Key.RepoCloneUrlHttp,
        "The repo clone URL using the HTTP(S) transfer protocol.",
        alt_names=("REPO_CLONE_URL_HTTP", "BITBUCKET_GIT_HTTP_ORIGIN"),
    ),
    Key.RepoCloneUrlSsh: _var(
        Key.RepoCloneUrlSsh,
        "The repo clone URL using the SSH transfer protocol.",
        alt_names=("REPO_CLONE_URL_SSH",),
    ),
    Key.RepoCommitPrefixUrl: _var(
        Key.RepoCommitPrefixUrl,
        "Web URL prefix for a specific commit; append '/<SHA>'.",
        alt_names=("REPO_COMMIT_PREFIX_URL",),
    ),
    Key.RepoIssuesUrl: _var(
        Key.RepoIssuesUrl,
        "Web URL of the issue tracker.",
        alt_names=("REPO_ISSUES_URL",),
    ),
    Key.RepoRawVersionedPrefixUrl: _var(
        Key.RepoRawVersionedPrefixUrl,
        "URL prefix for raw file contents; append '/<VERSION>/<PATH>'.",
        alt_names=("REPO_RAW_VERSIONED_PREFIX_URL",),
    ),
    Key.RepoVersionedDirPrefixUrl: _var(
        Key.RepoVersionedDirPrefixUrl,
        "Web URL prefix for a directory at a version; append '/<VERSION>/<PATH>'.",
        alt_names=("REPO_VERSIONED_DIR_PREFIX_URL",),
    ),
    Key.RepoVersionedFilePrefixUrl: _var(
        Key.RepoVersionedFilePrefixUrl,
        "Web URL prefix for a file at a version; append '/<VERSION>/<PATH>'.",
        alt_names=("REPO_VERSIONED_FILE_PREFIX_URL",),
    ),
    Key.RepoWebUrl: _var(
        Key.RepoWebUrl,
        "The repo web UI URL.",
        required=True,
        alt_names=("REPO_WEB_URL", "CI_PROJECT_URL"),
    ),
    Key.Version: _var(
        Key.Version,
        "The project version.",
        required=True,
        alt_names=("VERSION", "CI_COMMIT_SHORT_SHA"),
    ),
    Key.VersionDate: _var(
        Key.VersionDate,
        "Date this version was committed to source control.",
        required=True,
        alt_names=("VERSION_DATE",),
    ),
}
ensure_exhaustive(_REGISTRY, "property registry")


def describe(key: Key) -> Variable:
    """Return the static metadata of ``key``."""
    return _REGISTRY[key]


def default_required_keys() -> frozenset[Key]:
    """Return the keys that are mandatory unless configured otherwise."""
    return frozenset(key for key in ALL_KEYS if _REGISTRY[key].default_required)


def list_keys(*, alt_names: bool = False, prefix: str | None = DEFAULT_KEY_PREFIX) -> List[str]:
    """Render one line per key for human consumption."""
    lines: List[str] = []
    for key in ALL_KEYS:
        variable = _REGISTRY[key]
        marker = "*" if variable.default_required else " "
        line = f"{marker} {variable.key(prefix)} - {variable.description}"
        if alt_names and variable.alt_names:
            line += f" (also: {', '.join(variable.alt_names)})"
        lines.append(line)
    return lines


__all__ = [
    "ALL_KEYS",
    "Key",
    "Variable",
    "default_required_keys",
    "describe",
    "ensure_exhaustive",
    "list_keys",
]
