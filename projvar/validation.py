"""Validation of candidate values: one three-level judgement per (key, value)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Pattern, Tuple, Union
from urllib.parse import SplitResult, urlsplit

from . import constants
from .keys import Key, ensure_exhaustive
from .logging import get_logger
from .tools.git import is_git_dirty_version
from .tools.hosting import HostingType, TransferProtocol

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .context import RunContext

_LOGGER = get_logger("validation")


class OutcomeKind(Enum):
    OPTIMAL = "optimal"
    SUBOPTIMAL = "suboptimal"
    INVALID = "invalid"


class WarningKind(Enum):
    """Why a usable value is not optimal."""

    MISSING = "missing"
    SUBOPTIMAL_VALUE = "suboptimal-value"
    UNKNOWN_BUT_NOT_DISPROVED = "unknown-but-not-disproved"


class ErrorKind(Enum):
    """Why a value is not usable."""

    MISSING = "missing"
    ALMOST_USABLE_VALUE = "almost-usable-value"
    BAD_VALUE = "bad-value"
    IO_FAILURE = "io-failure"


@dataclass(frozen=True)
class ValidationOutcome:
    """Judgement of one candidate value; exactly one of ``warning``/``error`` is set for non-optimal kinds."""

    kind: OutcomeKind
    warning: Optional[WarningKind] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def optimal(cls, message: str = "") -> "ValidationOutcome":
        return cls(OutcomeKind.OPTIMAL, message=message)

    @classmethod
    def suboptimal(cls, warning: WarningKind, message: str = "") -> "ValidationOutcome":
        return cls(OutcomeKind.SUBOPTIMAL, warning=warning, message=message)

    @classmethod
    def invalid(cls, error: ErrorKind, message: str = "") -> "ValidationOutcome":
        return cls(OutcomeKind.INVALID, error=error, message=message)

    @property
    def is_optimal(self) -> bool:
        return self.kind is OutcomeKind.OPTIMAL

    @property
    def is_invalid(self) -> bool:
        return self.kind is OutcomeKind.INVALID

    @property
    def means_missing(self) -> bool:
        """Whether the value stands for "no value" rather than a real one."""
        return self.warning is WarningKind.MISSING or self.error is ErrorKind.MISSING

    def describe(self) -> str:
        detail = self.warning or self.error
        label = self.kind.value if detail is None else f"{self.kind.value}({detail.value})"
        return f"{label}: {self.message}" if self.message else label


# Priority of outcomes during arbitration; higher wins. These exact values
# decide observable tie-breaks and must not change.
OPTIMAL_SCORE = 255
_WARNING_SCORES: dict[WarningKind, int] = {
    WarningKind.SUBOPTIMAL_VALUE: 200,
    WarningKind.MISSING: 150,
    WarningKind.UNKNOWN_BUT_NOT_DISPROVED: 140,
}
_ERROR_SCORES: dict[ErrorKind, int] = {
    ErrorKind.ALMOST_USABLE_VALUE: 100,
    ErrorKind.BAD_VALUE: 50,
    ErrorKind.MISSING: 40,
    ErrorKind.IO_FAILURE: 30,
}


def validity_score(outcome: ValidationOutcome) -> int:
    """Integer rank of an outcome, used as the primary arbitration criterion."""
    if outcome.kind is OutcomeKind.OPTIMAL:
        return OPTIMAL_SCORE
    if outcome.kind is OutcomeKind.SUBOPTIMAL and outcome.warning is not None:
        return _WARNING_SCORES[outcome.warning]
    if outcome.kind is OutcomeKind.INVALID and outcome.error is not None:
        return _ERROR_SCORES[outcome.error]
    raise ValueError(f"A {outcome.kind.value} outcome needs a matching warning or error kind")


Validator = Callable[["RunContext", str], ValidationOutcome]


def validate(ctx: "RunContext", key: Key, value: str) -> ValidationOutcome:
    """Classify ``value`` as a candidate for ``key``."""
    return _VALIDATORS[key](ctx, value)


# ----------------------------------------------------------------------
# Helpers

_R_SEM_VERS_RELEASE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$", re.ASCII)
_R_SEM_VERS = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)
_R_GIT_VERS = re.compile(
    r"^((g[0-9a-f]{7})|((0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)))"
    r"(-(0|[1-9]\d*)-(g[0-9a-f]{7}))?((-dirty(-broken)?)|-broken(-dirty)?)?$",
    re.ASCII,
)
_R_GIT_SHA = re.compile(r"^g?[0-9a-f]{7,40}$")
_R_GIT_SHA_PREFIX = re.compile(r"^g[0-9a-f]{7}")
_R_UNKNOWN_VERS = re.compile(r"^($|#|//)")
_R_MACHINE_READABLE = re.compile(r"^[0-9a-zA-Z_-]+$")
_R_SCP_LIKE = re.compile(r"^(?P<user>[^@/:]+@)?(?P<host>[^/:]+)([:/](?P<path>.+))?$")

_WEB_SCHEMES = ("http", "https")
_SSH_SCHEMES = ("http", "https", "ssh")
_GIT_SCHEMES = ("git",)

# Path layouts per hosting type; GitLab allows nested groups.
_P_USER_REPO = r"^/(?P<user>[^/]+)/(?P<repo>[^/]+)"
_P_USER_GROUPS_REPO = r"^/(?P<user>[^/]+)/((?P<structure>[^/]+)/)*(?P<repo>[^/]+)"

_WEB_PATHS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(_P_USER_REPO + r"/?$"),
    HostingType.GitLab: re.compile(_P_USER_GROUPS_REPO + r"/?$"),
    HostingType.BitBucket: re.compile(_P_USER_REPO + r"/?$"),
}
_CLONE_PATHS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(_P_USER_REPO + r"\.git$"),
    HostingType.GitLab: re.compile(_P_USER_GROUPS_REPO + r"\.git$"),
    HostingType.BitBucket: re.compile(_P_USER_REPO + r"\.git$"),
}
_RAW_PATHS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(_P_USER_REPO + r"$"),
    HostingType.GitLab: re.compile(_P_USER_GROUPS_REPO + r"/(-/)?raw$"),
    HostingType.BitBucket: re.compile(_P_USER_REPO + r"/raw$"),
}
_FILE_PATHS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(_P_USER_REPO + r"/blob$"),
    HostingType.GitLab: re.compile(_P_USER_GROUPS_REPO + r"/(-/)?blob$"),
    HostingType.BitBucket: re.compile(_P_USER_REPO + r"/src$"),
}
_DIR_PATHS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(_P_USER_REPO + r"/tree$"),
    HostingType.GitLab: re.compile(_P_USER_GROUPS_REPO + r"/(-/)?tree$"),
    HostingType.BitBucket: re.compile(_P_USER_REPO + r"/src$"),
}
_COMMIT_PATHS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(_P_USER_REPO + r"/commit$"),
    HostingType.GitLab: re.compile(_P_USER_GROUPS_REPO + r"/(-/)?commit$"),
    HostingType.BitBucket: re.compile(_P_USER_REPO + r"/commits$"),
}
_ISSUES_PATHS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(_P_USER_REPO + r"/issues$"),
    HostingType.GitLab: re.compile(_P_USER_GROUPS_REPO + r"/(-/)?issues$"),
    HostingType.BitBucket: re.compile(_P_USER_REPO + r"/issues$"),
}
_PAGES_HOSTS: dict[HostingType, Pattern[str]] = {
    HostingType.GitHub: re.compile(r"^(?P<user>[^/.]+)\.github\.io$"),
    HostingType.GitLab: re.compile(r"^(?P<user>[^/.]+)\.gitlab\.io$"),
}


def _missing(ctx: "RunContext", key: Key) -> ValidationOutcome:
    if ctx.settings.is_required(key):
        return ValidationOutcome.invalid(ErrorKind.MISSING, "No value for a required property")
    return ValidationOutcome.suboptimal(WarningKind.MISSING, "No value for an optional property")


def _bad(message: str) -> ValidationOutcome:
    return ValidationOutcome.invalid(ErrorKind.BAD_VALUE, message)


def _almost(message: str) -> ValidationOutcome:
    return ValidationOutcome.invalid(ErrorKind.ALMOST_USABLE_VALUE, message)


def _check_empty(value: str, part_desc: str) -> Optional[ValidationOutcome]:
    if not value:
        return _bad(f"{part_desc} can not be empty")
    return None


def _check_public_url(
    value: str, *, schemes: Tuple[str, ...] = _WEB_SCHEMES
) -> Union[SplitResult, ValidationOutcome]:
    try:
        url = urlsplit(value)
        url.port  # raises ValueError on a malformed port
    except ValueError:
        return _bad("Not a valid URL")
    if not url.scheme or not url.netloc or not url.hostname:
        return _bad("Not a valid URL")
    if url.scheme not in schemes:
        return _almost(f"Should use one of these as protocol (scheme): [{', '.join(schemes)}]")
    # SSH always authenticates as some user; web access should be anonymous.
    if url.username and url.scheme != "ssh":
        return _almost(f"Should be anonymous access, but specifies a user-name: {url.username}")
    if url.password:
        return _almost("Should be anonymous access, but contains a password")
    if url.query:
        return _almost(f"Should be a simple URL, but uses query arguments: {url.query}")
    if url.fragment:
        return _almost(f"Should be a simple URL, but uses a fragment: {url.fragment}")
    return url


def _check_url_path(
    url: SplitResult, url_desc: str, path_reg: Optional[Pattern[str]]
) -> ValidationOutcome:
    if path_reg is None or not url.hostname:
        return ValidationOutcome.suboptimal(
            WarningKind.UNKNOWN_BUT_NOT_DISPROVED,
            f"No {url_desc} URL layout known for host {url.hostname}",
        )
    if path_reg.match(url.path):
        return ValidationOutcome.optimal(
            f'For {url.hostname}, the path of the {url_desc} URL ("{url.path}") matches "{path_reg.pattern}"'
        )
    return _almost(
        f'For {url.hostname}, the path of the {url_desc} URL is invalid: "{url.path}"; '
        f'it should match "{path_reg.pattern}"'
    )


def _url_validator(url_desc: str, paths: dict[HostingType, Pattern[str]]) -> Validator:
    def _validate(ctx: "RunContext", value: str) -> ValidationOutcome:
        checked = _check_public_url(value)
        if isinstance(checked, ValidationOutcome):
            return checked
        hosting = ctx.settings.hosting_type_for(checked.hostname)
        return _check_url_path(checked, url_desc, paths.get(hosting))

    return _validate


def _check_date(ctx: "RunContext", value: str, date_desc: str) -> ValidationOutcome:
    if not value:
        return _bad(f"{date_desc} date can not be empty")
    date_format = ctx.settings.date_format
    try:
        datetime.strptime(value, date_format)
    except ValueError as exc:
        return _bad(f'Not a {date_desc} date according to the date-format "{date_format}": {exc}')
    return ValidationOutcome.optimal(f"Matches the date format '{date_format}'")


def _check_non_empty(part_desc: str) -> Validator:
    def _validate(ctx: "RunContext", value: str) -> ValidationOutcome:
        return _check_empty(value, part_desc) or ValidationOutcome.optimal("at least not empty")

    return _validate


def _check_one_of(part_desc: str, valid: tuple[str, ...]) -> Validator:
    def _validate(ctx: "RunContext", value: str) -> ValidationOutcome:
        empty = _check_empty(value, part_desc)
        if empty is not None:
            return empty
        if value in valid:
            return ValidationOutcome.optimal()
        return _bad(f"Only these values are valid: {', '.join(valid)}")

    return _validate


# ----------------------------------------------------------------------
# Validators


def validate_version(ctx: "RunContext", value: str) -> ValidationOutcome:
    dirty = is_git_dirty_version(value)
    if dirty:
        _LOGGER.warning(
            "Dirty project version '%s'; you have uncommitted changes in your project", value
        )
    if _R_SEM_VERS_RELEASE.match(value):
        return ValidationOutcome.optimal("A release version")
    if dirty:
        if _R_GIT_SHA_PREFIX.match(value):
            return ValidationOutcome.optimal("A dirty git version starting with a SHA")
        return ValidationOutcome.optimal("A dirty git version starting with a tag")
    if _R_GIT_SHA.match(value):
        return ValidationOutcome.suboptimal(
            WarningKind.SUBOPTIMAL_VALUE,
            "A raw git SHA is technically ok, but neither a release version nor human-readable",
        )
    if _R_GIT_VERS.match(value):
        if _R_GIT_SHA_PREFIX.match(value):
            return ValidationOutcome.suboptimal(
                WarningKind.SUBOPTIMAL_VALUE,
                "A git version starting with a SHA (instead of a tag, which would be preferred)",
            )
        return ValidationOutcome.optimal("A git version starting with a tag")
    if _R_SEM_VERS.match(value):
        return ValidationOutcome.optimal("A semantic version")
    if _R_UNKNOWN_VERS.match(value):
        return _missing(ctx, Key.Version)
    return _bad("Not a valid version")


def validate_license(ctx: "RunContext", value: str) -> ValidationOutcome:
    if not value:
        return _missing(ctx, Key.License)
    if value in constants.SPDX_IDENTS:
        return ValidationOutcome.optimal("An SPDX license identifier")
    return ValidationOutcome.suboptimal(
        WarningKind.SUBOPTIMAL_VALUE, "Not a recognized SPDX license identifier"
    )


def validate_licenses(ctx: "RunContext", value: str) -> ValidationOutcome:
    if not value:
        return _missing(ctx, Key.Licenses)
    for license_id in value.split(","):
        license_id = license_id.strip()
        if license_id not in constants.SPDX_IDENTS:
            return ValidationOutcome.suboptimal(
                WarningKind.SUBOPTIMAL_VALUE,
                f"'{license_id}' is not a recognized SPDX license identifier",
            )
    return ValidationOutcome.optimal("A ',' separated list of SPDX license identifiers")


def validate_repo_clone_url_ssh(ctx: "RunContext", value: str) -> ValidationOutcome:
    checked = _check_public_url(value, schemes=_SSH_SCHEMES)
    if isinstance(checked, ValidationOutcome):
        scp_like = _R_SCP_LIKE.match(value)
        if scp_like is None:
            return checked
        converted = _check_public_url(
            f"ssh://{scp_like.group('user') or ''}{scp_like.group('host')}/{scp_like.group('path') or ''}",
            schemes=_SSH_SCHEMES,
        )
        if isinstance(converted, ValidationOutcome):
            return checked
        checked = converted
    elif checked.scheme != "ssh":
        return _almost("Only protocol ssh is allowed")
    hosting = ctx.settings.hosting_type_for(checked.hostname)
    return _check_url_path(checked, "repo clone ssh", _CLONE_PATHS.get(hosting))


def validate_repo_clone_url_git(ctx: "RunContext", value: str) -> ValidationOutcome:
    checked = _check_public_url(value, schemes=_GIT_SCHEMES)
    if isinstance(checked, ValidationOutcome):
        return checked
    hosting = ctx.settings.hosting_type_for(checked.hostname)
    if not hosting.supports_clone_url(TransferProtocol.GIT):
        return _bad(f"{hosting.value} hosting does not serve the git protocol")
    return _check_url_path(checked, "repo clone git", _CLONE_PATHS.get(hosting))


def validate_build_hosting_url(ctx: "RunContext", value: str) -> ValidationOutcome:
    checked = _check_public_url(value)
    if isinstance(checked, ValidationOutcome):
        return checked
    hosting = ctx.settings.hosting_type_for_pages(checked.hostname)
    host_reg = _PAGES_HOSTS.get(hosting)
    if host_reg is None or not checked.hostname:
        return ValidationOutcome.suboptimal(
            WarningKind.UNKNOWN_BUT_NOT_DISPROVED,
            f"No pages host layout known for {checked.hostname}",
        )
    if host_reg.match(checked.hostname):
        return ValidationOutcome.optimal(f'Host matches "{host_reg.pattern}"')
    return _almost(
        f'The build hosting host "{checked.hostname}" should match "{host_reg.pattern}"'
    )


def validate_name_machine_readable(ctx: "RunContext", value: str) -> ValidationOutcome:
    empty = _check_empty(value, "Project name (machine-readable)")
    if empty is not None:
        return empty
    if _R_MACHINE_READABLE.match(value):
        return ValidationOutcome.optimal(f"Matches '{_R_MACHINE_READABLE.pattern}'")
    return _bad(f"Name is not machine-readable, does not match '{_R_MACHINE_READABLE.pattern}'")


def validate_build_number(ctx: "RunContext", value: str) -> ValidationOutcome:
    empty = _check_empty(value, "Build number")
    if empty is not None:
        return empty
    try:
        int(value)
    except ValueError:
        return ValidationOutcome.suboptimal(
            WarningKind.SUBOPTIMAL_VALUE,
            "The build number is generally assumed to be a positive, whole number",
        )
    return ValidationOutcome.optimal("An integer build number")


def validate_ci(ctx: "RunContext", value: str) -> ValidationOutcome:
    empty = _check_empty(value, "CI")
    if empty is not None:
        return empty
    if value in ("true", "false"):
        return ValidationOutcome.optimal()
    return _bad("CI can be 'true', 'false' or be omitted, which gets interpreted as 'false'")


_VALIDATORS: dict[Key, Validator] = {
    Key.BuildArch: _check_one_of("Build arch", constants.VALID_ARCHS),
    Key.BuildBranch: _check_non_empty("Branch"),
    Key.BuildDate: lambda ctx, value: _check_date(ctx, value, "build"),
    Key.BuildHostingUrl: validate_build_hosting_url,
    Key.BuildNumber: validate_build_number,
    Key.BuildOs: _check_non_empty("Build OS"),
    Key.BuildOsFamily: _check_one_of("Build OS family", constants.VALID_OS_FAMILIES),
    Key.BuildTag: _check_non_empty("Tag"),
    Key.Ci: validate_ci,
    Key.License: validate_license,
    Key.Licenses: validate_licenses,
    Key.Name: _check_non_empty("Project name (human-readable)"),
    Key.NameMachineReadable: validate_name_machine_readable,
    Key.RepoCloneUrl: _url_validator("repo clone", _CLONE_PATHS),
    Key.RepoCloneUrlGit: validate_repo_clone_url_git,
    Key.RepoCloneUrlHttp: _url_validator("repo clone http", _CLONE_PATHS),
    Key.RepoCloneUrlSsh: validate_repo_clone_url_ssh,
    Key.RepoCommitPrefixUrl: _url_validator("commit prefix", _COMMIT_PATHS),
    Key.RepoIssuesUrl: _url_validator("issues", _ISSUES_PATHS),
    Key.RepoRawVersionedPrefixUrl: _url_validator("raw versioned prefix", _RAW_PATHS),
    Key.RepoVersionedDirPrefixUrl: _url_validator("versioned dir prefix", _DIR_PATHS),
    Key.RepoVersionedFilePrefixUrl: _url_validator("versioned file prefix", _FILE_PATHS),
    Key.RepoWebUrl: _url_validator("web", _WEB_PATHS),
    Key.Version: validate_version,
    Key.VersionDate: lambda ctx, value: _check_date(ctx, value, "version"),
}
ensure_exhaustive(_VALIDATORS, "validator table")


__all__ = [
    "ErrorKind",
    "OPTIMAL_SCORE",
    "OutcomeKind",
    "ValidationOutcome",
    "Validator",
    "WarningKind",
    "validate",
    "validity_score",
]
