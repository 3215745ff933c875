"""Pure transforms between related property values (clone URL to web URL, ...)."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional
from urllib.parse import SplitResult, urlsplit

from . import constants
from .settings import Settings
from .tools.hosting import HostingType, TransferProtocol

_R_CLONE_URL = re.compile(
    r"^((?P<protocol>[0-9a-zA-Z._-]+)://)?"
    r"((?P<user>[0-9a-zA-Z._-]+)@)?"
    r"(?P<host>[0-9a-zA-Z._-]+)"
    r"([/:](?P<path_and_rest>.+)?)?$"
)
_R_NON_MACHINE_CHARS = re.compile(r"[^0-9a-zA-Z_-]")
_R_VERSION_PREFIX = re.compile(r"^[vV][.]?[ \t]*")
_R_LAST_SEGMENT_PREFIX = re.compile(r"^.*/")

# Hosting software with a known repository URL layout.
_KNOWN_LAYOUTS = (HostingType.GitHub, HostingType.GitLab, HostingType.BitBucket)

_ISSUES_SUFFIXES = {
    HostingType.GitHub: "/issues",
    HostingType.GitLab: "/-/issues",
    HostingType.BitBucket: "/issues",
}
_RAW_SUFFIXES = {
    HostingType.GitHub: "",
    HostingType.GitLab: "/-/raw",
    HostingType.BitBucket: "/raw",
}
_FILE_SUFFIXES = {
    HostingType.GitHub: "/blob",
    HostingType.GitLab: "/-/blob",
    HostingType.BitBucket: "/src",
}
_DIR_SUFFIXES = {
    HostingType.GitHub: "/tree",
    HostingType.GitLab: "/-/tree",
    HostingType.BitBucket: "/src",
}
_COMMIT_SUFFIXES = {
    HostingType.GitHub: "/commit",
    HostingType.GitLab: "/-/commit",
    HostingType.BitBucket: "/commits",
}
_PAGES_DOMAINS = {
    HostingType.GitHub: constants.DS_GIT_HUB_IO_SUFFIX,
    HostingType.GitLab: constants.DS_GIT_LAB_IO_SUFFIX,
}


class ConversionError(RuntimeError):
    """Raised when the input of a transform violates its precondition."""

    def __init__(self, message: str, *, value: str) -> None:
        super().__init__(message)
        self.value = value


def clone_url_conversion(
    settings: Settings, any_clone_url: str, protocol: TransferProtocol
) -> str:
    """Rewrite a clone URL (``https://``, ``ssh://``, ``git://`` or scp-like) to ``protocol``."""
    match = _R_CLONE_URL.match(any_clone_url.strip())
    if match is None:
        raise ConversionError(
            f"Not a clone URL in any known format: '{any_clone_url}'", value=any_clone_url
        )
    host = match.group("host")
    path = match.group("path_and_rest") or ""
    if protocol is TransferProtocol.HTTPS:
        return f"https://{host}/{path}"
    if protocol is TransferProtocol.GIT:
        return f"git://{host}/{path}"
    user = settings.hosting_type_for(host).def_ssh_user
    return f"ssh://{user}{host}/{path}"


def clone_url_to_web_url(settings: Settings, any_clone_url: str) -> Optional[str]:
    """Web UI URL of the repository behind a clone URL, for hosts with a known layout."""
    url = _parse_url(clone_url_conversion(settings, any_clone_url, TransferProtocol.HTTPS))
    if settings.hosting_type_for(url.hostname) not in _KNOWN_LAYOUTS:
        return None
    path = url.path.rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return f"https://{url.hostname}{path}"


def web_url_to_clone_url(
    settings: Settings, web_url: str, protocol: TransferProtocol
) -> Optional[str]:
    url = _parse_url(web_url)
    if settings.hosting_type_for(url.hostname) not in _KNOWN_LAYOUTS:
        return None
    https_url = f"https://{url.hostname}{url.path.rstrip('/')}.git"
    if protocol is TransferProtocol.HTTPS:
        return https_url
    return clone_url_conversion(settings, https_url, protocol)


def web_url_to_issues_url(settings: Settings, web_url: str) -> Optional[str]:
    return _append_to_web_url(settings, web_url, _ISSUES_SUFFIXES)


def web_url_to_versioned_file_prefix_url(settings: Settings, web_url: str) -> Optional[str]:
    return _append_to_web_url(settings, web_url, _FILE_SUFFIXES)


def web_url_to_versioned_dir_prefix_url(settings: Settings, web_url: str) -> Optional[str]:
    return _append_to_web_url(settings, web_url, _DIR_SUFFIXES)


def web_url_to_commit_prefix_url(settings: Settings, web_url: str) -> Optional[str]:
    return _append_to_web_url(settings, web_url, _COMMIT_SUFFIXES)


def web_url_to_raw_prefix_url(settings: Settings, web_url: str) -> Optional[str]:
    """Prefix for raw file contents; GitHub serves those from a separate host."""
    url = _parse_url(web_url)
    hosting = settings.hosting_type_for(url.hostname)
    if hosting is HostingType.GitHub:
        return f"https://{constants.D_GIT_HUB_COM_RAW}{url.path.rstrip('/')}"
    return _append_to_web_url(settings, web_url, _RAW_SUFFIXES)


def web_url_to_build_hosting_url(settings: Settings, web_url: str) -> Optional[str]:
    """Pages URL (``https://user.github.io/project``) of a repository."""
    url = _parse_url(web_url)
    domain = _PAGES_DOMAINS.get(settings.hosting_type_for(url.hostname))
    if domain is None:
        return None
    segments = [segment for segment in url.path.split("/") if segment]
    if len(segments) < 2:
        raise ConversionError(
            f"Web URL path should contain user and project: '{web_url}'", value=web_url
        )
    user, project = segments[0], "/".join(segments[1:])
    return f"https://{user}.{domain}/{project}"


def web_url_to_machine_readable_name(web_url: str) -> str:
    """Last path segment of a web URL."""
    name = _R_LAST_SEGMENT_PREFIX.sub("", web_url.rstrip("/"))
    if name == web_url:
        raise ConversionError(f"Not a web URL with a path: '{web_url}'", value=web_url)
    return name_to_machine_readable(name)


def name_to_machine_readable(name: str) -> str:
    """Replace every character outside ``[0-9a-zA-Z_-]`` with ``_``."""
    machine_readable = _R_NON_MACHINE_CHARS.sub("_", name)
    if not machine_readable:
        raise ConversionError("Can not create a machine-readable name from ''", value=name)
    return machine_readable


def slug_to_proj_name(slug: str) -> str:
    """Project part of an ``owner/project`` slug."""
    return slug.rstrip("/").rsplit("/", 1)[-1]


def date_iso8601_to_our_format(settings: Settings, date_iso8601: str) -> str:
    try:
        parsed = datetime.fromisoformat(date_iso8601.strip())
    except ValueError as exc:
        raise ConversionError(
            f"Not an ISO-8601 date: '{date_iso8601}'", value=date_iso8601
        ) from exc
    return parsed.strftime(settings.date_format)


def clean_version(version: str) -> str:
    """Strip a leading ``v``/``V`` (optionally followed by ``.`` or blanks) from a tag."""
    return _R_VERSION_PREFIX.sub("", version)


# ----------------------------------------------------------------------
# Internals


def _parse_url(text: str) -> SplitResult:
    try:
        url = urlsplit(text.strip())
    except ValueError as exc:
        raise ConversionError(f"Not a valid URL: '{text}'", value=text) from exc
    if not url.scheme or not url.hostname:
        raise ConversionError(f"Not a valid URL: '{text}'", value=text)
    return url


def _append_to_web_url(
    settings: Settings, web_url: str, suffixes: dict[HostingType, str]
) -> Optional[str]:
    url = _parse_url(web_url)
    suffix = suffixes.get(settings.hosting_type_for(url.hostname))
    if suffix is None:
        return None
    return f"{url.scheme}://{url.netloc}{url.path.rstrip('/')}{suffix}"


__all__ = [
    "ConversionError",
    "clean_version",
    "clone_url_conversion",
    "clone_url_to_web_url",
    "date_iso8601_to_our_format",
    "name_to_machine_readable",
    "slug_to_proj_name",
    "web_url_to_build_hosting_url",
    "web_url_to_clone_url",
    "web_url_to_commit_prefix_url",
    "web_url_to_issues_url",
    "web_url_to_machine_readable_name",
    "web_url_to_raw_prefix_url",
    "web_url_to_versioned_dir_prefix_url",
    "web_url_to_versioned_file_prefix_url",
]
