"""Values read from the local git repository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Optional

from ..keys import Key, ensure_exhaustive
from ..logging import get_logger
from ..tools.git import GitError, GitRepo
from .base import Source, Tier

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext

_LOGGER = get_logger("sources.git")


class GitSource(Source):
    """Version, branch, tag, clone URL and commit date of the checked out state."""

    def is_usable(self, ctx: "RunContext") -> bool:
        return ctx.repo is not None

    def hierarchy_rank(self) -> Tier:
        return Tier.VCS

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        reader = _READERS[key]
        repo = ctx.repo
        if reader is None or repo is None:
            return None
        try:
            return reader(ctx, repo)
        except GitError as exc:
            raise self._error(f"Failed to read {key.value} from git: {exc}", key) from exc


def _version(ctx: "RunContext", repo: GitRepo) -> Optional[str]:
    try:
        return repo.version()
    except GitError as exc:
        _LOGGER.warning("Failed to git describe (%s), using the SHA instead", exc)
    sha = repo.sha()
    if sha is None:
        raise GitError("No SHA available to serve as version")
    return sha


def _branch(ctx: "RunContext", repo: GitRepo) -> Optional[str]:
    return repo.branch()


def _tag(ctx: "RunContext", repo: GitRepo) -> Optional[str]:
    return repo.tag()


def _clone_url(ctx: "RunContext", repo: GitRepo) -> Optional[str]:
    return repo.remote_clone_url()


def _version_date(ctx: "RunContext", repo: GitRepo) -> Optional[str]:
    return repo.commit_date(ctx.settings.date_format)


_READERS: Dict[Key, Optional[Callable[["RunContext", GitRepo], Optional[str]]]] = {
    Key.BuildArch: None,
    Key.BuildBranch: _branch,
    Key.BuildDate: None,
    Key.BuildHostingUrl: None,
    Key.BuildNumber: None,
    Key.BuildOs: None,
    Key.BuildOsFamily: None,
    Key.BuildTag: _tag,
    Key.Ci: None,
    Key.License: None,
    Key.Licenses: None,
    Key.Name: None,
    Key.NameMachineReadable: None,
    Key.RepoCloneUrl: _clone_url,
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
    Key.VersionDate: _version_date,
}
ensure_exhaustive(_READERS, "git readers")


__all__ = ["GitSource"]
