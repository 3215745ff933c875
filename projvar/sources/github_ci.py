"""Values exported by GitHub Actions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..conversions import slug_to_proj_name
from ..keys import Key
from ..models import Confidence
from .base import CiSource, ref_extract_branch, ref_extract_tag

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class GitHubCiSource(CiSource):
    """See https://docs.github.com/en/actions/learn-github-actions/environment-variables."""

    marker_var = "GITHUB_ACTIONS"
    confidences = {
        Key.BuildOs: Confidence.LOW,
        Key.Ci: Confidence.LOW,
        Key.Version: Confidence.LOW,
    }
    var_names = {
        Key.BuildArch: None,
        Key.BuildBranch: None,
        Key.BuildDate: None,
        Key.BuildHostingUrl: None,
        Key.BuildNumber: None,
        Key.BuildOs: "RUNNER_OS",
        Key.BuildOsFamily: None,
        Key.BuildTag: None,
        Key.Ci: None,
        Key.License: None,
        Key.Licenses: None,
        Key.Name: None,
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
        Key.Version: "GITHUB_SHA",
        Key.VersionDate: None,
    }

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        if key is Key.BuildBranch:
            ref = ctx.var("GITHUB_REF")
            return ref_extract_branch(ref) if ref else None
        if key is Key.BuildTag:
            ref = ctx.var("GITHUB_REF")
            return ref_extract_tag(ref) if ref else None
        if key is Key.Ci:
            return ctx.var("CI") or "false"
        if key is Key.Name:
            # usually "user/project"
            slug = ctx.var("GITHUB_REPOSITORY")
            return slug_to_proj_name(slug) if slug else None
        if key is Key.RepoWebUrl:
            server = ctx.var("GITHUB_SERVER_URL")
            slug = ctx.var("GITHUB_REPOSITORY")
            if server and slug:
                return f"{server.rstrip('/')}/{slug}"
            return None
        return super().retrieve(ctx, key)


__all__ = ["GitHubCiSource"]
