"""Values exported by Travis CI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..conversions import slug_to_proj_name
from ..keys import Key
from .base import CiSource

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class TravisCiSource(CiSource):
    """See https://docs.travis-ci.com/user/environment-variables/."""

    marker_var = "TRAVIS"
    var_names = {
        Key.BuildArch: None,
        Key.BuildBranch: "TRAVIS_BRANCH",
        Key.BuildDate: None,
        Key.BuildHostingUrl: None,
        Key.BuildNumber: "TRAVIS_BUILD_NUMBER",
        Key.BuildOs: "TRAVIS_OS_NAME",
        Key.BuildOsFamily: None,
        Key.BuildTag: "TRAVIS_TAG",
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
        Key.Version: None,
        Key.VersionDate: None,
    }

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        if key is Key.Name:
            slug = ctx.var("TRAVIS_REPO_SLUG")
            return slug_to_proj_name(slug) if slug else None
        if key is Key.Version:
            return self.version_from_build_tag(ctx) or ctx.var("TRAVIS_COMMIT")
        return super().retrieve(ctx, key)


__all__ = ["TravisCiSource"]
