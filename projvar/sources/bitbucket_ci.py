"""Values exported by Bitbucket Pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .. import constants
from ..keys import Key
from ..models import Confidence
from .base import CiSource

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class BitBucketCiSource(CiSource):
    """See https://support.atlassian.com/bitbucket-cloud/docs/variables-and-secrets/."""

    marker_var = "BITBUCKET_BUILD_NUMBER"
    confidences = {Key.Ci: Confidence.LOW}
    var_names = {
        Key.BuildArch: None,
        Key.BuildBranch: "BITBUCKET_BRANCH",
        Key.BuildDate: None,
        Key.BuildHostingUrl: None,
        Key.BuildNumber: "BITBUCKET_BUILD_NUMBER",
        Key.BuildOs: None,
        Key.BuildOsFamily: None,
        Key.BuildTag: "BITBUCKET_TAG",
        Key.Ci: None,
        Key.License: None,
        Key.Licenses: None,
        Key.Name: "BITBUCKET_PROJECT_KEY",
        Key.NameMachineReadable: None,
        # scp-like "git@host:path", which is no URL; hence not RepoCloneUrlSsh
        Key.RepoCloneUrl: "BITBUCKET_GIT_SSH_ORIGIN",
        Key.RepoCloneUrlGit: None,
        Key.RepoCloneUrlHttp: "BITBUCKET_GIT_HTTP_ORIGIN",
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
        if key is Key.Ci:
            return ctx.var("CI") or "false"
        if key is Key.RepoWebUrl:
            slug = ctx.var("BITBUCKET_REPO_FULL_NAME")
            return f"https://{constants.D_BIT_BUCKET_ORG}/{slug}" if slug else None
        if key is Key.Version:
            return self.version_from_build_tag(ctx) or ctx.var("BITBUCKET_COMMIT")
        return super().retrieve(ctx, key)


__all__ = ["BitBucketCiSource"]
