"""Values exported by GitLab CI/CD."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..conversions import ConversionError, date_iso8601_to_our_format
from ..keys import Key
from ..models import Confidence
from .base import CiSource

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..context import RunContext


class GitLabCiSource(CiSource):
    """See https://docs.gitlab.com/ee/ci/variables/predefined_variables.html."""

    marker_var = "GITLAB_CI"
    confidences = {
        Key.BuildOs: Confidence.LOW,
        Key.Ci: Confidence.LOW,
    }
    var_names = {
        Key.BuildArch: None,
        Key.BuildBranch: "CI_COMMIT_BRANCH",
        Key.BuildDate: None,
        Key.BuildHostingUrl: "CI_PAGES_URL",
        Key.BuildNumber: None,
        Key.BuildOs: "CI_RUNNER_EXECUTABLE_ARCH",
        Key.BuildOsFamily: None,
        Key.BuildTag: "CI_COMMIT_TAG",
        Key.Ci: None,
        Key.License: None,
        Key.Licenses: None,
        Key.Name: "CI_PROJECT_NAME",
        Key.NameMachineReadable: None,
        Key.RepoCloneUrl: "CI_REPOSITORY_URL",
        Key.RepoCloneUrlGit: None,
        Key.RepoCloneUrlHttp: None,
        Key.RepoCloneUrlSsh: None,
        Key.RepoCommitPrefixUrl: None,
        Key.RepoIssuesUrl: None,
        Key.RepoRawVersionedPrefixUrl: None,
        Key.RepoVersionedDirPrefixUrl: None,
        Key.RepoVersionedFilePrefixUrl: None,
        Key.RepoWebUrl: "CI_PROJECT_URL",
        Key.Version: None,
        Key.VersionDate: None,
    }

    def retrieve(self, ctx: "RunContext", key: Key) -> Optional[str]:
        if key is Key.Ci:
            return ctx.var("CI") or "false"
        if key is Key.Version:
            return self.version_from_build_tag(ctx) or ctx.var("CI_COMMIT_SHORT_SHA")
        if key is Key.VersionDate:
            timestamp = ctx.var("CI_COMMIT_TIMESTAMP")
            if timestamp is None:
                return None
            try:
                return date_iso8601_to_our_format(ctx.settings, timestamp)
            except ConversionError as exc:
                raise self._error(str(exc), key) from exc
        return super().retrieve(ctx, key)


__all__ = ["GitLabCiSource"]
