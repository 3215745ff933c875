"""Values exported by Jenkins jobs."""

from __future__ import annotations

from ..keys import Key
from .base import CiSource


class JenkinsCiSource(CiSource):
    marker_var = "JENKINS_URL"
    var_names = {
        Key.BuildArch: None,
        Key.BuildBranch: "BRANCH_NAME",
        Key.BuildDate: None,
        Key.BuildHostingUrl: None,
        Key.BuildNumber: "BUILD_NUMBER",
        Key.BuildOs: None,
        Key.BuildOsFamily: None,
        Key.BuildTag: None,
        Key.Ci: None,
        Key.License: None,
        Key.Licenses: None,
        Key.Name: "APP_NAME",
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
        Key.Version: "VERSION",
        Key.VersionDate: None,
    }


__all__ = ["JenkinsCiSource"]
