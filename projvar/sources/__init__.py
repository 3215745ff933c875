"""Value sources and the default pipeline."""

from __future__ import annotations

from typing import List

from .arbitrator import Arbitrator
from .base import Source, SourceError, Tier, sort_sources
from .bitbucket_ci import BitBucketCiSource
from .deriver import Deriver
from .env import EnvSource
from .fs import FilesystemSource
from .git import GitSource
from .github_ci import GitHubCiSource
from .gitlab_ci import GitLabCiSource
from .jenkins_ci import JenkinsCiSource
from .travis_ci import TravisCiSource


def default_sources() -> List[Source]:
    """Return one instance of every built-in source, ending with the deriver and arbitrator.

    The result is not yet sorted; collection order is decided by
    :func:`sort_sources`.
    """
    return [
        FilesystemSource(),
        GitSource(),
        GitHubCiSource(),
        GitLabCiSource(),
        BitBucketCiSource(),
        JenkinsCiSource(),
        TravisCiSource(),
        EnvSource(),
        Deriver(),
        Arbitrator(),
    ]


__all__ = [
    "Source",
    "SourceError",
    "Tier",
    "default_sources",
    "sort_sources",
]
