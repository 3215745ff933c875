"""Tests for projvar.sources.git."""

from __future__ import annotations

import pytest

from projvar.keys import Key
from projvar.sources.base import SourceError
from projvar.sources.git import GitSource
from tests._fixtures.repo_builder import FakeGit, RepoBuilder

SHA = "0123456789abcdef0123456789abcdef01234567"


def test_reads_repository_state(repo_builder: RepoBuilder) -> None:
    git = FakeGit.for_repo(
        repo_builder.path(),
        version="1.2.3",
        branch="main",
        tag="v1.2.3",
        remote_url="https://github.com/acme/widget.git",
    )
    ctx = repo_builder.context(git=git)
    source = GitSource()

    assert source.is_usable(ctx)
    assert source.retrieve(ctx, Key.Version) == "1.2.3"
    assert source.retrieve(ctx, Key.BuildBranch) == "main"
    assert source.retrieve(ctx, Key.BuildTag) == "v1.2.3"
    assert source.retrieve(ctx, Key.RepoCloneUrl) == "https://github.com/acme/widget.git"
    assert source.retrieve(ctx, Key.VersionDate) == "2020-09-13 12:26:40"
    assert source.retrieve(ctx, Key.Name) is None


def test_version_falls_back_to_sha(repo_builder: RepoBuilder) -> None:
    git = FakeGit.for_repo(repo_builder.path(), version=None)
    ctx = repo_builder.context(git=git)

    assert GitSource().retrieve(ctx, Key.Version) == SHA


def test_version_without_any_commit_fails(repo_builder: RepoBuilder) -> None:
    git = FakeGit.for_repo(repo_builder.path(), version=None, sha=None)
    ctx = repo_builder.context(git=git)

    with pytest.raises(SourceError) as excinfo:
        GitSource().retrieve(ctx, Key.Version)
    assert excinfo.value.key is Key.Version
    assert excinfo.value.source == "GitSource"


def test_detached_head_has_no_branch(repo_builder: RepoBuilder) -> None:
    git = FakeGit.for_repo(repo_builder.path(), branch=None)
    ctx = repo_builder.context(git=git)

    assert GitSource().retrieve(ctx, Key.BuildBranch) is None


def test_unusable_outside_repository(repo_builder: RepoBuilder) -> None:
    assert not GitSource().is_usable(repo_builder.context())
