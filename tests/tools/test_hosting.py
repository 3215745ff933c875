"""Tests for projvar.tools.hosting."""

from __future__ import annotations

import pytest

from projvar.tools.hosting import (
    HostingType,
    PublicSite,
    TransferProtocol,
    public_site_from_host,
    public_site_from_hosting_domain,
)


@pytest.mark.parametrize(
    ("host", "site"),
    [
        ("github.com", PublicSite.GitHubCom),
        ("GitHub.com", PublicSite.GitHubCom),
        ("raw.githubusercontent.com", PublicSite.GitHubCom),
        ("gitlab.com", PublicSite.GitLabCom),
        ("bitbucket.org", PublicSite.BitBucketOrg),
        ("codeberg.org", PublicSite.CodeBergOrg),
        ("git.example.org", PublicSite.Unknown),
        (None, PublicSite.Unknown),
    ],
)
def test_public_site_from_host(host: str | None, site: PublicSite) -> None:
    assert public_site_from_host(host) is site


def test_public_site_from_hosting_domain() -> None:
    assert public_site_from_hosting_domain("octocat.github.io") is PublicSite.GitHubCom
    assert public_site_from_hosting_domain("group.gitlab.io") is PublicSite.GitLabCom
    assert public_site_from_hosting_domain("example.org") is PublicSite.Unknown
    assert public_site_from_hosting_domain("localhost") is PublicSite.Unknown


def test_hosting_type_from_site() -> None:
    assert HostingType.from_site(PublicSite.GitHubCom) is HostingType.GitHub
    assert HostingType.from_site(PublicSite.CodeBergOrg) is HostingType.Gitea
    assert HostingType.from_site(PublicSite.Unknown) is HostingType.Unknown


def test_hosting_type_parse_is_case_insensitive() -> None:
    assert HostingType.parse("gitlab") is HostingType.GitLab
    with pytest.raises(ValueError, match="expected one of"):
        HostingType.parse("svn")


def test_default_ssh_users() -> None:
    assert HostingType.GitHub.def_ssh_user == "git@"
    assert HostingType.RocketGit.def_ssh_user == "rocketgit@"
    assert HostingType.Unknown.def_ssh_user == ""


@pytest.mark.parametrize("hosting", list(HostingType))
def test_https_and_ssh_clones_are_always_supported(hosting: HostingType) -> None:
    assert hosting.supports_clone_url(TransferProtocol.HTTPS)
    assert hosting.supports_clone_url(TransferProtocol.SSH)


def test_only_some_hosting_types_serve_the_git_protocol() -> None:
    serving = {hosting for hosting in HostingType if hosting.supports_clone_url(TransferProtocol.GIT)}
    assert serving == {HostingType.Girocco, HostingType.RocketGit}
