"""Knowledge about public git hosting sites and hosting software."""

from __future__ import annotations

from enum import Enum

from .. import constants


class TransferProtocol(Enum):
    """Protocols a repository can be cloned with."""

    GIT = "git"
    HTTPS = "https"
    SSH = "ssh"


class PublicSite(Enum):
    """Well known public hosting sites."""

    GitHubCom = "GitHubCom"
    GitLabCom = "GitLabCom"
    BitBucketOrg = "BitBucketOrg"
    SourceHut = "SourceHut"
    CodeBergOrg = "CodeBergOrg"
    RepoOrCz = "RepoOrCz"
    RocketGitCom = "RocketGitCom"
    SourceForgeNet = "SourceForgeNet"
    Unknown = "Unknown"


_SITE_DOMAINS: dict[str, PublicSite] = {
    constants.D_GIT_HUB_COM: PublicSite.GitHubCom,
    constants.DS_GIT_HUB_IO_SUFFIX: PublicSite.GitHubCom,
    constants.D_GIT_HUB_COM_RAW: PublicSite.GitHubCom,
    constants.D_GIT_LAB_COM: PublicSite.GitLabCom,
    constants.DS_GIT_LAB_IO_SUFFIX: PublicSite.GitLabCom,
    constants.D_BIT_BUCKET_ORG: PublicSite.BitBucketOrg,
    constants.D_GIT_SOURCE_HUT: PublicSite.SourceHut,
    constants.D_REPO_OR_CZ: PublicSite.RepoOrCz,
    constants.D_ROCKET_GIT_COM: PublicSite.RocketGitCom,
    constants.D_SSH_ROCKET_GIT_COM: PublicSite.RocketGitCom,
    constants.D_GIT_ROCKET_GIT_COM: PublicSite.RocketGitCom,
    constants.D_CODE_BERG_ORG: PublicSite.CodeBergOrg,
    constants.DS_CODE_BERG_PAGE: PublicSite.CodeBergOrg,
    constants.D_SOURCE_FORGE_NET: PublicSite.SourceForgeNet,
    constants.DS_SOURCE_FORGE_IO: PublicSite.SourceForgeNet,
}

_PAGES_DOMAINS: dict[str, PublicSite] = {
    constants.DS_GIT_HUB_IO_SUFFIX: PublicSite.GitHubCom,
    constants.DS_GIT_LAB_IO_SUFFIX: PublicSite.GitLabCom,
}


def public_site_from_host(host: str | None) -> PublicSite:
    """Map a URL host to the public site serving it."""
    if not host:
        return PublicSite.Unknown
    return _SITE_DOMAINS.get(host.lower(), PublicSite.Unknown)


def public_site_from_hosting_domain(host: str | None) -> PublicSite:
    """Map a pages host like ``user.github.io`` to its public site."""
    if not host:
        return PublicSite.Unknown
    parts = host.lower().split(".")
    if len(parts) < 2:
        return PublicSite.Unknown
    return _PAGES_DOMAINS.get(".".join(parts[-2:]), PublicSite.Unknown)


class HostingType(Enum):
    """Git hosting software, which decides URL layouts."""

    GitHub = "GitHub"
    GitLab = "GitLab"
    BitBucket = "BitBucket"
    SourceHut = "SourceHut"
    Gitea = "Gitea"
    Girocco = "Girocco"
    RocketGit = "RocketGit"
    Allura = "Allura"
    Unknown = "Unknown"

    @classmethod
    def parse(cls, text: str) -> "HostingType":
        lowered = text.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        choices = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown hosting type '{text}' (expected one of: {choices})")

    @classmethod
    def from_site(cls, site: PublicSite) -> "HostingType":
        return _SITE_HOSTING[site]

    def supports_clone_url(self, protocol: TransferProtocol) -> bool:
        """Whether repos on this hosting software can be cloned via ``protocol``."""
        if protocol is TransferProtocol.GIT:
            return self in (HostingType.Girocco, HostingType.RocketGit)
        return True

    @property
    def def_ssh_user(self) -> str:
        """User part (including ``@``) conventionally used for SSH clones."""
        if self in (HostingType.GitHub, HostingType.GitLab, HostingType.BitBucket, HostingType.SourceHut):
            return "git@"
        if self is HostingType.RocketGit:
            return "rocketgit@"
        return ""


_SITE_HOSTING: dict[PublicSite, HostingType] = {
    PublicSite.GitHubCom: HostingType.GitHub,
    PublicSite.GitLabCom: HostingType.GitLab,
    PublicSite.BitBucketOrg: HostingType.BitBucket,
    PublicSite.SourceHut: HostingType.SourceHut,
    PublicSite.RepoOrCz: HostingType.Girocco,
    PublicSite.RocketGitCom: HostingType.RocketGit,
    PublicSite.CodeBergOrg: HostingType.Gitea,
    PublicSite.SourceForgeNet: HostingType.Allura,
    PublicSite.Unknown: HostingType.Unknown,
}


__all__ = [
    "HostingType",
    "PublicSite",
    "TransferProtocol",
    "public_site_from_host",
    "public_site_from_hosting_domain",
]
