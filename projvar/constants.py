"""Shared constants for property resolution."""

from __future__ import annotations

DEFAULT_KEY_PREFIX = "PROJECT_"

# strftime format used for generated dates (build date, commit date).
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

D_GIT_HUB_COM = "github.com"
D_GIT_HUB_COM_RAW = "raw.githubusercontent.com"
DS_GIT_HUB_IO_SUFFIX = "github.io"

D_GIT_LAB_COM = "gitlab.com"
DS_GIT_LAB_IO_SUFFIX = "gitlab.io"

D_BIT_BUCKET_ORG = "bitbucket.org"

D_GIT_SOURCE_HUT = "git.sr.ht"

D_REPO_OR_CZ = "repo.or.cz"

D_ROCKET_GIT_COM = "rocketgit.com"
D_SSH_ROCKET_GIT_COM = "ssh.rocketgit.com"
D_GIT_ROCKET_GIT_COM = "git.rocketgit.com"

D_CODE_BERG_ORG = "codeberg.org"
DS_CODE_BERG_PAGE = "codeberg.page"

D_SOURCE_FORGE_NET = "sourceforge.net"
DS_SOURCE_FORGE_IO = "sourceforge.io"

VALID_OS_FAMILIES: tuple[str, ...] = ("linux", "unix", "bsd", "osx", "windows")
VALID_ARCHS: tuple[str, ...] = ("x86", "x86_64", "arm", "arm64")

# Directory names that say nothing about the project they contain.
NON_PROJECT_DIR_NAMES: frozenset[str] = frozenset(
    {
        "src",
        "target",
        "build",
        "master",
        "main",
        "develop",
        "git",
        "repo",
        "repos",
        "scm",
        "trunk",
    }
)

# Commonly used SPDX license identifiers (https://spdx.org/licenses/).
SPDX_IDENTS: frozenset[str] = frozenset(
    {
        "0BSD",
        "AFL-3.0",
        "AGPL-1.0-only",
        "AGPL-1.0-or-later",
        "AGPL-3.0-only",
        "AGPL-3.0-or-later",
        "Apache-1.0",
        "Apache-1.1",
        "Apache-2.0",
        "APSL-2.0",
        "Artistic-1.0",
        "Artistic-2.0",
        "BlueOak-1.0.0",
        "BSD-1-Clause",
        "BSD-2-Clause",
        "BSD-2-Clause-Patent",
        "BSD-3-Clause",
        "BSD-3-Clause-Clear",
        "BSD-4-Clause",
        "BSL-1.0",
        "CAL-1.0",
        "CC-BY-1.0",
        "CC-BY-2.0",
        "CC-BY-3.0",
        "CC-BY-4.0",
        "CC-BY-NC-4.0",
        "CC-BY-NC-SA-4.0",
        "CC-BY-ND-4.0",
        "CC-BY-SA-3.0",
        "CC-BY-SA-4.0",
        "CC0-1.0",
        "CDDL-1.0",
        "CDDL-1.1",
        "CECILL-2.1",
        "CERN-OHL-1.1",
        "CERN-OHL-1.2",
        "CERN-OHL-P-2.0",
        "CERN-OHL-S-2.0",
        "CERN-OHL-W-2.0",
        "ECL-2.0",
        "EFL-2.0",
        "EPL-1.0",
        "EPL-2.0",
        "EUPL-1.1",
        "EUPL-1.2",
        "FSFAP",
        "FTL",
        "GFDL-1.3-only",
        "GFDL-1.3-or-later",
        "GPL-1.0-only",
        "GPL-1.0-or-later",
        "GPL-2.0-only",
        "GPL-2.0-or-later",
        "GPL-3.0-only",
        "GPL-3.0-or-later",
        "HPND",
        "ISC",
        "LGPL-2.0-only",
        "LGPL-2.0-or-later",
        "LGPL-2.1-only",
        "LGPL-2.1-or-later",
        "LGPL-3.0-only",
        "LGPL-3.0-or-later",
        "LiLiQ-P-1.1",
        "LPPL-1.3c",
        "MIT",
        "MIT-0",
        "MPL-1.1",
        "MPL-2.0",
        "MPL-2.0-no-copyleft-exception",
        "MS-PL",
        "MS-RL",
        "MulanPSL-2.0",
        "NCSA",
        "ODbL-1.0",
        "OFL-1.1",
        "OSL-3.0",
        "PostgreSQL",
        "PSF-2.0",
        "Python-2.0",
        "Ruby",
        "SSPL-1.0",
        "TAPR-OHL-1.0",
        "Unicode-DFS-2016",
        "Unlicense",
        "UPL-1.0",
        "Vim",
        "W3C",
        "WTFPL",
        "X11",
        "Zlib",
        "ZPL-2.1",
    }
)
