"""Classify the host into a package family.

The package family decides which statistics command is run and how its
output and the version of the statistics package are read.
"""

import enum
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from .error import PlatformError

_log = logging.getLogger("nagiosplugin")

REDHAT_RELEASE = "/etc/redhat-release"
SYSTEM_RELEASE = "/etc/system-release"
SUSE_RELEASE = "/etc/SuSE-release"
MANDRAKE_RELEASE = "/etc/mandrake-release"
DEBIAN_VERSION = "/etc/debian_version"
UNITEDLINUX_RELEASE = "/etc/UnitedLinux-release"

# Probed in this order, the first existing file wins.
RELEASE_FILES = (
    REDHAT_RELEASE,
    SYSTEM_RELEASE,
    SUSE_RELEASE,
    MANDRAKE_RELEASE,
    DEBIAN_VERSION,
)


class PlatformFamily(enum.Enum):
    RPM = "rpm"
    DPKG = "dpkg"
    PKGINFO = "pkginfo"
    LSLPP = "lslpp"
    PKG_INFO = "pkg_info"

    @property
    def platform(self):
        """Platform name used in diagnostics."""
        return PLATFORMS[self]


PLATFORMS = {
    PlatformFamily.RPM: "Linux",
    PlatformFamily.DPKG: "Linux",
    PlatformFamily.PKGINFO: "Solaris",
    PlatformFamily.LSLPP: "AIX",
    PlatformFamily.PKG_INFO: "BSD",
}

# First word of the distribution label -> package family
FAMILIES = {
    "RedHat": PlatformFamily.RPM,
    "Amazon": PlatformFamily.RPM,
    "SUSE": PlatformFamily.RPM,
    "Mandrake": PlatformFamily.RPM,
    "UnitedLinux": PlatformFamily.RPM,
    "Debian": PlatformFamily.DPKG,
    "Solaris": PlatformFamily.PKGINFO,
    "AIX": PlatformFamily.LSLPP,
    "BSD": PlatformFamily.PKG_INFO,
}

KERNEL_DISTRIBUTIONS = {
    "SunOS": "Solaris",
    "AIX": "AIX",
    "FreeBSD": "BSD",
}


@dataclass(frozen=True)
class PlatformProfile:
    kernel: str
    distribution: str
    family: Optional[PlatformFamily]

    def __str__(self):
        return self.distribution or self.kernel


def _oneline(content: str) -> str:
    return " ".join(content.splitlines())


def _drop_from(pattern: str, content: str) -> str:
    return re.sub(pattern + ".*", "", _oneline(content)).strip()


def linux_distribution(release_files: Mapping[str, str]) -> str:
    """Derive a distribution label from the contents of release files.

    `release_files` maps the paths of existing files to their contents.
    """
    dist = ""
    if REDHAT_RELEASE in release_files:
        dist = "RedHat"
    elif SYSTEM_RELEASE in release_files:
        dist = _drop_from(r"\s*release", release_files[SYSTEM_RELEASE])
    elif SUSE_RELEASE in release_files:
        dist = _drop_from("VERSION", release_files[SUSE_RELEASE])
    elif MANDRAKE_RELEASE in release_files:
        dist = "Mandrake"
    elif DEBIAN_VERSION in release_files:
        dist = "Debian {}".format(
            _oneline(release_files[DEBIAN_VERSION]).strip()
        )
    if UNITEDLINUX_RELEASE in release_files:
        dist += "[{}]".format(
            _drop_from("VERSION", release_files[UNITEDLINUX_RELEASE])
        )
    return dist


def family_for(distribution: str) -> Optional[PlatformFamily]:
    words = distribution.lstrip("[").split()
    if not words:
        return None
    # "[UnitedLinux 1.0]" on its own is still UnitedLinux.
    return FAMILIES.get(words[0].rstrip("]"))


def classify(
    kernel: str, release_files: Mapping[str, str]
) -> PlatformProfile:
    """Pure classification of a host.

    `kernel` is the output of `uname -s`, `release_files` the contents of
    those files of `RELEASE_FILES` and `UNITEDLINUX_RELEASE` which exist.
    """
    if kernel == "Linux":
        distribution = linux_distribution(release_files)
    else:
        distribution = KERNEL_DISTRIBUTIONS.get(kernel, "")
    return PlatformProfile(kernel, distribution, family_for(distribution))


def read_release_files(root: str = "/") -> Dict[str, str]:
    contents = {}
    for path in RELEASE_FILES + (UNITEDLINUX_RELEASE,):
        try:
            with open(
                os.path.join(root, path.lstrip("/")), encoding="utf-8"
            ) as f:
                contents[path] = f.read()
        except FileNotFoundError:
            continue
        except (OSError, UnicodeDecodeError) as e:
            raise PlatformError(f"cannot read {path}: {e}")
        _log.debug("found %s: %r", path, contents[path])
    return contents


def detect() -> PlatformProfile:
    kernel = os.uname().sysname
    release_files = read_release_files() if kernel == "Linux" else {}
    profile = classify(kernel, release_files)
    _log.info(
        "detected kernel %s, distribution '%s', package family %s",
        profile.kernel,
        profile.distribution,
        profile.family.value if profile.family else None,
    )
    return profile
