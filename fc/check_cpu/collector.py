"""Run the platform's sar command and query the statistics package version."""

import logging
import os
import re
import subprocess
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .detect import PlatformFamily, PlatformProfile
from .error import PlatformError
from .sample import RawSample, layout_for

_log = logging.getLogger("nagiosplugin")

DEFAULT_TIMEOUT = 30
DEFAULT_PATH = "/usr/local/bin:/usr/bin:/bin:/usr/sbin:/sbin"
LPARSTAT = ("/usr/bin/lparstat", "-i")


def command_env():
    # The C locale gives 24h timestamps (one column) and "." as decimal
    # separator, so column positions stay fixed.
    return {
        "LANG": "C",
        "LC_ALL": "C",
        "PATH": os.environ.get("PATH", DEFAULT_PATH),
    }


def run(cmdline: Sequence[str], timeout: int = DEFAULT_TIMEOUT) -> str:
    _log.info('running "%s"', " ".join(cmdline))
    try:
        stdout = subprocess.check_output(
            list(cmdline),
            stderr=subprocess.PIPE,
            env=command_env(),
            timeout=timeout,
        ).decode("utf-8", errors="replace")
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        raise PlatformError(
            "{} failed with exit status {}{}".format(
                " ".join(cmdline),
                e.returncode,
                ": " + stderr if stderr else "",
            )
        )
    except subprocess.TimeoutExpired:
        raise PlatformError(
            "{} timed out after {}s".format(" ".join(cmdline), timeout)
        )
    except OSError as e:
        raise PlatformError("cannot run {}: {}".format(cmdline[0], e.strerror))
    _log.debug("%s", stdout)
    return stdout


def major(version: str, package: str) -> int:
    m = re.match(r"\s*(\d+)", version)
    if not m:
        raise PlatformError(
            f"cannot determine {package} version from '{version.strip()}'"
        )
    return int(m.group(1))


# Row selection. All of them get the output lines of the statistics command
# and return the data row to evaluate or None.


def last_all_row(lines: List[str]) -> Optional[str]:
    """sysstat: the most recent row of the "all CPUs" summary."""
    rows = [
        line
        for line in lines
        if "all" in line.split() and not line.startswith("Average")
    ]
    return rows[-1] if rows else None


def lpar_row(lines: List[str]) -> Optional[str]:
    """AIX: system-wide rows are marked with "-" in the cpu column.

    The last of them belongs to the average block and is skipped.
    """
    rows = [line for line in lines if "-" in line and "U" not in line]
    return rows[-2:][0] if rows else None


def last_data_row(lines: List[str]) -> Optional[str]:
    rows = [
        line
        for line in lines
        if line.strip() and not line.startswith("Average")
    ]
    return rows[-1] if rows else None


# Version extraction from the package query output.


def rpm_version(output: str) -> str:
    # sysstat-11.7.3-9.el8.x86_64
    first = output.strip().splitlines()[0] if output.strip() else ""
    parts = first.split("-")
    return parts[1] if len(parts) > 1 else ""


def dpkg_version(output: str) -> str:
    # ii  sysstat  12.5.2-2  amd64  system performance tools for Linux
    for line in output.splitlines():
        fields = line.split()
        if len(fields) >= 3 and fields[1].split(":")[0] == "sysstat":
            # strip the epoch
            return fields[2].split(":")[-1]
    return ""


def lslpp_version(output: str) -> str:
    #   bos.acct                   6.1.9.45  COMMITTED  Accounting Services
    lines = [line for line in output.splitlines() if line.strip()]
    fields = lines[-1].split() if lines else []
    return fields[1] if len(fields) > 1 else ""


def pkginfo_version(output: str) -> str:
    #    VERSION:  11.10.0,REV=2005.01.21.15.53
    for line in output.splitlines():
        fields = line.split()
        if len(fields) > 1 and fields[0] == "VERSION:":
            return fields[1]
    return ""


def pkg_info_version(output: str) -> str:
    # bsdsar-1.15         System activity reporter
    for line in output.splitlines():
        if line.startswith("bsdsar"):
            parts = line.split()[0].split("-")
            return parts[1] if len(parts) > 1 else ""
    return ""


@dataclass(frozen=True)
class Collector:
    package: str
    stats_command: Tuple[str, ...]
    select_row: Callable[[List[str]], Optional[str]]
    version_command: Tuple[str, ...]
    parse_version: Callable[[str], str]


COLLECTORS = {
    PlatformFamily.RPM: Collector(
        "sysstat",
        ("/usr/bin/sar", "-P", "ALL"),
        last_all_row,
        ("rpm", "-q", "sysstat"),
        rpm_version,
    ),
    PlatformFamily.DPKG: Collector(
        "sysstat",
        ("/usr/bin/sar", "-P", "ALL"),
        last_all_row,
        ("dpkg", "-l", "sysstat"),
        dpkg_version,
    ),
    PlatformFamily.LSLPP: Collector(
        "bos.acct",
        ("/usr/sbin/sar", "-P", "ALL"),
        lpar_row,
        ("lslpp", "-l", "bos.acct"),
        lslpp_version,
    ),
    PlatformFamily.PKGINFO: Collector(
        "SUNWaccu",
        ("/usr/bin/sar", "-u"),
        last_data_row,
        ("pkginfo", "-l", "SUNWaccu"),
        pkginfo_version,
    ),
    PlatformFamily.PKG_INFO: Collector(
        "bsdsar",
        ("/usr/local/bin/bsdsar", "-u"),
        last_data_row,
        ("pkg_info",),
        pkg_info_version,
    ),
}


def collector_for(
    profile: PlatformProfile, sar: Optional[str] = None
) -> Collector:
    if profile.family is None:
        raise PlatformError(
            "unsupported platform: kernel {}, distribution '{}'".format(
                profile.kernel, profile.distribution
            )
        )
    collector = COLLECTORS[profile.family]
    if sar:
        collector = replace(
            collector, stats_command=(sar,) + collector.stats_command[1:]
        )
    return collector


def lpar_capacity(timeout: int = DEFAULT_TIMEOUT) -> str:
    for line in run(LPARSTAT, timeout).splitlines():
        if "Maximum Capacity" in line:
            fields = line.split()
            if len(fields) > 3:
                return fields[3]
    raise PlatformError("no Maximum Capacity in lparstat output")


def collect(
    profile: PlatformProfile,
    timeout: int = DEFAULT_TIMEOUT,
    sar: Optional[str] = None,
) -> RawSample:
    """Query the package version and fetch the current data row.

    Unsupported package versions are rejected before sar is run.
    """
    collector = collector_for(profile, sar)
    version = major(
        collector.parse_version(run(collector.version_command, timeout)),
        collector.package,
    )
    _log.info("%s major version %d", collector.package, version)
    layout = layout_for(profile.family, version)

    row = collector.select_row(
        run(collector.stats_command, timeout).splitlines()
    )
    if row is None:
        raise PlatformError(
            "no CPU data in output of " + " ".join(collector.stats_command)
        )
    _log.info("data row: %s", row.strip())

    capacity = None
    if profile.family is PlatformFamily.LSLPP:
        capacity = lpar_capacity(timeout)
        _log.info("LPAR maximum capacity: %s", capacity)
    return RawSample(profile.family, version, layout, row, capacity)
