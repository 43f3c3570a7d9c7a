"""Extract CPU figures from a sar data row.

The position of the columns depends on the platform and on the version of
the statistics package, see `LAYOUTS`.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Dict, Optional

from .detect import PlatformFamily
from .error import PlatformError

_log = logging.getLogger("nagiosplugin")


@dataclass(frozen=True)
class ColumnLayout:
    """Columns of a data row, valid from `min_version` on.

    `columns` maps field names to 0-based positions in the whitespace-split
    row. Its order is the order of the performance data.
    """

    family: PlatformFamily
    min_version: int
    columns: Dict[str, int]


_SYSSTAT = {
    "user": 2,
    "nice": 3,
    "system": 4,
    "iowait": 5,
    "steal": 6,
    "idle": 7,
}
# sysstat up to 5.x has no %steal column
_SYSSTAT_5 = {
    "user": 2,
    "nice": 3,
    "system": 4,
    "iowait": 5,
    "idle": 6,
}

# Newest layout first for each family.
LAYOUTS = [
    ColumnLayout(PlatformFamily.RPM, 6, _SYSSTAT),
    ColumnLayout(PlatformFamily.RPM, 0, _SYSSTAT_5),
    ColumnLayout(PlatformFamily.DPKG, 6, _SYSSTAT),
    ColumnLayout(PlatformFamily.DPKG, 0, _SYSSTAT_5),
    ColumnLayout(
        PlatformFamily.LSLPP,
        5,
        {
            "user": 1,
            "system": 2,
            "iowait": 3,
            "physc": 5,
            "entc": 6,
            "idle": 4,
        },
    ),
    ColumnLayout(
        PlatformFamily.PKGINFO,
        11,
        {"user": 1, "system": 2, "iowait": 3, "idle": 4},
    ),
    ColumnLayout(
        PlatformFamily.PKG_INFO,
        1,
        {"user": 1, "system": 2, "nice": 3, "intrpt": 4, "idle": 5},
    ),
]


def layout_for(family: PlatformFamily, version: int) -> ColumnLayout:
    for layout in LAYOUTS:
        if layout.family is family and version >= layout.min_version:
            return layout
    raise PlatformError(f"{family.platform} {version} Not Supported")


@dataclass(frozen=True)
class RawSample:
    """Output of the statistics collector."""

    family: PlatformFamily
    version: int
    layout: ColumnLayout
    row: str
    # AIX only: LPAR maximum capacity as reported by lparstat
    lpar_capacity: Optional[str] = None


@dataclass(frozen=True)
class SampleRow:
    family: PlatformFamily
    #: raw column text by field name, in performance data order
    values: Dict[str, str]
    #: truncated values used for threshold comparison
    idle: int
    iowait: int
    #: AIX only
    lpar_idle: Optional[int] = None
    lpar_capacity: Optional[str] = None


def number(text: str, name: str) -> float:
    try:
        return float(text)
    except (TypeError, ValueError):
        raise PlatformError(f"cannot parse {name} value '{text}'")


def truncate(text: str, name: str) -> int:
    """Integer part of a column value, truncated toward zero."""
    return int(number(text, name))


def lpar_idle(physc: str, capacity: str) -> int:
    """Idle percentage of an AIX LPAR.

    AIX reports the consumed physical processors instead of the idle share,
    so idle is derived from the LPAR's maximum capacity. The ratio is cut
    to two decimal places first (as `bc` with scale=2 does).
    """
    if number(capacity, "LPAR maximum capacity") <= 0:
        raise PlatformError(f"invalid LPAR maximum capacity '{capacity}'")
    number(physc, "physc")
    ratio = (Decimal(physc) / Decimal(capacity)).quantize(
        Decimal("0.01"), rounding=ROUND_DOWN
    )
    return int(100 - ratio * 100)


def parse_sample(raw: RawSample) -> SampleRow:
    fields = raw.row.split()
    values = {}
    for name, index in raw.layout.columns.items():
        try:
            values[name] = fields[index]
        except IndexError:
            raise PlatformError(
                f"no {name} column (#{index + 1}) in sar output: {raw.row}"
            )
        # all columns must be numeric, even those only reported
        number(values[name], name)
    _log.debug("parsed sample: %s", values)

    iowait = truncate(values["iowait"], "iowait") if "iowait" in values else 0
    if raw.family is PlatformFamily.LSLPP:
        idle = lpar_idle(values["physc"], raw.lpar_capacity)
        return SampleRow(
            raw.family,
            values,
            idle,
            iowait,
            lpar_idle=idle,
            lpar_capacity=raw.lpar_capacity,
        )
    return SampleRow(
        raw.family, values, truncate(values["idle"], "idle"), iowait
    )
