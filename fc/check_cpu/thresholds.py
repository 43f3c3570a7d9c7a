from dataclasses import dataclass
from typing import Sequence

from .error import UsageError

#: idle_warning, idle_critical, iowait_warning, iowait_critical
THRESHOLD_COUNT = 4


@dataclass(frozen=True)
class Thresholds:
    """Alert thresholds in percent.

    The idle pair is given as "percent used" and compared against the
    inverted bounds (100 - value). With all four at 0 the check is
    informational only and never alerts.
    """

    idle_warning: int = 0
    idle_critical: int = 0
    iowait_warning: int = 0
    iowait_critical: int = 0

    @property
    def idle_warning_bound(self) -> int:
        return 100 - self.idle_warning

    @property
    def idle_critical_bound(self) -> int:
        return 100 - self.idle_critical

    @property
    def idle_enabled(self) -> bool:
        return bool(self.idle_warning or self.idle_critical)

    @property
    def iowait_enabled(self) -> bool:
        return bool(self.iowait_warning or self.iowait_critical)

    @property
    def alerting(self) -> bool:
        return self.idle_enabled or self.iowait_enabled


def _percent(value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise UsageError(f"threshold '{value}' is not an integer")
    if not 0 <= number <= 100:
        raise UsageError(f"threshold {number} is outside 0..100")
    return number


def parse_thresholds(values: Sequence[str]) -> Thresholds:
    """Validate positional threshold arguments.

    At least the idle pair must be given, the iowait pair defaults to
    (0, 0).
    """
    if len(values) < 2:
        raise UsageError("Please include at least two arguments")
    if len(values) > THRESHOLD_COUNT:
        raise UsageError(
            f"expected at most {THRESHOLD_COUNT} thresholds, got {len(values)}"
        )
    numbers = [_percent(v) for v in values]
    numbers += [0] * (THRESHOLD_COUNT - len(numbers))
    thresholds = Thresholds(*numbers)
    if thresholds.idle_critical < thresholds.idle_warning:
        raise UsageError(
            "Please ensure critical threshold is greater than "
            "warning threshold"
        )
    if thresholds.iowait_critical < thresholds.iowait_warning:
        raise UsageError(
            "Please ensure iowait_critical threshold is greater than "
            "iowait_warning threshold"
        )
    return thresholds
