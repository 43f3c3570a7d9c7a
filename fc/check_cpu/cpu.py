#!/usr/bin/env python3
"""CPU used / iowait check.

Samples the host's CPU statistics with sar (bsdsar on FreeBSD), and alerts
on the share of CPU used (100 - %idle) and on %iowait. Linux (rpm and dpkg
based distributions), Solaris, AIX and FreeBSD are supported.

With all thresholds 0 the check always returns OK. Otherwise both pairs
are compared, so an iowait pair of 0 0 alerts on any iowait.
"""

import argparse
import logging
import sys

import nagiosplugin

from . import collector, detect
from .check import judge, unknown
from .error import PlatformError, UsageError
from .sample import parse_sample
from .thresholds import parse_thresholds

_log = logging.getLogger("nagiosplugin")

USAGE = (
    "%(prog)s [-v] [-t TIMEOUT] [--sar PATH] "
    "warning critical [iowait_warning iowait_critical]"
)
EPILOG = """\
Example: %(prog)s 80 90 5 15

warning/critical are percent CPU used (100 - %%idle), iowait_warning/
iowait_critical are percent iowait.
"""


def seconds(value):
    """Whole seconds, at least 1."""
    try:
        number = int(value)
    except ValueError:
        number = 0
    if number < 1:
        raise argparse.ArgumentTypeError(
            "invalid timeout '{}', must be at least 1 second".format(value)
        )
    return number


class ArgumentParser(argparse.ArgumentParser):
    """Reports usage errors as UNKNOWN instead of exiting with 2."""

    def error(self, message):
        raise UsageError(message)


def parser():
    p = ArgumentParser(
        description=__doc__,
        usage=USAGE,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "thresholds",
        nargs="*",
        metavar="THRESHOLD",
        help="warning critical [iowait_warning iowait_critical]",
    )
    p.add_argument(
        "-t",
        "--timeout",
        metavar="N",
        type=seconds,
        default=collector.DEFAULT_TIMEOUT,
        help="abort external commands after N seconds "
        "(default: %(default)s)",
    )
    p.add_argument(
        "--sar",
        metavar="PATH",
        help="sar binary (default: platform specific)",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="increase verbosity (use up to 2 times)",
    )
    return p


def setup_logging(verbose):
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    handler.setLevel(level)
    _log.addHandler(handler)
    _log.setLevel(min(level, _log.getEffectiveLevel()))


def run(thresholds, timeout=collector.DEFAULT_TIMEOUT, sar=None):
    """Single check pass. Returns the verdict."""
    try:
        profile = detect.detect()
        raw = collector.collect(profile, timeout, sar)
        sample = parse_sample(raw)
    except PlatformError as e:
        _log.info("giving up: %s", e)
        return unknown(str(e))
    return judge(sample, thresholds)


@nagiosplugin.guarded
def main(argv=None):
    p = parser()
    try:
        args = p.parse_args(argv)
        thresholds = parse_thresholds(args.thresholds)
    except UsageError as e:
        print("UNKNOWN: {}".format(e))
        print(p.format_usage().strip())
        print(EPILOG.splitlines()[0] % {"prog": p.prog})
        sys.exit(3)
    setup_logging(args.verbose)
    verdict = run(thresholds, args.timeout, args.sar)
    print(verdict)
    sys.exit(verdict.exit_code)


if __name__ == "__main__":
    main()
