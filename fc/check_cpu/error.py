"""Exceptions raised by the CPU check.

All of them end the check with UNKNOWN (exit code 3).
"""

import nagiosplugin


class CheckCpuError(nagiosplugin.CheckError):
    pass


class UsageError(CheckCpuError):
    """Invalid command line arguments."""


class PlatformError(CheckCpuError):
    """The host cannot be checked.

    Raised for unsupported platforms or tool versions, failing external
    commands and output that cannot be parsed.
    """
