import logging
import subprocess
from textwrap import dedent
from types import SimpleNamespace

import pytest

# real-world command output, captured with LC_ALL=C

SAR_SYSSTAT = dedent(
    """\
    Linux 3.10.0-1160.el7.x86_64 (web01) \t10/18/2026 \t_x86_64_\t(2 CPU)

    00:00:01        CPU     %user     %nice   %system   %iowait    %steal     %idle
    00:10:01        all      5.20      0.00      1.10      0.40      0.00     93.30
    00:10:01          0      5.00      0.00      1.00      0.30      0.00     93.70
    00:10:01          1      5.40      0.00      1.20      0.50      0.00     92.90

    00:12:44     LINUX RESTART\t(2 CPU)

    00:20:01        CPU     %user     %nice   %system   %iowait    %steal     %idle
    00:30:01        all     12.99      0.00      2.90      0.01      0.00     84.10
    00:30:01          0     13.10      0.00      3.00      0.02      0.00     83.88
    00:30:01          1     12.88      0.00      2.80      0.00      0.00     84.32
    Average:        all      9.10      0.00      2.00      0.20      0.00     88.70
    Average:          0      9.05      0.00      2.00      0.16      0.00     88.79
    Average:          1      9.14      0.00      2.00      0.25      0.00     88.61
    """
)

SAR_SYSSTAT_5 = dedent(
    """\
    Linux 2.6.9-89.ELsmp (web02)\t10/18/2026

    00:00:01          CPU     %user     %nice   %system   %iowait     %idle
    00:10:01          all     12.99      0.00      2.90      0.01     84.10
    00:10:01            0     13.10      0.00      3.00      0.02     83.88
    Average:          all     12.99      0.00      2.90      0.01     84.10
    Average:            0     13.10      0.00      3.00      0.02     83.88
    """
)

RPM_SYSSTAT = "sysstat-10.1.5-19.el7.x86_64\n"
RPM_SYSSTAT_5 = "sysstat-5.0.5-25.el4\n"

DPKG_SYSSTAT = dedent(
    """\
    Desired=Unknown/Install/Remove/Purge/Hold
    | Status=Not/Inst/Conf-files/Unpacked/halF-conf/Half-inst/trig-aWait/Trig-pend
    |/ Err?=(none)/Reinst-required (Status,Err: uppercase=bad)
    ||/ Name           Version      Architecture Description
    +++-==============-============-============-=================================
    ii  sysstat        12.5.2-2     amd64        system performance tools for Linux
    """
)

SAR_AIX = dedent(
    """\

    AIX aixhost 1 6 00C5CC4E4C00    10/18/26

    System configuration: lcpu=4 ent=0.20 mode=Uncapped

    10:00:01 cpu    %usr    %sys    %wio   %idle   physc   %entc
    10:00:02  0       12      20       0      68    0.02     9.6
              1        0       3       0      97    0.01     3.2
              -        5      10       1      84    0.05    25.0

    Average   0       12      20       0      68    0.02     9.6
              1        0       3       0      97    0.01     3.2
              -        4       9       1      86    0.04    20.0
    """
)

LSLPP_BOS_ACCT = dedent(
    """\
      Fileset                      Level  State      Description
      ----------------------------------------------------------------------------
    Path: /usr/lib/objrepos
      bos.acct                   6.1.9.45  COMMITTED  Accounting Services

    Path: /etc/objrepos
      bos.acct                   6.1.9.45  COMMITTED  Accounting Services
    """
)

LPARSTAT = dedent(
    """\
    Node Name                                  : aixhost
    Partition Name                             : aixhost
    Type                                       : Shared-SMT-4
    Mode                                       : Uncapped
    Entitled Capacity                          : 0.20
    Online Virtual CPUs                        : 1
    Maximum Virtual CPUs                       : 4
    Minimum Capacity                           : 0.10
    Maximum Capacity                           : 1.00
    Maximum Capacity of Pool                   : 800
    """
)

SAR_SOLARIS = dedent(
    """\

    SunOS solhost 5.10 Generic_147440-01 sun4v    10/18/2026

    00:00:00    %usr    %sys    %wio   %idle
    00:15:00       3       2       0      95
    00:30:00       5       3       1      91

    Average        4       2       0      93
    """
)

PKGINFO_SUNWACCU = dedent(
    """\
       PKGINST:  SUNWaccu
          NAME:  System Accounting, (Usr)
      CATEGORY:  system
          ARCH:  sparc
       VERSION:  11.10.0,REV=2005.01.21.15.53
       BASEDIR:  /
        VENDOR:  Sun Microsystems, Inc.
    """
)

BSDSAR = dedent(
    """\
    FreeBSD bsdhost 7.2-RELEASE i386    10/18/26

    00:00:00   %usr  %sys  %nice  %intr  %idle
    00:20:00      7     3      0      1     89
    00:40:00      6     2      0      1     91
    """
)

PKG_INFO = dedent(
    """\
    bash-4.4.23         GNU Project's Bourne Again SHell
    bsdsar-1.15         System activity reporter
    perl5-5.26.2        Practical Extraction and Report Language
    """
)


@pytest.fixture
def commands(monkeypatch):
    """Replaces subprocess.check_output.

    Set `commands.outputs[binary]` to the output (or an exception) a command
    should produce. Unknown commands fail like missing binaries. All command
    lines run are recorded in `commands.calls`.
    """
    fake = SimpleNamespace(outputs={}, calls=[])

    def check_output(cmdline, **kw):
        fake.calls.append(tuple(cmdline))
        try:
            result = fake.outputs[cmdline[0]]
        except KeyError:
            raise FileNotFoundError(2, "No such file or directory")
        if isinstance(result, Exception):
            raise result
        return result.encode()

    monkeypatch.setattr(subprocess, "check_output", check_output)
    return fake


@pytest.fixture
def rpm_host(commands):
    commands.outputs["rpm"] = RPM_SYSSTAT
    commands.outputs["/usr/bin/sar"] = SAR_SYSSTAT
    return commands


@pytest.fixture
def aix_host(commands):
    commands.outputs["lslpp"] = LSLPP_BOS_ACCT
    commands.outputs["/usr/sbin/sar"] = SAR_AIX
    commands.outputs["/usr/bin/lparstat"] = LPARSTAT
    return commands


@pytest.fixture(autouse=True)
def nagiosplugin_log_handlers():
    """main() adds a stderr handler per call, drop it after each test."""
    log = logging.getLogger("nagiosplugin")
    handlers = list(log.handlers)
    level = log.level
    yield
    log.handlers[:] = handlers
    log.setLevel(level)
