"""Threshold evaluation and the status line."""

import logging
from dataclasses import dataclass

import nagiosplugin
from nagiosplugin.state import ServiceState, worst

from .detect import PlatformFamily
from .sample import SampleRow
from .thresholds import Thresholds

_log = logging.getLogger("nagiosplugin")

PERFDATA_LABELS = {
    "user": "CpuUser",
    "nice": "CpuNice",
    "system": "CpuSystem",
    "iowait": "CpuIowait",
    "steal": "CpuSteal",
    "intrpt": "CpuIntrpt",
    "physc": "CpuPhysc",
    "entc": "CpuEntc",
    "idle": "CpuIdle",
}


class CpuSample(nagiosplugin.Resource):
    """Serves the truncated idle and iowait figures of a sample."""

    def __init__(self, sample: SampleRow):
        self.sample = sample

    def probe(self):
        yield nagiosplugin.Metric(
            "idle", self.sample.idle, "%", min=0, max=100, context="idle"
        )
        yield nagiosplugin.Metric(
            "iowait", self.sample.iowait, "%", min=0, max=100, context="iowait"
        )


def contexts(thresholds: Thresholds):
    """Contexts for the idle and iowait metrics.

    Idle alerts when it drops below the inverted bounds, iowait when it
    exceeds its limits. A (0, 0) pair is compared as well: idle then has
    to stay at 100, iowait at 0.
    """
    yield nagiosplugin.ScalarContext(
        "idle",
        "{}:".format(thresholds.idle_warning_bound),
        "{}:".format(thresholds.idle_critical_bound),
    )
    yield nagiosplugin.ScalarContext(
        "iowait",
        str(thresholds.iowait_warning),
        str(thresholds.iowait_critical),
    )


def evaluate(sample: SampleRow, thresholds: Thresholds) -> ServiceState:
    if not thresholds.alerting:
        _log.info("all thresholds are 0, not alerting")
        return nagiosplugin.Ok
    resource = CpuSample(sample)
    by_name = {context.name: context for context in contexts(thresholds)}
    states = []
    for metric in resource.probe():
        result = by_name[metric.context].evaluate(metric, resource)
        _log.debug("%s=%s: %s", metric.name, metric.value, result.state)
        states.append(result.state)
    return worst(states)


def headline(sample: SampleRow) -> str:
    if sample.family is PlatformFamily.LSLPP:
        return "CPU Idle = {}% IOWAIT = {}%".format(
            sample.lpar_idle, sample.iowait
        )
    # like awk's default number output
    used = "{:g}".format(100 - float(sample.values["idle"]))
    if "iowait" not in sample.values:
        return "CPU Used = {}%".format(used)
    return "CPU Used = {}% IOWAIT = {}%".format(used, sample.values["iowait"])


def perfdata(sample: SampleRow, thresholds: Thresholds) -> str:
    items = []
    for name, value in sample.values.items():
        label = PERFDATA_LABELS[name]
        if name == "iowait":
            items.append(
                "{}={};{};{}".format(
                    label,
                    value,
                    thresholds.iowait_warning,
                    thresholds.iowait_critical,
                )
            )
        elif name == "idle":
            items.append(
                "{}={};{};{}".format(
                    label,
                    value,
                    thresholds.idle_warning_bound,
                    thresholds.idle_critical_bound,
                )
            )
        else:
            items.append("{}={};".format(label, value))
    if sample.lpar_idle is not None:
        items.append("LparCpuIdle={};".format(sample.lpar_idle))
        items.append("LparCpuTotal={};".format(sample.lpar_capacity))
    return " ".join(items)


@dataclass(frozen=True)
class Verdict:
    state: ServiceState
    message: str

    @property
    def exit_code(self) -> int:
        return self.state.code

    def __str__(self):
        return "{}: {}".format(str(self.state).upper(), self.message)


def judge(sample: SampleRow, thresholds: Thresholds) -> Verdict:
    return Verdict(
        evaluate(sample, thresholds),
        "{} | {}".format(headline(sample), perfdata(sample, thresholds)),
    )


def unknown(message: str) -> Verdict:
    return Verdict(nagiosplugin.Unknown, message)
