"""Rank process samples and derive the system-wide total."""

from typing import Iterable

from cpulogger.models import ProcessSample, SystemSample


def aggregate(samples: Iterable[ProcessSample]) -> SystemSample:
    """Sort samples by usage (descending, stable) and sum them up.

    The total is not capped at 100%: per-process values are already
    normalized by core count and several cores contribute independently.
    """
    ordered = tuple(sorted(samples, key=lambda s: s.usage, reverse=True))
    total = sum(s.usage for s in ordered)
    return SystemSample(processes=ordered, total_usage=total)
