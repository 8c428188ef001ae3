"""Daily effort normalization into percentage workloads."""
import logging

from worklet_planner.models import DailyWorkload

logger = logging.getLogger(__name__)


def normalize(efforts: list[dict], off_days=()) -> list[DailyWorkload]:
    """Turn raw per-day efforts into percentages summing to 100.

    Days in ``off_days`` are left out entirely. A zero effort still takes its
    (zero) share; if every active day is zero the work is split equally.
    """
    off = set(off_days or ())
    active = [e for e in efforts if e["date"] not in off]
    if not active:
        return []
    raw = [max(0.0, float(e["effort"] or 0)) for e in active]
    total = sum(raw)
    if total <= 0:
        logger.warning("All %d active days have zero effort; splitting equally", len(active))
        share = 100 / len(active)
        return [DailyWorkload(date=e["date"], percentage=share) for e in active]
    return [
        DailyWorkload(date=e["date"], percentage=value / total * 100)
        for e, value in zip(active, raw)
    ]


def distribute_evenly(efforts: list[dict], off_days=()) -> list[dict]:
    """Reset every non-off day's effort to 100."""
    off = set(off_days or ())
    return [
        dict(e) if e["date"] in off else {**e, "effort": 100}
        for e in efforts
    ]


def total_percentage(workload: list[DailyWorkload]) -> float:
    return sum(w.percentage for w in workload)
