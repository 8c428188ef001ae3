"""Fold a missed day's work into the remaining days, with one-level undo."""
import copy
import logging
import re
from dataclasses import replace
from datetime import date

from worklet_planner.allocator import allocate, uncovered_work
from worklet_planner.errors import (
    AlreadyRedistributed, InvalidRedistributionTarget, NoFutureDays, NothingToUndo,
)
from worklet_planner.models import DailyTask, UndoState, Worklet
from worklet_planner.workload import normalize

logger = logging.getLogger(__name__)

REDISTRIBUTED_TAG = "[Redistributed]"
CATCH_UP_TAG = "[Catch-up]"
_TAG_RE = re.compile(r"^\[(Catch-up|Redistributed)\]\s*")


def strip_tags(title: str) -> str:
    return _TAG_RE.sub("", title)


def is_redistributed(task: DailyTask) -> bool:
    return task.title.startswith(REDISTRIBUTED_TAG)


def can_redistribute(worklet: Worklet, date_key: str, today: date | None = None) -> bool:
    """Whether the host should offer redistribution for this day."""
    today_key = (today or date.today()).isoformat()
    task = worklet.find_task(date_key)
    return (
        worklet.undo_state is None
        and task is not None
        and not task.completed
        and not is_redistributed(task)
        and task.date <= today_key
    )


def redistribute(worklet: Worklet, target_date: str, today: date | None = None) -> Worklet:
    """Move the unfinished share of ``target_date`` onto the remaining days.

    Days after the target that are today or later and not yet done are
    replanned from the subtasks' real progress, weighted by their original
    percentages. Unfinished days outside that set keep their tasks, and the
    exact ranges their segments hold are left out of the replan, wherever
    they sit in the backlog. The target stays in the
    plan tagged as redistributed with no work.
    """
    if worklet.undo_state is not None:
        raise AlreadyRedistributed(f"{worklet.name!r} was already redistributed; undo first")

    today_key = (today or date.today()).isoformat()
    target = worklet.find_task(target_date)
    if target is None:
        raise InvalidRedistributionTarget(f"No task on {target_date}")
    if target.completed:
        raise InvalidRedistributionTarget(f"Task on {target_date} is already completed")
    if is_redistributed(target):
        raise InvalidRedistributionTarget(f"Task on {target_date} was already redistributed")
    if target_date > today_key:
        raise InvalidRedistributionTarget(f"Task on {target_date} is not due yet")

    replan_dates = {
        t.date for t in worklet.daily_tasks
        if t.date > target_date and t.date >= today_key
        and not t.completed and not is_redistributed(t)
    }
    if not replan_dates:
        raise NoFutureDays("No future work days left; extend the deadline to redistribute")

    snapshot = UndoState(
        original_daily_tasks=copy.deepcopy(worklet.daily_tasks),
        original_daily_workload=copy.deepcopy(worklet.daily_workload),
    )

    kept = [
        t for t in worklet.daily_tasks
        if t.date not in replan_dates and t.date != target_date
        and not t.completed and not is_redistributed(t)
    ]
    covered = [seg for t in kept for seg in t.work_segments]
    work = uncovered_work(worklet.subtasks, covered)

    percentages = {w.date: w.percentage for w in worklet.daily_workload}
    future_workload = normalize(
        [{"date": d, "effort": percentages.get(d, 0.0)} for d in sorted(replan_dates)]
    )
    replanned = {
        t.date: replace(t, title=f"{CATCH_UP_TAG} {strip_tags(t.title)}")
        for t in allocate(
            future_workload,
            worklet.subtasks,
            worklet.weight_unit,
            covered=covered,
        )
    }

    tasks = []
    for task in worklet.daily_tasks:
        if task.date == target_date:
            tasks.append(replace(
                task,
                title=f"{REDISTRIBUTED_TAG} {strip_tags(task.title)}",
                weight_for_day=0.0,
                work_segments=[],
            ))
        elif task.date in replanned:
            tasks.append(replanned[task.date])
        else:
            tasks.append(copy.deepcopy(task))

    workload = normalize(
        [{"date": t.date, "effort": t.weight_for_day} for t in tasks],
        off_days={target_date},
    )
    logger.info(
        "Redistributed %s of %r over %d days (%.3f %s)",
        target_date, worklet.name, len(replanned), work, worklet.weight_unit,
    )
    return replace(worklet, daily_tasks=tasks, daily_workload=workload, undo_state=snapshot)


def undo_redistribute(worklet: Worklet) -> Worklet:
    """Restore the plan saved by the last redistribution."""
    if worklet.undo_state is None:
        raise NothingToUndo(f"{worklet.name!r} has no redistribution to undo")
    logger.info("Undoing redistribution of %r", worklet.name)
    return replace(
        worklet,
        daily_tasks=copy.deepcopy(worklet.undo_state.original_daily_tasks),
        daily_workload=copy.deepcopy(worklet.undo_state.original_daily_workload),
        undo_state=None,
    )
