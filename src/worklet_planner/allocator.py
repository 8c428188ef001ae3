"""Map a percentage workload onto a backlog of weighted subtasks.

Days are walked in date order and subtasks in their list order. A single
``Cursor`` into the backlog is carried from one day to the next, so each
day picks up exactly where the previous one stopped.
"""
import logging
from dataclasses import dataclass

from worklet_planner.models import DailyTask, DailyWorkload, Subtask, WorkSegment

logger = logging.getLogger(__name__)

EPSILON = 1e-9
REST_DAY_TITLE = "Rest day."
NOTHING_TO_PLAN_TITLE = "All tasks are complete or no work to plan."


@dataclass(frozen=True)
class Cursor:
    subtask_index: int = 0
    consumed: float = 0.0  # absolute position inside the current subtask


def plannable_subtasks(subtasks: list[Subtask]) -> list[Subtask]:
    """Subtasks that still have work left, in their original order."""
    return [s for s in subtasks if not s.completed and s.remaining > EPSILON]


def remaining_work(subtasks: list[Subtask]) -> float:
    return sum(s.remaining for s in plannable_subtasks(subtasks))


def covered_ranges(segments: list[WorkSegment]) -> dict[str, list[tuple[float, float]]]:
    """Group segments by subtask as (start, end) ranges sorted by start."""
    ranges = {}
    for seg in segments:
        if seg.size > EPSILON:
            ranges.setdefault(seg.subtask_id, []).append((seg.start, seg.end))
    return {subtask_id: sorted(r) for subtask_id, r in ranges.items()}


def _free_stretch(subtask: Subtask, position: float, ranges) -> tuple[float, float]:
    """First uncovered position at or after ``position`` and where that stretch stops."""
    stop = subtask.weight
    for start, end in ranges:
        if end <= position + EPSILON:
            continue
        if start <= position + EPSILON:
            position = max(position, end)
            continue
        stop = min(stop, start)
        break
    return position, stop


def uncovered_work(subtasks: list[Subtask], covered: list[WorkSegment] = ()) -> float:
    """Remaining work that no segment in ``covered`` already accounts for."""
    ranges = covered_ranges(covered)
    total = 0.0
    for s in plannable_subtasks(subtasks):
        position = s.progress
        while position < s.weight - EPSILON:
            position, stop = _free_stretch(s, position, ranges.get(s.id, ()))
            total += max(0.0, stop - position)
            position = max(position, stop)
    return total


def start_cursor(backlog: list[Subtask]) -> Cursor:
    if not backlog:
        return Cursor()
    return Cursor(0, backlog[0].progress)


def _next_subtask(backlog: list[Subtask], index: int) -> Cursor:
    index += 1
    consumed = backlog[index].progress if index < len(backlog) else 0.0
    return Cursor(index, consumed)


def advance(backlog: list[Subtask], cursor: Cursor, amount: float, covered=None) -> Cursor:
    """Move the cursor forward by ``amount`` free units without emitting segments."""
    covered = covered or {}
    while amount > EPSILON and cursor.subtask_index < len(backlog):
        subtask = backlog[cursor.subtask_index]
        position, stop = _free_stretch(subtask, cursor.consumed, covered.get(subtask.id, ()))
        left = max(0.0, stop - position)
        if amount < left - EPSILON:
            return Cursor(cursor.subtask_index, position + amount)
        amount -= left
        if stop >= subtask.weight:
            cursor = _next_subtask(backlog, cursor.subtask_index)
        else:
            cursor = Cursor(cursor.subtask_index, stop)
    return cursor


def allocate_day(
    budget: float, backlog: list[Subtask], cursor: Cursor, covered=None
) -> tuple[list[WorkSegment], Cursor]:
    """Consume up to ``budget`` units from the backlog starting at ``cursor``.

    Ranges in ``covered`` (subtask id to sorted ``(start, end)`` pairs) belong
    to other days and are stepped over. Returns the day's segments and the
    cursor for the following day.
    """
    covered = covered or {}
    segments = []
    while budget > EPSILON and cursor.subtask_index < len(backlog):
        subtask = backlog[cursor.subtask_index]
        position, stop = _free_stretch(subtask, cursor.consumed, covered.get(subtask.id, ()))
        left = stop - position
        if left <= EPSILON:
            if stop >= subtask.weight:
                cursor = _next_subtask(backlog, cursor.subtask_index)
            else:
                cursor = Cursor(cursor.subtask_index, stop)
            continue
        if budget >= left - EPSILON:
            # Run to the end of the free stretch; snap so boundaries are exact.
            take, end = left, stop
        else:
            take, end = budget, position + budget
        segments.append(WorkSegment(
            subtask_id=subtask.id,
            material_id=subtask.material_id,
            start=position,
            end=end,
        ))
        budget -= take
        if end >= subtask.weight:
            cursor = _next_subtask(backlog, cursor.subtask_index)
        else:
            cursor = Cursor(cursor.subtask_index, end)
    return segments, cursor


def describe_day(segments: list[WorkSegment], subtasks: list[Subtask], unit: str) -> str:
    """Human-readable title, e.g. "Do 17 pages, reaching 17/100 pages in 'Ch. 3'"."""
    if not segments:
        return REST_DAY_TITLE
    by_id = {s.id: s for s in subtasks}
    reached = {}
    for seg in segments:
        subtask = by_id[seg.subtask_id]
        reached[subtask.id] = (subtask.name, min(seg.end, subtask.weight), subtask.weight)
    total = sum(seg.size for seg in segments)
    parts = [
        f"reaching {round(end)}/{weight:g} {unit} in '{name}'"
        for name, end, weight in reached.values()
    ]
    return f"Do {round(total)} {unit}, " + " and ".join(parts)


def allocate(
    daily_workload: list[DailyWorkload],
    subtasks: list[Subtask],
    weight_unit: str = "units",
    *,
    total_work: float | None = None,
    start_offset: float = 0.0,
    covered: list[WorkSegment] = (),
) -> list[DailyTask]:
    """Produce one DailyTask per workload day.

    Each day receives ``percentage / 100 * total_work`` units; the last day
    takes whatever is left so the day weights add up to the total. By default
    the total is the remaining subtask work. ``start_offset`` skips work that
    is already promised to days outside this plan; ``covered`` names the exact
    ranges other days hold, which are never handed out again.
    """
    days = sorted(daily_workload, key=lambda w: w.date)
    backlog = plannable_subtasks(subtasks)
    ranges = covered_ranges(covered)
    if total_work is None:
        work = uncovered_work(subtasks, covered) - start_offset
    else:
        work = total_work

    if not backlog or work <= EPSILON:
        return [DailyTask(date=day.date, title=NOTHING_TO_PLAN_TITLE) for day in days]

    cursor = advance(backlog, start_cursor(backlog), start_offset, ranges)
    tasks = []
    allocated = 0.0
    for i, day in enumerate(days):
        if i == len(days) - 1:
            budget = work - allocated
        else:
            budget = day.percentage / 100 * work
        segments, cursor = allocate_day(budget, backlog, cursor, ranges)
        weight = sum(seg.size for seg in segments)
        allocated += weight
        tasks.append(DailyTask(
            date=day.date,
            title=describe_day(segments, backlog, weight_unit),
            weight_for_day=weight,
            work_segments=segments,
        ))
    logger.debug("Allocated %.3f %s over %d days", allocated, weight_unit, len(tasks))
    return tasks
