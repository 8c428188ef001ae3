"""Apply day and page completion back onto subtask progress."""
import logging
from dataclasses import replace

from worklet_planner.allocator import EPSILON
from worklet_planner.errors import TaskNotFound, TaskNotToggleable
from worklet_planner.models import Subtask, Worklet
from worklet_planner.redistribute import is_redistributed

logger = logging.getLogger(__name__)


def apply_progress(subtask: Subtask, delta: float) -> Subtask:
    """Return ``subtask`` with progress moved by ``delta``, clamped to [0, weight]."""
    progress = min(subtask.weight, max(0.0, subtask.progress + delta))
    return replace(subtask, progress=progress, completed=progress >= subtask.weight - EPSILON)


def reconcile_day_completion(worklet: Worklet, date_key: str, completed: bool) -> Worklet:
    """Mark a day done or not done and move subtask progress accordingly.

    Completing a day adds each segment's size to its subtask; un-completing
    subtracts it again. Setting a day to its current state changes nothing.
    """
    task = worklet.find_task(date_key)
    if task is None:
        raise TaskNotFound(f"No task on {date_key} for {worklet.name!r}")
    if is_redistributed(task):
        raise TaskNotToggleable(f"Task on {date_key} was redistributed")
    if task.completed == completed:
        return replace(worklet)

    sign = 1 if completed else -1
    deltas = {}
    for seg in task.work_segments:
        deltas[seg.subtask_id] = deltas.get(seg.subtask_id, 0.0) + sign * seg.size

    subtasks = [
        apply_progress(s, deltas[s.id]) if s.id in deltas else s
        for s in worklet.subtasks
    ]
    tasks = [
        replace(t, completed=completed) if t.date == date_key else t
        for t in worklet.daily_tasks
    ]
    logger.debug("Set %s of %r completed=%s", date_key, worklet.name, completed)
    return replace(worklet, subtasks=subtasks, daily_tasks=tasks)


def reconcile_page_completion(
    worklet: Worklet, material_id: str, page: int, completed: bool
) -> Worklet:
    """Toggle a single page of a material and credit the owning subtask."""
    if page < 1:
        raise ValueError(f"Page numbers start at 1, got {page}")
    pages = set(worklet.completed_pages.get(material_id, []))
    if (page in pages) == completed:
        return replace(worklet)
    if completed:
        pages.add(page)
    else:
        pages.discard(page)

    completed_pages = dict(worklet.completed_pages)
    completed_pages[material_id] = sorted(pages)

    # Pages fill the material's subtasks in order and are taken back from the end.
    linked = [i for i, s in enumerate(worklet.subtasks) if s.material_id == material_id]
    if completed:
        pending = [i for i in linked if not worklet.subtasks[i].completed]
        index = pending[0] if pending else None
    else:
        started = [i for i in linked if worklet.subtasks[i].progress > 0]
        index = started[-1] if started else None

    subtasks = list(worklet.subtasks)
    if index is None:
        logger.debug("Material %s has no subtask to credit on %r; page only recorded", material_id, worklet.name)
    else:
        subtasks[index] = apply_progress(subtasks[index], 1 if completed else -1)
    return replace(worklet, subtasks=subtasks, completed_pages=completed_pages)
