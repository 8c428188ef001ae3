"""Progress figures and daily work lists for the dashboard."""
from datetime import date, datetime

from worklet_planner.models import DailyTask, Worklet
from worklet_planner.redistribute import is_redistributed


def get_progress_label(score: float) -> str:
    if score >= 100:
        return "DONE"
    elif score >= 65:
        return "ON TRACK"
    elif score >= 35:
        return "IN PROGRESS"
    return "JUST STARTED"


def get_progress_color(score: float) -> str:
    if score >= 100:
        return "green"
    elif score >= 65:
        return "cyan"
    elif score >= 35:
        return "yellow"
    return "red"


def calc_completion(worklet: Worklet) -> float:
    """Share of total subtask weight already done, in percent."""
    total = sum(s.weight for s in worklet.subtasks)
    if total <= 0:
        return 0.0
    done = sum(min(s.progress, s.weight) for s in worklet.subtasks)
    return round(done / total * 100, 1)


def get_missed_days(worklet: Worklet, today: date | None = None) -> list[DailyTask]:
    """Unfinished days before today that still carry work."""
    today_key = (today or date.today()).isoformat()
    return [
        t for t in worklet.daily_tasks
        if t.date < today_key and not t.completed
        and not is_redistributed(t) and t.weight_for_day > 0
    ]


def get_work_for_date(worklets: list[Worklet], date_key: str) -> list[dict]:
    """Every worklet's task for one day, earliest deadline first."""
    items = []
    for w in worklets:
        task = w.find_task(date_key)
        if task:
            items.append({
                "worklet": w,
                "description": task.title,
                "is_complete": task.completed,
                "date_key": task.date,
                "daily_task": task,
            })
    return sorted(items, key=lambda i: datetime.fromisoformat(i["worklet"].deadline))


def get_redistributed_worklets(worklets: list[Worklet]) -> list[Worklet]:
    return [w for w in worklets if w.undo_state is not None]


def get_planner_stats(worklets: list[Worklet], today: date | None = None) -> dict:
    tasks = [t for w in worklets for t in w.daily_tasks]
    return {
        "worklets": len(worklets),
        "days_planned": len(tasks),
        "days_completed": sum(1 for t in tasks if t.completed),
        "days_missed": sum(len(get_missed_days(w, today)) for w in worklets),
        "redistributed": len(get_redistributed_worklets(worklets)),
    }
