"""Save-time planning: window, normalization and allocation together."""
import logging
from dataclasses import dataclass, field, replace
from datetime import date

from worklet_planner.allocator import allocate
from worklet_planner.models import DailyWorkload, Worklet
from worklet_planner.window import build_window, parse_deadline
from worklet_planner.workload import distribute_evenly, normalize

logger = logging.getLogger(__name__)


def plan_worklet(worklet: Worklet, efforts: list[dict], off_days=()) -> Worklet:
    """Return a copy of ``worklet`` with a freshly computed plan.

    A new plan replaces any redistribution, so the undo snapshot is dropped.
    """
    workload = normalize(efforts, off_days)
    tasks = allocate(workload, worklet.subtasks, worklet.weight_unit)
    start = workload[0].date if workload else worklet.start_date
    logger.info("Planned %r over %d days", worklet.name, len(tasks))
    return replace(
        worklet,
        daily_workload=workload,
        daily_tasks=tasks,
        undo_state=None,
        start_date=start,
    )


@dataclass
class PlanDraft:
    """Editable schedule for one worklet before it is saved.

    Changing the window parameters rebuilds the day list (keeping efforts of
    dates that survive) and clears off days. Editing efforts keeps off days.
    """

    deadline: str | None = None
    lead_days: int = 7
    include_deadline_day: bool = True
    restrict_to_weekdays: bool = False
    selected_weekdays: list[int] = field(default_factory=lambda: [1, 2, 3, 4, 5])
    efforts: list[dict] = field(default_factory=list)
    off_days: set[str] = field(default_factory=set)
    today: date | None = None

    def _window_key(self) -> tuple:
        return (
            self.deadline,
            self.lead_days,
            self.include_deadline_day,
            self.restrict_to_weekdays,
            tuple(sorted(self.selected_weekdays)),
        )

    def recompute(self) -> None:
        self.efforts = build_window(
            self.deadline,
            self.lead_days,
            self.include_deadline_day,
            self.restrict_to_weekdays,
            self.selected_weekdays,
            previous_efforts=self.efforts,
            today=self.today,
        )
        self.off_days = set()

    def set_window(self, **params) -> None:
        """Update window parameters; recomputes only when something changed."""
        before = self._window_key()
        for name, value in params.items():
            if name not in ("deadline", "lead_days", "include_deadline_day",
                            "restrict_to_weekdays", "selected_weekdays"):
                raise TypeError(f"Unknown window parameter: {name}")
            setattr(self, name, value)
        if self._window_key() != before or not self.efforts:
            self.recompute()

    def set_effort(self, date_key: str, effort: float) -> None:
        value = max(0, effort or 0)
        self.efforts = [
            {**e, "effort": value} if e["date"] == date_key else e
            for e in self.efforts
        ]

    def toggle_off_day(self, date_key: str) -> None:
        if date_key in self.off_days:
            self.off_days.discard(date_key)
        else:
            self.off_days.add(date_key)

    def distribute_evenly(self) -> None:
        self.efforts = distribute_evenly(self.efforts, self.off_days)

    def workload(self) -> list[DailyWorkload]:
        return normalize(self.efforts, self.off_days)

    def apply(self, worklet: Worklet) -> Worklet:
        planned = plan_worklet(worklet, self.efforts, self.off_days)
        if self.deadline is not None and parse_deadline(self.deadline) is not None:
            planned = replace(
                planned,
                deadline=self.deadline,
                use_specific_weekdays=self.restrict_to_weekdays,
                selected_weekdays=sorted(self.selected_weekdays),
            )
        return planned
