"""Data classes for the worklet planning model."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class WorkletKind(str, Enum):
    ASSIGNMENT = "Assignment"
    EXAM = "Exam"


@dataclass
class Subtask:
    id: str
    name: str
    weight: float
    progress: float = 0.0
    completed: bool = False
    material_id: Optional[str] = None

    @property
    def remaining(self) -> float:
        return max(0.0, self.weight - self.progress)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "weight": self.weight,
            "progress": self.progress,
            "completed": self.completed,
            "material_id": self.material_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Subtask":
        return cls(
            id=data["id"],
            name=data["name"],
            weight=data["weight"],
            progress=data.get("progress", 0.0) or 0.0,
            completed=bool(data.get("completed", False)),
            material_id=data.get("material_id"),
        )


@dataclass
class DailyWorkload:
    date: str  # YYYY-MM-DD
    percentage: float

    def to_dict(self) -> dict:
        return {"date": self.date, "percentage": self.percentage}

    @classmethod
    def from_dict(cls, data: dict) -> "DailyWorkload":
        return cls(date=data["date"], percentage=data["percentage"])


@dataclass
class WorkSegment:
    subtask_id: str
    material_id: Optional[str]
    start: float  # page, second or abstract unit
    end: float

    @property
    def size(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {
            "subtask_id": self.subtask_id,
            "material_id": self.material_id,
            "start": self.start,
            "end": self.end,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkSegment":
        return cls(
            subtask_id=data["subtask_id"],
            material_id=data.get("material_id"),
            start=data["start"],
            end=data["end"],
        )


@dataclass
class DailyTask:
    date: str  # YYYY-MM-DD
    title: str
    completed: bool = False
    weight_for_day: float = 0.0
    work_segments: list[WorkSegment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "title": self.title,
            "completed": self.completed,
            "weight_for_day": self.weight_for_day,
            "work_segments": [s.to_dict() for s in self.work_segments],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyTask":
        return cls(
            date=data["date"],
            title=data["title"],
            completed=bool(data.get("completed", False)),
            weight_for_day=data.get("weight_for_day", 0.0),
            work_segments=[WorkSegment.from_dict(s) for s in data.get("work_segments", [])],
        )


@dataclass
class UndoState:
    original_daily_tasks: list[DailyTask]
    original_daily_workload: list[DailyWorkload]

    def to_dict(self) -> dict:
        return {
            "original_daily_tasks": [t.to_dict() for t in self.original_daily_tasks],
            "original_daily_workload": [w.to_dict() for w in self.original_daily_workload],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UndoState":
        return cls(
            original_daily_tasks=[DailyTask.from_dict(t) for t in data["original_daily_tasks"]],
            original_daily_workload=[DailyWorkload.from_dict(w) for w in data["original_daily_workload"]],
        )


@dataclass
class Worklet:
    """An Assignment or Exam together with its plan.

    Both kinds share the same planning fields; ``kind`` only changes labels.
    """

    id: str
    kind: WorkletKind
    name: str
    deadline: str  # ISO datetime
    subtasks: list[Subtask] = field(default_factory=list)
    daily_workload: list[DailyWorkload] = field(default_factory=list)
    daily_tasks: list[DailyTask] = field(default_factory=list)
    color: str = "#3b82f6"
    weight_unit: str = "units"
    use_specific_weekdays: bool = False
    selected_weekdays: list[int] = field(default_factory=lambda: [1, 2, 3, 4, 5])
    undo_state: Optional[UndoState] = None
    start_date: Optional[str] = None
    details: str = ""
    completed_pages: dict[str, list[int]] = field(default_factory=dict)

    def find_task(self, date_key: str) -> Optional[DailyTask]:
        for task in self.daily_tasks:
            if task.date == date_key:
                return task
        return None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "kind": self.kind.value,
            "name": self.name,
            "deadline": self.deadline,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "daily_workload": [w.to_dict() for w in self.daily_workload],
            "daily_tasks": [t.to_dict() for t in self.daily_tasks],
            "color": self.color,
            "weight_unit": self.weight_unit,
            "use_specific_weekdays": self.use_specific_weekdays,
            "selected_weekdays": list(self.selected_weekdays),
            "start_date": self.start_date,
            "details": self.details,
            "completed_pages": {k: list(v) for k, v in self.completed_pages.items()},
        }
        if self.undo_state is not None:
            data["undo_state"] = self.undo_state.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Worklet":
        undo = data.get("undo_state")
        return cls(
            id=data["id"],
            kind=WorkletKind(data.get("kind", WorkletKind.ASSIGNMENT.value)),
            name=data["name"],
            deadline=data["deadline"],
            subtasks=[Subtask.from_dict(s) for s in data.get("subtasks", [])],
            daily_workload=[DailyWorkload.from_dict(w) for w in data.get("daily_workload", [])],
            daily_tasks=[DailyTask.from_dict(t) for t in data.get("daily_tasks", [])],
            color=data.get("color", "#3b82f6"),
            weight_unit=data.get("weight_unit", "units"),
            use_specific_weekdays=bool(data.get("use_specific_weekdays", False)),
            selected_weekdays=list(data.get("selected_weekdays", [1, 2, 3, 4, 5])),
            undo_state=UndoState.from_dict(undo) if undo else None,
            start_date=data.get("start_date"),
            details=data.get("details", ""),
            completed_pages={k: list(v) for k, v in data.get("completed_pages", {}).items()},
        )
