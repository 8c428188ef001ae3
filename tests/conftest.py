from datetime import date

import pytest

from worklet_planner.models import Subtask, Worklet, WorkletKind
from worklet_planner.planner import plan_worklet
from worklet_planner.window import build_window

# Window used across tests: Thu 2026-03-05 .. Tue 2026-03-10
DEADLINE = "2026-03-10T17:00"
BEFORE_START = date(2026, 3, 1)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    return db_path


def make_worklet(subtasks=None, kind=WorkletKind.ASSIGNMENT, unit="pages", worklet_id="w1"):
    return Worklet(
        id=worklet_id,
        kind=kind,
        name="Reading",
        deadline=DEADLINE,
        subtasks=subtasks if subtasks is not None else [Subtask(id="s1", name="Book", weight=60)],
        weight_unit=unit,
    )


def make_planned(subtasks=None, **kwargs):
    """A worklet planned over the six days 03-05..03-10 with equal effort."""
    efforts = build_window(DEADLINE, 5, today=BEFORE_START)
    return plan_worklet(make_worklet(subtasks, **kwargs), efforts)


@pytest.fixture
def planned():
    return make_planned()
