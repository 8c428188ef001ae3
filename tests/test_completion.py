# tests/test_completion.py
from datetime import date

import pytest

from worklet_planner.completion import (
    apply_progress, reconcile_day_completion, reconcile_page_completion,
)
from worklet_planner.errors import TaskNotFound, TaskNotToggleable
from worklet_planner.models import Subtask
from worklet_planner.redistribute import redistribute

from conftest import make_planned


def test_apply_progress_clamps_to_weight():
    s = apply_progress(Subtask(id="s", name="S", weight=10, progress=8), 5)
    assert s.progress == 10
    assert s.completed is True


def test_apply_progress_clamps_at_zero():
    s = apply_progress(Subtask(id="s", name="S", weight=10, progress=2), -5)
    assert s.progress == 0
    assert s.completed is False


def test_apply_progress_keeps_progress_near_weight():
    s = apply_progress(Subtask(id="s", name="S", weight=10, progress=9), 1 - 1e-12)
    assert s.progress == 9 + (1 - 1e-12)
    assert s.completed is True
    back = apply_progress(s, -(1 - 1e-12))
    assert back.completed is False


def test_completing_day_adds_progress(planned):
    result = reconcile_day_completion(planned, "2026-03-05", True)
    assert result.find_task("2026-03-05").completed is True
    assert result.subtasks[0].progress == pytest.approx(10)
    assert result.subtasks[0].completed is False


def test_uncompleting_day_restores_progress(planned):
    done = reconcile_day_completion(planned, "2026-03-05", True)
    undone = reconcile_day_completion(done, "2026-03-05", False)
    assert undone.subtasks[0].progress == pytest.approx(planned.subtasks[0].progress)
    assert undone.find_task("2026-03-05").completed is False


def test_completing_every_day_completes_subtask(planned):
    w = planned
    for t in planned.daily_tasks:
        w = reconcile_day_completion(w, t.date, True)
    assert w.subtasks[0].progress == pytest.approx(60)
    assert w.subtasks[0].completed is True


def test_over_completion_is_clamped(planned):
    planned.subtasks[0] = Subtask(id="s1", name="Book", weight=60, progress=55)
    result = reconcile_day_completion(planned, "2026-03-10", True)
    assert result.subtasks[0].progress == 60
    assert result.subtasks[0].completed is True


def test_day_spanning_subtasks_credits_both():
    w = make_planned(subtasks=[
        Subtask(id="a", name="A", weight=5),
        Subtask(id="b", name="B", weight=55),
    ])
    result = reconcile_day_completion(w, "2026-03-05", True)
    assert result.subtasks[0].progress == 5
    assert result.subtasks[0].completed is True
    assert result.subtasks[1].progress == pytest.approx(5)


def test_same_state_is_noop(planned):
    result = reconcile_day_completion(planned, "2026-03-05", False)
    assert result == planned
    assert result is not planned


def test_original_worklet_untouched(planned):
    reconcile_day_completion(planned, "2026-03-05", True)
    assert planned.subtasks[0].progress == 0
    assert planned.find_task("2026-03-05").completed is False


def test_unknown_day(planned):
    with pytest.raises(TaskNotFound):
        reconcile_day_completion(planned, "2026-04-01", True)


def test_redistributed_day_not_toggleable(planned):
    result = redistribute(planned, "2026-03-05", today=date(2026, 3, 5))
    with pytest.raises(TaskNotToggleable):
        reconcile_day_completion(result, "2026-03-05", True)


def paged():
    return make_planned(subtasks=[Subtask(id="s1", name="Book", weight=60, material_id="m1")])


def test_page_completion_credits_subtask():
    result = reconcile_page_completion(paged(), "m1", 3, True)
    assert result.completed_pages == {"m1": [3]}
    assert result.subtasks[0].progress == 1


def test_page_completion_twice_counts_once():
    w = reconcile_page_completion(paged(), "m1", 3, True)
    w = reconcile_page_completion(w, "m1", 3, True)
    assert w.subtasks[0].progress == 1


def test_page_uncompletion_reverses():
    w = reconcile_page_completion(paged(), "m1", 3, True)
    w = reconcile_page_completion(w, "m1", 4, True)
    w = reconcile_page_completion(w, "m1", 3, False)
    assert w.completed_pages == {"m1": [4]}
    assert w.subtasks[0].progress == 1


def test_page_for_unlinked_material_only_recorded():
    w = reconcile_page_completion(paged(), "m9", 1, True)
    assert w.completed_pages == {"m9": [1]}
    assert w.subtasks[0].progress == 0


def test_invalid_page():
    with pytest.raises(ValueError):
        reconcile_page_completion(paged(), "m1", 0, True)


def shared_material(first_progress):
    return make_planned(subtasks=[
        Subtask(id="ch1", name="Chapter 1", weight=10, progress=first_progress,
                completed=first_progress >= 10, material_id="book"),
        Subtask(id="ch2", name="Chapter 2", weight=10, material_id="book"),
    ])


def test_page_completion_moves_to_next_open_subtask():
    w = reconcile_page_completion(shared_material(10), "book", 11, True)
    assert w.subtasks[0].progress == 10
    assert w.subtasks[1].progress == 1


def test_page_uncompletion_takes_from_last_started_subtask():
    w = reconcile_page_completion(shared_material(10), "book", 11, True)
    w = reconcile_page_completion(w, "book", 11, False)
    assert w.subtasks[0].progress == 10
    assert w.subtasks[0].completed is True
    assert w.subtasks[1].progress == 0


def test_day_round_trip_restores_progress_near_weight(planned):
    w = planned
    for t in planned.daily_tasks[:-1]:
        w = reconcile_day_completion(w, t.date, True)
    before = w.subtasks[0].progress
    last = planned.daily_tasks[-1].date
    w = reconcile_day_completion(w, last, True)
    assert w.subtasks[0].completed is True
    w = reconcile_day_completion(w, last, False)
    assert w.subtasks[0].progress == pytest.approx(before, abs=1e-12)
    assert w.subtasks[0].completed is False
