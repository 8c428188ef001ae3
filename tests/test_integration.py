# tests/test_integration.py
"""End-to-end test of the planning workflow."""
from datetime import date

import pytest

from worklet_planner.completion import reconcile_day_completion
from worklet_planner.dashboard import calc_completion, get_missed_days
from worklet_planner.db import init_db
from worklet_planner.models import Subtask, Worklet, WorkletKind
from worklet_planner.planner import PlanDraft
from worklet_planner.redistribute import redistribute, undo_redistribute
from worklet_planner.store import get_worklet, save_worklet, update_worklet


def test_full_planning_workflow(tmp_db):
    init_db(tmp_db)

    # Plan an exam: two chapters, Mon-Fri only, deadline day excluded
    draft = PlanDraft(today=date(2026, 3, 1))
    draft.set_window(
        deadline="2026-03-13T09:00", lead_days=10, include_deadline_day=False,
        restrict_to_weekdays=True, selected_weekdays=[1, 2, 3, 4, 5],
    )
    draft.toggle_off_day("2026-03-11")
    exam = Worklet(
        id="exam", kind=WorkletKind.EXAM, name="Biology", deadline="2026-03-13T09:00",
        weight_unit="pages",
        subtasks=[
            Subtask(id="c1", name="Chapter 1", weight=40, material_id="pdf1"),
            Subtask(id="c2", name="Chapter 2", weight=30, material_id="pdf2"),
        ],
    )
    exam = draft.apply(exam)
    save_worklet(tmp_db, exam)

    dates = [t.date for t in exam.daily_tasks]
    assert dates == ["2026-03-03", "2026-03-04", "2026-03-05", "2026-03-06",
                     "2026-03-09", "2026-03-10", "2026-03-12"]
    assert sum(t.weight_for_day for t in exam.daily_tasks) == pytest.approx(70)

    # Work the first two days, miss the third
    for d in ("2026-03-03", "2026-03-04"):
        update_worklet(tmp_db, "exam", lambda w, d=d: reconcile_day_completion(w, d, True))
    stored = get_worklet(tmp_db, "exam")
    assert calc_completion(stored) == 28.6
    today = date(2026, 3, 5)
    assert [t.date for t in get_missed_days(stored, today=date(2026, 3, 6))] == ["2026-03-05"]

    # Redistribute the missed day onto the rest of the window
    before = get_worklet(tmp_db, "exam")
    moved = update_worklet(tmp_db, "exam", lambda w: redistribute(w, "2026-03-05", today=today))
    future = [t for t in moved.daily_tasks if t.date > "2026-03-05"]
    assert sum(t.weight_for_day for t in future) == pytest.approx(50)
    assert moved.find_task("2026-03-05").weight_for_day == 0

    # Undo restores the stored plan exactly
    restored = update_worklet(tmp_db, "exam", undo_redistribute)
    assert restored == before
    assert get_worklet(tmp_db, "exam").undo_state is None
