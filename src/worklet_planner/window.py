"""Work-day window construction from a deadline and lead time."""
import logging
from datetime import date, datetime, timedelta

from worklet_planner.models import Worklet

logger = logging.getLogger(__name__)

DEFAULT_EFFORT = 100


def parse_deadline(deadline) -> date | None:
    """Return the calendar date of a deadline given as str, datetime or date."""
    if deadline is None or deadline == "":
        return None
    if isinstance(deadline, datetime):
        return deadline.date()
    if isinstance(deadline, date):
        return deadline
    try:
        return datetime.fromisoformat(str(deadline)).date()
    except ValueError:
        return None


def sunday_weekday(d: date) -> int:
    """Weekday number with Sunday=0 ... Saturday=6."""
    return (d.weekday() + 1) % 7


def days_until(deadline_date: date, today: date | None = None) -> int:
    today = today or date.today()
    return max(0, (deadline_date - today).days)


def build_window(
    deadline,
    lead_days,
    include_deadline_day: bool = True,
    restrict_to_weekdays: bool = False,
    selected_weekdays=(),
    previous_efforts=None,
    today: date | None = None,
) -> list[dict]:
    """Compute the eligible work days before a deadline.

    Returns ``[{"date": "YYYY-MM-DD", "effort": n}, ...]`` in date order. An
    effort already present in ``previous_efforts`` for the same date is kept,
    new dates start at 100. A missing deadline or bad lead time yields an
    empty window.
    """
    deadline_date = parse_deadline(deadline)
    if deadline_date is None:
        logger.warning("No usable deadline %r; window is empty", deadline)
        return []
    try:
        lead = int(lead_days)
    except (TypeError, ValueError):
        logger.warning("Unparseable lead time %r; window is empty", lead_days)
        return []
    if lead < 0:
        logger.warning("Negative lead time %d; window is empty", lead)
        return []
    lead = min(lead, days_until(deadline_date, today))

    start = deadline_date - timedelta(days=lead)
    last_work_day = deadline_date if include_deadline_day else deadline_date - timedelta(days=1)
    last_work_day = min(last_work_day, deadline_date)

    weekdays = set(selected_weekdays or ())
    previous = {e["date"]: e["effort"] for e in (previous_efforts or [])}

    window = []
    current = start
    while current <= last_work_day:
        if not restrict_to_weekdays or sunday_weekday(current) in weekdays:
            key = current.isoformat()
            window.append({"date": key, "effort": previous.get(key, DEFAULT_EFFORT)})
        current += timedelta(days=1)
    logger.debug("Built window of %d days ending %s", len(window), deadline_date)
    return window


def efforts_from_workload(worklet: Worklet) -> list[dict]:
    """Recover editable efforts from a saved plan, using percentages as efforts."""
    total = sum(w.percentage for w in worklet.daily_workload)
    if total <= 0:
        return []
    return [{"date": w.date, "effort": w.percentage} for w in worklet.daily_workload]
