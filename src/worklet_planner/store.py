"""Worklet persistence and user settings."""
import json
import logging
from datetime import datetime
from typing import Callable

from worklet_planner.db import get_connection
from worklet_planner.models import Worklet

logger = logging.getLogger(__name__)


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def _write(conn, worklet: Worklet) -> None:
    conn.execute(
        """INSERT INTO worklets (id, kind, name, deadline, payload, updated_at)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            kind=excluded.kind, name=excluded.name, deadline=excluded.deadline,
            payload=excluded.payload, updated_at=excluded.updated_at""",
        (
            worklet.id, worklet.kind.value, worklet.name, worklet.deadline,
            json.dumps(worklet.to_dict()), datetime.now().isoformat(),
        ),
    )


def save_worklet(db_path: str, worklet: Worklet) -> None:
    conn = get_connection(db_path)
    _write(conn, worklet)
    conn.commit()
    conn.close()


def get_worklet(db_path: str, worklet_id: str) -> Worklet | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT payload FROM worklets WHERE id = ?", (worklet_id,)).fetchone()
    conn.close()
    return Worklet.from_dict(json.loads(row["payload"])) if row else None


def list_worklets(db_path: str) -> list[Worklet]:
    """All stored worklets, soonest deadline first."""
    conn = get_connection(db_path)
    rows = conn.execute("SELECT payload FROM worklets ORDER BY deadline, name").fetchall()
    conn.close()
    return [Worklet.from_dict(json.loads(r["payload"])) for r in rows]


def delete_worklet(db_path: str, worklet_id: str) -> bool:
    conn = get_connection(db_path)
    cur = conn.execute("DELETE FROM worklets WHERE id = ?", (worklet_id,))
    conn.commit()
    conn.close()
    return cur.rowcount > 0


def update_worklet(
    db_path: str, worklet_id: str, change: Callable[[Worklet], Worklet]
) -> Worklet | None:
    """Read, change and write back one worklet inside a single transaction.

    The write lock is taken before reading, so a concurrent edit can never be
    overwritten by a plan computed from stale data. If ``change`` raises,
    nothing is written and the error propagates.
    """
    conn = get_connection(db_path)
    conn.isolation_level = None
    try:
        conn.execute("BEGIN IMMEDIATE")
        row = conn.execute("SELECT payload FROM worklets WHERE id = ?", (worklet_id,)).fetchone()
        if row is None:
            conn.execute("ROLLBACK")
            return None
        updated = change(Worklet.from_dict(json.loads(row["payload"])))
        _write(conn, updated)
        conn.execute("COMMIT")
    except Exception:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    finally:
        conn.close()
    logger.debug("Updated worklet %s", worklet_id)
    return updated
