"""Log of finished sessions and the daily totals shown in the UI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from .database.db import get_session
from .database.models import SessionLog, Task
from .timer.engine import Mode


@dataclass(frozen=True)
class TodayTotals:
    focus_minutes: float = 0.0
    focus_sessions: int = 0
    break_minutes: float = 0.0


def record_session(
    mode: Mode,
    duration_seconds: int,
    task: Task | None = None,
    timestamp: datetime | None = None,
) -> SessionLog:
    """Append a log entry.  ``task`` is only kept for focus sessions."""
    if mode != Mode.FOCUS:
        task = None
    with get_session() as db:
        entry = SessionLog(
            timestamp=timestamp or datetime.now(),
            mode=mode.value,
            duration_seconds=duration_seconds,
            task_id=task.id if task else None,
            task_title=task.title if task else None,
        )
        db.add(entry)
        db.flush()
    return entry


def list_sessions(limit: int | None = None) -> list[SessionLog]:
    """Entries newest first."""
    with get_session() as db:
        query = db.query(SessionLog).order_by(
            SessionLog.timestamp.desc(), SessionLog.id.desc(),
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()


def today_totals(today: date | None = None) -> TodayTotals:
    focus_seconds = 0
    focus_sessions = 0
    break_seconds = 0
    with get_session() as db:
        entries = (
            db.query(SessionLog)
            .filter(SessionLog.timestamp >= _start_of(today))
            .all()
        )
        for entry in entries:
            if entry.mode == Mode.FOCUS.value:
                focus_seconds += entry.duration_seconds
                focus_sessions += 1
            else:
                break_seconds += entry.duration_seconds
    return TodayTotals(
        focus_minutes=focus_seconds / 60,
        focus_sessions=focus_sessions,
        break_minutes=break_seconds / 60,
    )


def clear_today(today: date | None = None) -> int:
    """Delete today's entries; returns how many were removed."""
    with get_session() as db:
        return (
            db.query(SessionLog)
            .filter(SessionLog.timestamp >= _start_of(today))
            .delete(synchronize_session=False)
        )


def clear_all() -> int:
    with get_session() as db:
        return db.query(SessionLog).delete(synchronize_session=False)


def _start_of(day: date | None) -> datetime:
    return datetime.combine(day or date.today(), time.min)
