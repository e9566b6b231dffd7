"""Save and restore the timer across app restarts.

The stored record is flat::

    schema_version, mode, remaining, end_timestamp, is_running,
    completed_focus_sessions

A running session is stored by its absolute end time rather than its
remaining seconds, so time that passes while the app is closed is
accounted for on the next launch.  Storage problems never reach the
engine: they are logged and the default state is used instead.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from .database.db import get_session
from .database.models import TimerStateRecord
from .timer.engine import Mode, TimerEngine


logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass(frozen=True)
class PersistedTimerState:
    mode: Mode = Mode.FOCUS
    remaining: int | None = None  # None = full duration of ``mode``
    end_timestamp: float | None = None
    is_running: bool = False
    completed_focus_sessions: int = 0
    schema_version: int = SCHEMA_VERSION


DEFAULT_STATE = PersistedTimerState()


def snapshot_timer(engine: TimerEngine, now: float | None = None) -> PersistedTimerState:
    """Describe ``engine`` as a record suitable for storage."""
    if now is None:
        now = time.time()
    state = engine.state
    return PersistedTimerState(
        mode=state.mode,
        remaining=state.remaining,
        end_timestamp=now + state.remaining if state.is_running else None,
        is_running=state.is_running,
        completed_focus_sessions=state.completed_focus_sessions,
    )


def save_timer_state(engine: TimerEngine, now: float | None = None) -> bool:
    """Write the engine's current state.  Returns False if storage failed."""
    snap = snapshot_timer(engine, now)
    try:
        with get_session() as db:
            record = db.query(TimerStateRecord).first()
            if record is None:
                record = TimerStateRecord()
                db.add(record)
            record.schema_version = snap.schema_version
            record.mode = snap.mode.value
            record.remaining = snap.remaining
            record.end_timestamp = snap.end_timestamp
            record.is_running = snap.is_running
            record.completed_focus_sessions = snap.completed_focus_sessions
            record.updated_at = datetime.now()
    except SQLAlchemyError as exc:
        logger.warning("Failed to save timer state: %s", exc)
        return False
    return True


def load_timer_state() -> PersistedTimerState:
    """Read the stored state, or the default state if there is none."""
    try:
        with get_session() as db:
            record = db.query(TimerStateRecord).first()
            if record is None:
                return DEFAULT_STATE
            if record.schema_version != SCHEMA_VERSION:
                return _migrate(record)
            return _from_record(record)
    except (SQLAlchemyError, ValueError) as exc:
        logger.warning("Failed to load timer state, using defaults: %s", exc)
        return DEFAULT_STATE


def remaining_after(
    state: PersistedTimerState,
    duration: int,
    now: float | None = None,
) -> int:
    """Seconds left for ``state`` at ``now``, given the mode's full duration."""
    if state.is_running and state.end_timestamp is not None:
        if now is None:
            now = time.time()
        left = math.ceil(state.end_timestamp - now)
    elif state.remaining is not None:
        left = state.remaining
    else:
        left = duration
    return max(0, min(left, duration))


def restore_engine(
    engine: TimerEngine,
    state: PersistedTimerState | None = None,
    now: float | None = None,
) -> PersistedTimerState:
    """Rehydrate ``engine`` from ``state`` (loaded from storage if omitted).

    A running session whose end time has already passed comes back
    stopped at zero, waiting for the user.
    """
    if state is None:
        state = load_timer_state()
    duration = engine.settings.durations[state.mode]
    remaining = remaining_after(state, duration, now)
    running = state.is_running and remaining > 0
    engine.resume_from_state(
        remaining, state.mode, running, state.completed_focus_sessions,
    )
    logger.info(
        "Restored %s with %ds left (%s)",
        state.mode.value, remaining, "running" if running else "paused",
    )
    return state


# ── internal ──────────────────────────────────────────────────────────────


def _from_record(record: TimerStateRecord) -> PersistedTimerState:
    return PersistedTimerState(
        mode=Mode(record.mode),
        remaining=record.remaining,
        end_timestamp=record.end_timestamp,
        is_running=bool(record.is_running),
        completed_focus_sessions=record.completed_focus_sessions or 0,
        schema_version=record.schema_version,
    )


def _migrate(record: TimerStateRecord) -> PersistedTimerState:
    """Upgrade a record from another schema version.

    Missing fields take their defaults; the result carries the current
    version and is written back on the next save.
    """
    logger.info(
        "Migrating timer state from schema v%s to v%d",
        record.schema_version, SCHEMA_VERSION,
    )
    mode = Mode(record.mode) if record.mode else DEFAULT_STATE.mode
    return PersistedTimerState(
        mode=mode,
        remaining=record.remaining,
        end_timestamp=record.end_timestamp,
        is_running=bool(record.is_running) and record.end_timestamp is not None,
        completed_focus_sessions=(
            record.completed_focus_sessions
            or DEFAULT_STATE.completed_focus_sessions
        ),
    )
