"""Pomodoro timer state machine for FocusLoop.

States
------
Every combination of a mode and a running flag:

    idle-focus          running-focus
    idle-short_break    running-short_break
    idle-long_break     running-long_break

Transitions
-----------
idle → running                       (start)
running → idle                       (pause)
any → idle, full duration            (reset / switch_mode)
running → idle, remaining 0          (tick reaches 0, auto-advance off)
running → idle-{next mode}           (tick reaches 0, auto-advance on)

Drift
-----
The countdown is never decremented per tick.  ``start()`` snapshots the
wall-clock time and the remaining seconds; every ``tick()`` recomputes
``remaining`` from the time elapsed since that snapshot.  A late, early,
throttled or bursty driver therefore cannot lose or gain time.

The engine is plain Python with an injectable clock so it can be driven
by a ``QTimer`` (see :mod:`focusloop.timer.driver`) or by tests.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable


logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Mode(Enum):
    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_DURATIONS: dict[Mode, int] = {
    Mode.FOCUS: 25 * 60,
    Mode.SHORT_BREAK: 5 * 60,
    Mode.LONG_BREAK: 15 * 60,
}

LONG_BREAK_INTERVAL = 4  # focus sessions per long break


# ── value types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerSettings:
    """Preferences the engine is configured with.

    ``sound_enabled`` and ``notifications_enabled`` ride along for the
    app's benefit; the engine itself never reads them.
    """

    durations: dict[Mode, int] = field(
        default_factory=lambda: dict(DEFAULT_DURATIONS)
    )
    auto_advance: bool = False
    long_break_interval: int = LONG_BREAK_INTERVAL  # 0 = never
    sound_enabled: bool = False
    notifications_enabled: bool = False


@dataclass(frozen=True)
class TimerState:
    """Observable engine state at one instant."""

    mode: Mode
    remaining: int
    is_running: bool
    completed_focus_sessions: int


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine:
    """Drift-resistant Pomodoro countdown.

    Parameters
    ----------
    settings
        Initial :class:`TimerSettings`; defaults when omitted.
    clock
        Zero-argument callable returning wall-clock seconds.  Defaults
        to :func:`time.time`.
    """

    def __init__(
        self,
        settings: TimerSettings | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings: TimerSettings = settings or TimerSettings()
        self._clock = clock

        self._mode: Mode = Mode.FOCUS
        self._remaining: int = self._settings.durations[Mode.FOCUS]
        self._is_running: bool = False
        self._completed_focus_sessions: int = 0

        # ── run snapshot ──────────────────────────────────────────────
        self._session_started_at: float | None = None
        self._remaining_at_start: int = self._remaining

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return TimerState(
            mode=self._mode,
            remaining=self._remaining,
            is_running=self._is_running,
            completed_focus_sessions=self._completed_focus_sessions,
        )

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def remaining(self) -> int:
        """Seconds left in the current session."""
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def completed_focus_sessions(self) -> int:
        return self._completed_focus_sessions

    @property
    def settings(self) -> TimerSettings:
        return self._settings

    def get_settings(self) -> TimerSettings:
        return self._settings

    @property
    def duration(self) -> int:
        """Full length of the current mode in seconds."""
        return self._settings.durations[self._mode]

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start or resume the countdown.  No-op when already running."""
        if self._is_running:
            return
        self._is_running = True
        self._session_started_at = self._clock()
        self._remaining_at_start = self._remaining

    def pause(self) -> None:
        """Freeze the countdown.  Idle time until the next start never counts."""
        if not self._is_running:
            return
        elapsed = self._elapsed(self._clock())
        self._remaining = max(0, self._remaining_at_start - elapsed)
        self._stop()

    def reset(self, mode: Mode | None = None) -> None:
        """Stop and refill ``mode`` (default: the current one).

        ``completed_focus_sessions`` is left alone.
        """
        self._stop()
        if mode is not None:
            self._mode = mode
        self._remaining = self._settings.durations[self._mode]
        self._remaining_at_start = self._remaining

    def switch_mode(self, mode: Mode) -> None:
        """Manual mode change: always a fresh, stopped session."""
        self.reset(mode)

    def update_settings(
        self,
        *,
        durations: dict[Mode, int] | None = None,
        auto_advance: bool | None = None,
        long_break_interval: int | None = None,
        sound_enabled: bool | None = None,
        notifications_enabled: bool | None = None,
    ) -> None:
        """Merge new values into the settings.

        ``durations`` is merged key by key.  When idle the current mode
        is refilled from its (possibly new) duration; a running
        countdown is left undisturbed.
        """
        changes: dict = {}
        if durations is not None:
            changes["durations"] = {**self._settings.durations, **durations}
        if auto_advance is not None:
            changes["auto_advance"] = auto_advance
        if long_break_interval is not None:
            changes["long_break_interval"] = long_break_interval
        if sound_enabled is not None:
            changes["sound_enabled"] = sound_enabled
        if notifications_enabled is not None:
            changes["notifications_enabled"] = notifications_enabled
        self._settings = replace(self._settings, **changes)

        if not self._is_running:
            self._remaining = self._settings.durations[self._mode]
            self._remaining_at_start = self._remaining

    def tick(self, now: float | None = None) -> bool:
        """Advance the countdown to ``now`` (default: the clock).

        Returns True exactly when this call completed the session.
        Calling it while idle, including right after a completion, does
        nothing and returns False.
        """
        if not self._is_running:
            return False
        if now is None:
            now = self._clock()

        remaining = self._remaining_at_start - self._elapsed(now)
        if remaining > 0:
            self._remaining = remaining
            return False

        finished = self._mode
        self._remaining = 0
        self._stop()
        if finished == Mode.FOCUS:
            self._completed_focus_sessions += 1

        if self._settings.auto_advance:
            self.switch_mode(self._mode_after(finished))
        logger.info(
            "%s session complete (focus sessions: %d)",
            finished.value, self._completed_focus_sessions,
        )
        return True

    def next_mode(self) -> Mode:
        """The mode auto-advance would pick once the current session ends."""
        if self._mode == Mode.FOCUS:
            return self._break_after(self._completed_focus_sessions + 1)
        return Mode.FOCUS

    def resume_from_state(
        self,
        remaining_seconds: int,
        mode: Mode,
        running: bool,
        completed_count: int,
    ) -> None:
        """Rehydrate from persisted data.

        The caller has already subtracted any time that passed while the
        state sat on disk; a running session restarts its elapsed-time
        baseline from now.
        """
        self._mode = mode
        self._remaining = max(0, int(remaining_seconds))
        self._remaining_at_start = self._remaining
        self._completed_focus_sessions = completed_count
        self._is_running = running
        self._session_started_at = self._clock() if running else None

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _elapsed(self, now: float) -> int:
        """Whole seconds since the last start; a clock stepping back reads 0."""
        return max(0, math.floor(now - self._session_started_at))

    def _mode_after(self, finished: Mode) -> Mode:
        if finished == Mode.FOCUS:
            return self._break_after(self._completed_focus_sessions)
        return Mode.FOCUS

    def _break_after(self, focus_sessions: int) -> Mode:
        interval = self._settings.long_break_interval
        if interval > 0 and focus_sessions % interval == 0:
            return Mode.LONG_BREAK
        return Mode.SHORT_BREAK

    def _stop(self) -> None:
        self._is_running = False
        self._session_started_at = None
