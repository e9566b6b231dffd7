"""Qt driver that runs a :class:`TimerEngine` in real time.

The driver owns a 1-second ``QTimer`` that calls ``engine.tick()`` while
the engine is running, re-exposes the engine's controls, and after every
state-affecting call saves the timer state (when a saver is given) and
emits ``state_changed``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .engine import Mode, TimerEngine, TimerState


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000


class TimerDriver(QObject):
    """Real-time wrapper around a :class:`TimerEngine`.

    Signals
    -------
    tick(remaining_seconds: int)
        Emitted after every periodic tick.
    state_changed(state: TimerState)
        Emitted after every control call and after a completion.
    session_completed(data: dict)
        Emitted when a session runs out.  Keys: ``mode`` (the
        :class:`Mode` that just finished), ``was_focus``,
        ``duration_seconds`` (configured length of that mode),
        ``end_time``, ``completed_focus_sessions``.
    """

    tick = pyqtSignal(int)
    state_changed = pyqtSignal(object)
    session_completed = pyqtSignal(object)

    def __init__(
        self,
        engine: TimerEngine,
        parent: QObject | None = None,
        *,
        saver: Callable[[TimerEngine], object] | None = None,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._saver = saver

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(self._on_tick)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def state(self) -> TimerState:
        return self._engine.state

    @property
    def is_ticking(self) -> bool:
        """True while the periodic timer is active."""
        return self._qt_timer.isActive()

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        self._engine.start()
        self._changed()

    def pause(self) -> None:
        self._engine.pause()
        self._changed()

    def toggle(self) -> None:
        """Start when idle, pause when running."""
        if self._engine.is_running:
            self.pause()
        else:
            self.start()

    def reset(self, mode: Mode | None = None) -> None:
        self._engine.reset(mode)
        self._changed()

    def switch_mode(self, mode: Mode) -> None:
        self._engine.switch_mode(mode)
        self._changed()

    def skip(self) -> None:
        """Drop the current break and go back to focus.  Nothing is logged.

        Does nothing during a focus session.
        """
        if self._engine.mode == Mode.FOCUS:
            return
        self._engine.switch_mode(Mode.FOCUS)
        self._changed()

    def update_settings(self, **changes) -> None:
        self._engine.update_settings(**changes)
        self._changed()

    def sync(self) -> None:
        """Align the periodic timer with the engine and announce the state.

        Call after mutating the engine directly, e.g. after a restore.
        """
        self._changed()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_tick(self) -> None:
        finished = self._engine.mode
        completed = self._engine.tick()
        self.tick.emit(self._engine.remaining)
        if completed:
            self._on_completed(finished)
        else:
            self._save()

    def _on_completed(self, finished: Mode) -> None:
        data = {
            "mode": finished,
            "was_focus": finished == Mode.FOCUS,
            "duration_seconds": self._engine.settings.durations[finished],
            "end_time": datetime.now(),
            "completed_focus_sessions": self._engine.completed_focus_sessions,
        }
        self._changed()
        self.session_completed.emit(data)

    def _changed(self) -> None:
        if self._engine.is_running:
            if not self._qt_timer.isActive():
                self._qt_timer.start()
        else:
            self._qt_timer.stop()
        self._save()
        state = self._engine.state
        logger.debug("Timer state: %s", state)
        self.state_changed.emit(state)

    def _save(self) -> None:
        if self._saver is not None:
            self._saver(self._engine)
