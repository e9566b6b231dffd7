"""Main timer card.

Layout (top → bottom):
    - Mode title
    - mm:ss countdown
    - Start/Pause, Reset, Skip
    - Focus / Short / Long mode buttons
    - Cycle counter and next-session hint
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
)

from ..timer.driver import TimerDriver
from ..timer.engine import Mode, TimerState


MODE_TITLES: dict[Mode, str] = {
    Mode.FOCUS:       "Focus",
    Mode.SHORT_BREAK: "Short Break",
    Mode.LONG_BREAK:  "Long Break",
}

MODE_BUTTON_LABELS: dict[Mode, str] = {
    Mode.FOCUS:       "Focus",
    Mode.SHORT_BREAK: "Short",
    Mode.LONG_BREAK:  "Long",
}


def format_time(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


class TimerWidget(QWidget):
    """Countdown display and controls for a :class:`TimerDriver`."""

    def __init__(self, driver: TimerDriver, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._driver = driver
        self._build_ui()
        self._connect_signals()
        self._on_state_changed(driver.state)

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(12)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._title = QLabel(card)
        self._title.setObjectName("modeTitle")
        self._title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._title)

        self._time_label = QLabel(card)
        self._time_label.setObjectName("timeLabel")
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._time_label)

        # ── main controls ────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")
        self._reset_btn = QPushButton("Reset", card)
        self._skip_btn = QPushButton("Skip", card)
        self._skip_btn.setToolTip("Skip the break and get back to focus")

        for btn in (self._start_pause_btn, self._reset_btn, self._skip_btn):
            btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
            btn_row.addWidget(btn)
        layout.addLayout(btn_row)

        # ── mode switcher ────────────────────────────────────────────
        mode_row = QHBoxLayout()
        mode_row.setSpacing(8)
        mode_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._mode_buttons: dict[Mode, QPushButton] = {}
        for mode in Mode:
            btn = QPushButton(MODE_BUTTON_LABELS[mode], card)
            btn.setCheckable(True)
            btn.setFocusPolicy(Qt.FocusPolicy.NoFocus)
            self._mode_buttons[mode] = btn
            mode_row.addWidget(btn)
        layout.addLayout(mode_row)

        self._cycle_label = QLabel(card)
        self._cycle_label.setObjectName("mutedLabel")
        self._cycle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._cycle_label)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(self._driver.toggle)
        self._reset_btn.clicked.connect(lambda: self._driver.reset())
        self._skip_btn.clicked.connect(self._driver.skip)
        for mode, btn in self._mode_buttons.items():
            btn.clicked.connect(lambda _checked, m=mode: self._driver.switch_mode(m))

        self._driver.tick.connect(self._refresh_time)
        self._driver.state_changed.connect(self._on_state_changed)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_state_changed(self, state: TimerState) -> None:
        self._title.setText(MODE_TITLES[state.mode])
        self._start_pause_btn.setText("Pause" if state.is_running else "Start")
        self._skip_btn.setEnabled(state.mode != Mode.FOCUS)
        for mode, btn in self._mode_buttons.items():
            btn.setChecked(mode == state.mode)

        engine = self._driver.engine
        interval = engine.settings.long_break_interval
        done = state.completed_focus_sessions
        if interval > 0:
            cycle = f"Focus sessions: {done} ({done % interval} of {interval} this cycle)"
        else:
            cycle = f"Focus sessions: {done}"
        next_mode = MODE_TITLES[engine.next_mode()]
        self._cycle_label.setText(f"{cycle}  ·  Next: {next_mode}")

        self._refresh_time(state.remaining)

    def _refresh_time(self, remaining: int) -> None:
        self._time_label.setText(format_time(remaining))
