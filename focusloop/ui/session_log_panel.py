"""Session log panel: today's totals plus every logged session, newest first."""

from __future__ import annotations

from PyQt6.QtCore import QTimer
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QListWidget,
)

from .. import session_log
from ..database.models import SessionLog
from ..timer.engine import Mode
from .timer_widget import MODE_TITLES

CONFIRM_TIMEOUT_MS = 3000


def entry_caption(entry: SessionLog) -> str:
    """``"Focus - 25 min · Write report · 14:05"``"""
    title = MODE_TITLES[Mode(entry.mode)]
    parts = [f"{title} - {entry.duration_seconds / 60:g} min"]
    if entry.task_title:
        parts.append(entry.task_title)
    parts.append(entry.timestamp.strftime("%H:%M"))
    return " · ".join(parts)


def totals_caption(totals: session_log.TodayTotals) -> str:
    return (
        f"Today: {totals.focus_minutes:.1f} min focus "
        f"({totals.focus_sessions} sessions), "
        f"{totals.break_minutes:.1f} min break"
    )


class SessionLogPanel(QWidget):
    """Clear All needs a second click within three seconds."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._confirm_pending = False
        self._confirm_timer = QTimer(self)
        self._confirm_timer.setSingleShot(True)
        self._confirm_timer.setInterval(CONFIRM_TIMEOUT_MS)
        self._confirm_timer.timeout.connect(self._cancel_confirm)
        self._build_ui()
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        header = QLabel("Session Log")
        header.setObjectName("sectionHeader")
        layout.addWidget(header)

        self._totals_label = QLabel(self)
        self._totals_label.setObjectName("mutedLabel")
        layout.addWidget(self._totals_label)

        btn_row = QHBoxLayout()
        self._clear_today_btn = QPushButton("Clear Today", self)
        self._clear_today_btn.clicked.connect(self._on_clear_today)
        self._clear_all_btn = QPushButton("Clear All", self)
        self._clear_all_btn.clicked.connect(self._on_clear_all)
        btn_row.addWidget(self._clear_today_btn)
        btn_row.addWidget(self._clear_all_btn)
        btn_row.addStretch(1)
        layout.addLayout(btn_row)

        self._list = QListWidget(self)
        layout.addWidget(self._list, 1)

    # ── refresh ───────────────────────────────────────────────────────

    def refresh(self) -> None:
        self._totals_label.setText(totals_caption(session_log.today_totals()))
        self._list.clear()
        for entry in session_log.list_sessions():
            self._list.addItem(entry_caption(entry))

    # ── slots ─────────────────────────────────────────────────────────

    def _on_clear_today(self) -> None:
        session_log.clear_today()
        self.refresh()

    def _on_clear_all(self) -> None:
        if not self._confirm_pending:
            self._confirm_pending = True
            self._clear_all_btn.setText("Confirm All?")
            self._confirm_timer.start()
            return
        self._cancel_confirm()
        session_log.clear_all()
        self.refresh()

    def _cancel_confirm(self) -> None:
        self._confirm_timer.stop()
        self._confirm_pending = False
        self._clear_all_btn.setText("Clear All")
