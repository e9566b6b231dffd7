"""Main application window for FocusLoop."""

from __future__ import annotations

import logging
import time
from typing import Callable

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QColor, QIcon, QKeySequence, QPainter, QPixmap
from PyQt6.QtWidgets import (
    QAbstractSpinBox, QHBoxLayout, QLineEdit, QMainWindow, QMessageBox,
    QStatusBar, QSystemTrayIcon, QVBoxLayout, QWidget,
)

from . import session_log, tasks
from .audio.sounds import SoundManager, sound_for
from .persistence import restore_engine, save_timer_state
from .settings import Settings, load_settings, save_settings
from .timer.driver import TimerDriver
from .timer.engine import Mode, TimerEngine, TimerState
from .ui.session_log_panel import SessionLogPanel
from .ui.settings_dialog import SettingsDialog
from .ui.tasks_panel import TasksPanel
from .ui.timer_widget import MODE_TITLES, TimerWidget, format_time


logger = logging.getLogger(__name__)

STYLESHEET = """
QLabel#modeTitle { font-size: 40px; font-weight: 600; }
QLabel#timeLabel { font-size: 64px; font-family: monospace; }
QLabel#sectionHeader { font-size: 15px; font-weight: 700; }
QLabel#mutedLabel { color: #7A7A9A; }
QPushButton#primaryButton { font-weight: 600; min-width: 90px; }
"""

COMPLETION_MESSAGES: dict[bool, tuple[str, str]] = {
    True:  ("Focus session complete!", "Take a break."),
    False: ("Break complete!", "Back to focus."),
}

# Keys that drive the timer while no text field has focus.
MODE_KEYS: tuple[tuple[str, Mode], ...] = (
    ("1", Mode.FOCUS),
    ("2", Mode.SHORT_BREAK),
    ("3", Mode.LONG_BREAK),
)


def _make_icon() -> QIcon:
    """Plain tomato-red disc used for the window and tray icon."""
    pixmap = QPixmap(64, 64)
    pixmap.fill(QColor(0, 0, 0, 0))
    p = QPainter(pixmap)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setPen(Qt.PenStyle.NoPen)
    p.setBrush(QColor("#E5533D"))
    p.drawEllipse(4, 4, 56, 56)
    p.end()
    return QIcon(pixmap)


class FocusLoopApp(QMainWindow):
    """Main application window.

    Owns the timer engine and its driver, restores the timer from the
    database on start, and reacts to completed sessions by logging them,
    crediting the active task, playing a sound and notifying.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        sound_manager: SoundManager | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__()
        self.setWindowTitle("FocusLoop")
        self.setWindowIcon(_make_icon())

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = settings or load_settings()
        self.resize(self._settings.window_width, self._settings.window_height)

        # ── timer ─────────────────────────────────────────────────────
        self._engine = TimerEngine(self._settings.to_timer_settings(), clock=clock)
        restore_engine(self._engine, now=clock())
        self._driver = TimerDriver(
            self._engine, self,
            saver=lambda engine: save_timer_state(engine, clock()),
        )

        # ── sound ─────────────────────────────────────────────────────
        self._sound_manager = sound_manager or SoundManager(parent=self)
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.set_enabled(self._settings.sound_enabled)

        # ── central widget ────────────────────────────────────────────
        self.setStyleSheet(STYLESHEET)
        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(16, 12, 16, 12)
        root.setSpacing(12)

        self._timer_widget = TimerWidget(self._driver, central)
        root.addWidget(self._timer_widget)

        panels = QHBoxLayout()
        panels.setSpacing(16)
        self._tasks_panel = TasksPanel(central)
        self._session_log_panel = SessionLogPanel(central)
        panels.addWidget(self._tasks_panel, 1)
        panels.addWidget(self._session_log_panel, 1)
        root.addLayout(panels, 1)

        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage("Ready to focus!")

        # ── system tray icon (notifications) ──────────────────────────
        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.setIcon(_make_icon())
        self._tray_icon.setToolTip("FocusLoop")
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.show()

        self._build_menu_bar()
        self._setup_shortcuts()

        # ── wire signals ──────────────────────────────────────────────
        self._driver.state_changed.connect(self._on_state_changed)
        self._driver.tick.connect(self._on_tick)
        self._driver.session_completed.connect(self._on_session_completed)
        self._tasks_panel.active_task_changed.connect(self._on_active_task_changed)

        # Persist the restored state and start ticking if it was running.
        self._driver.sync()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def driver(self) -> TimerDriver:
        return self._driver

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def settings(self) -> Settings:
        return self._settings

    def apply_settings(self, settings: Settings) -> None:
        """Push edited preferences into the timer and the sound manager.

        The timer is only touched when a duration or the cadence changed,
        so adjusting the volume never refills a paused session.
        """
        self._settings = settings
        current = self._engine.settings
        if (
            settings.durations() != current.durations
            or settings.auto_advance != current.auto_advance
            or settings.long_break_interval != current.long_break_interval
        ):
            self._driver.update_settings(
                durations=settings.durations(),
                auto_advance=settings.auto_advance,
                long_break_interval=settings.long_break_interval,
                sound_enabled=settings.sound_enabled,
                notifications_enabled=settings.notifications_enabled,
            )
        self._sound_manager.set_volume(settings.sound_volume)
        self._sound_manager.set_enabled(settings.sound_enabled)

    # ══════════════════════════════════════════════════════════════════
    #  MENU BAR
    # ══════════════════════════════════════════════════════════════════

    def _build_menu_bar(self) -> None:
        menu_bar = self.menuBar()

        prefs_action = QAction("Preferences…", self)
        prefs_action.setMenuRole(QAction.MenuRole.PreferencesRole)
        prefs_action.setShortcut(QKeySequence("Ctrl+,"))
        prefs_action.triggered.connect(self._open_settings)

        quit_action = QAction("Quit FocusLoop", self)
        quit_action.setMenuRole(QAction.MenuRole.QuitRole)
        quit_action.setShortcut(QKeySequence("Ctrl+Q"))
        quit_action.triggered.connect(self.close)

        app_menu = menu_bar.addMenu("FocusLoop")
        app_menu.addAction(prefs_action)
        app_menu.addAction(quit_action)

        help_menu = menu_bar.addMenu("Help")
        shortcuts_action = QAction("Keyboard Shortcuts", self)
        shortcuts_action.triggered.connect(self._show_shortcuts)
        help_menu.addAction(shortcuts_action)

    def _show_shortcuts(self) -> None:
        QMessageBox.information(
            self,
            "Keyboard Shortcuts",
            "Space — start / pause\n"
            "R — reset\n"
            "1 — focus\n"
            "2 — short break\n"
            "3 — long break",
        )

    def _open_settings(self) -> None:
        dialog = SettingsDialog(self._settings, self)
        dialog.settings_changed.connect(self.apply_settings)
        dialog.exec()

    # ══════════════════════════════════════════════════════════════════
    #  SOUND / NOTIFICATION HELPERS
    # ══════════════════════════════════════════════════════════════════

    def _play_sound(self, name: str) -> None:
        if not self._settings.sound_enabled:
            return
        self._sound_manager.play(name)

    def _send_notification(self, title: str, body: str) -> None:
        if not self._settings.notifications_enabled:
            return
        if not self._tray_icon.isVisible():
            return
        self._tray_icon.showMessage(title, body)

    # ══════════════════════════════════════════════════════════════════
    #  TIMER SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _on_state_changed(self, state: TimerState) -> None:
        self._update_title(state.remaining)

    def _on_tick(self, remaining: int) -> None:
        self._update_title(remaining)

    def _update_title(self, remaining: int) -> None:
        state = self._engine.state
        label = MODE_TITLES[state.mode]
        if state.is_running:
            self.setWindowTitle(f"{format_time(remaining)} — {label} — FocusLoop")
            self._tray_icon.setToolTip(f"FocusLoop — {label} {format_time(remaining)}")
        else:
            self.setWindowTitle("FocusLoop")
            self._tray_icon.setToolTip("FocusLoop")

    def _on_session_completed(self, data: dict) -> None:
        """Log the finished session, credit the task, play sound, notify."""
        mode: Mode = data["mode"]
        was_focus: bool = data["was_focus"]

        task = tasks.credit_active_task() if was_focus else None
        session_log.record_session(
            mode,
            data["duration_seconds"],
            task=task,
            timestamp=data["end_time"],
        )
        logger.info(
            "Logged %s session (%ds)%s",
            mode.value, data["duration_seconds"],
            f" for task {task.title!r}" if task else "",
        )

        self._play_sound(sound_for(mode))
        title, body = COMPLETION_MESSAGES[was_focus]
        self._send_notification(title, body)
        self._status_bar.showMessage(f"{title} {body}")

        self._tasks_panel.refresh()
        self._session_log_panel.refresh()

    def _on_active_task_changed(self, task_id) -> None:
        task = tasks.get_active_task() if task_id is not None else None
        if task is None:
            self._status_bar.showMessage("No active task")
        else:
            self._status_bar.showMessage(f"Working on: {task.title}")

    # ══════════════════════════════════════════════════════════════════
    #  KEYBOARD SHORTCUTS
    # ══════════════════════════════════════════════════════════════════

    def _setup_shortcuts(self) -> None:
        """Register Space, R and 1/2/3 as window-wide shortcuts.

        Shortcuts are matched before the focused widget sees the key, so
        a focused list cannot swallow them.  Text fields still claim
        plain keys for typing.
        """
        bindings: list[tuple[str, Callable[[], None]]] = [
            ("Space", self._driver.toggle),
            ("R", lambda: self._driver.reset()),
        ]
        for key, mode in MODE_KEYS:
            bindings.append((key, lambda m=mode: self._driver.switch_mode(m)))

        self._shortcut_actions: dict[str, QAction] = {}
        for key, handler in bindings:
            action = QAction(self)
            action.setShortcut(QKeySequence(key))
            action.setShortcutContext(Qt.ShortcutContext.WindowShortcut)
            action.triggered.connect(
                lambda _checked=False, h=handler: self._run_shortcut(h)
            )
            self.addAction(action)
            self._shortcut_actions[key] = action

    def _run_shortcut(self, handler: Callable[[], None]) -> None:
        if self._typing():
            return
        handler()

    def _typing(self) -> bool:
        """True while a text or number field has keyboard focus."""
        focus = self.focusWidget()
        return isinstance(focus, (QLineEdit, QAbstractSpinBox))

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._settings.window_width = self.width()
        self._settings.window_height = self.height()
        try:
            save_settings(self._settings)
        except OSError as exc:
            logger.warning("Could not save settings: %s", exc)
        self._driver.sync()
        self._tray_icon.hide()
        event.accept()
