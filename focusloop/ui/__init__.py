"""UI package."""

from .timer_widget import TimerWidget
from .tasks_panel import TasksPanel
from .session_log_panel import SessionLogPanel
from .settings_dialog import SettingsDialog

__all__ = [
    "TimerWidget",
    "TasksPanel",
    "SessionLogPanel",
    "SettingsDialog",
]
