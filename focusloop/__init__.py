"""FocusLoop: a Pomodoro timer with tasks and a session log."""

__version__ = "0.1.0"
