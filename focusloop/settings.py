"""Application settings with JSON persistence.

Settings are stored at ``<app dir>/settings.json`` where the app
directory is ``$FOCUSLOOP_HOME`` if set, else ``~/.focusloop``.

Usage::

    settings = load_settings()
    settings.long_break_interval = 3
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.engine import Mode, TimerSettings


logger = logging.getLogger(__name__)

APP_DIR = Path(os.environ.get("FOCUSLOOP_HOME", Path.home() / ".focusloop"))
SETTINGS_PATH = APP_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    focus_duration: int = 25 * 60          # seconds
    short_break_duration: int = 5 * 60
    long_break_duration: int = 15 * 60
    long_break_interval: int = 4           # 0 = never a long break
    auto_advance: bool = False

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = False
    sound_volume: int = 70                 # 0-100

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = False

    # ── window ────────────────────────────────────────────────────────
    window_width: int = 760
    window_height: int = 640

    def durations(self) -> dict[Mode, int]:
        return {
            Mode.FOCUS: self.focus_duration,
            Mode.SHORT_BREAK: self.short_break_duration,
            Mode.LONG_BREAK: self.long_break_duration,
        }

    def to_timer_settings(self) -> TimerSettings:
        return TimerSettings(
            durations=self.durations(),
            auto_advance=self.auto_advance,
            long_break_interval=self.long_break_interval,
            sound_enabled=self.sound_enabled,
            notifications_enabled=self.notifications_enabled,
        )


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        # Only use keys that exist in the dataclass
        valid_keys = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Could not read %s, using defaults: %s", SETTINGS_PATH, exc)
        return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
