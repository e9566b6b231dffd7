"""Shared pytest fixtures for FocusLoop tests."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from focusloop.database.db import configure_engine, init_db
from focusloop.timer.engine import Mode, TimerEngine, TimerSettings

from helpers import FakeClock


SHORT_DURATIONS = {Mode.FOCUS: 5, Mode.SHORT_BREAK: 2, Mode.LONG_BREAK: 3}


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture(autouse=True)
def app_dir(tmp_path, monkeypatch):
    """Keep settings and sound files out of the real app directory."""
    monkeypatch.setattr("focusloop.settings.APP_DIR", tmp_path)
    monkeypatch.setattr("focusloop.settings.SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr("focusloop.audio.sounds.SOUNDS_DIR", tmp_path / "sounds")
    yield tmp_path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    """Engine with tiny durations, auto-advance OFF, long break every 2."""
    settings = TimerSettings(
        durations=dict(SHORT_DURATIONS),
        auto_advance=False,
        long_break_interval=2,
    )
    return TimerEngine(settings, clock=clock)


@pytest.fixture
def engine_auto(clock):
    """Same as ``engine`` but with auto-advance ON."""
    settings = TimerSettings(
        durations=dict(SHORT_DURATIONS),
        auto_advance=True,
        long_break_interval=2,
    )
    return TimerEngine(settings, clock=clock)
