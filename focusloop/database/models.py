"""SQLAlchemy ORM models for FocusLoop."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Text
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Task(Base):
    """Something to work on, credited with completed focus sessions."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    notes = Column(Text, nullable=True)
    estimate = Column(Integer, nullable=True)  # pomodoros
    completed_sessions = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<Task id={self.id} title={self.title!r} "
            f"completed={self.completed_sessions}>"
        )


class SessionLog(Base):
    """One finished session (focus or break)."""

    __tablename__ = "session_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.now)
    mode = Column(String(20), nullable=False)  # focus | short_break | long_break
    duration_seconds = Column(Integer, nullable=False, default=0)
    task_id = Column(Integer, nullable=True)
    task_title = Column(String(200), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<SessionLog id={self.id} mode={self.mode} "
            f"duration={self.duration_seconds}s>"
        )


class TimerStateRecord(Base):
    """Single-row table holding the timer state for mid-session restore."""

    __tablename__ = "timer_state"

    id = Column(Integer, primary_key=True, autoincrement=True)
    schema_version = Column(Integer, nullable=False, default=1)
    mode = Column(String(20), nullable=True)
    remaining = Column(Integer, nullable=True)
    end_timestamp = Column(Float, nullable=True)  # epoch seconds, running only
    is_running = Column(Boolean, nullable=False, default=False)
    completed_focus_sessions = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<TimerStateRecord v{self.schema_version} mode={self.mode} "
            f"running={self.is_running}>"
        )
