"""Task list with one optional active task.

Completed focus sessions are credited to whichever task is active when
the session finishes.
"""

from __future__ import annotations

import logging
from datetime import datetime

from .database.db import get_session
from .database.models import Task


logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({"title", "notes", "estimate", "completed_sessions"})


def add_task(
    title: str,
    notes: str | None = None,
    estimate: int | None = None,
) -> Task:
    title = title.strip()
    if not title:
        raise ValueError("Task title cannot be empty")
    now = datetime.now()
    with get_session() as db:
        task = Task(
            title=title,
            notes=notes or None,
            estimate=estimate,
            completed_sessions=0,
            is_active=False,
            created_at=now,
            updated_at=now,
        )
        db.add(task)
        db.flush()
    logger.debug("Added task %d %r", task.id, task.title)
    return task


def update_task(task_id: int, **changes) -> Task | None:
    """Change any of title, notes, estimate, completed_sessions.

    Returns the updated task, or None if there is no such task.
    """
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update task field(s): {', '.join(sorted(unknown))}")
    if "title" in changes:
        changes["title"] = changes["title"].strip()
        if not changes["title"]:
            raise ValueError("Task title cannot be empty")

    with get_session() as db:
        task = db.get(Task, task_id)
        if task is None:
            return None
        for name, value in changes.items():
            setattr(task, name, value)
        task.updated_at = datetime.now()
    return task


def delete_task(task_id: int) -> bool:
    """Remove a task.  Deleting the active task leaves none active."""
    with get_session() as db:
        task = db.get(Task, task_id)
        if task is None:
            return False
        db.delete(task)
    return True


def list_tasks() -> list[Task]:
    """All tasks, oldest first."""
    with get_session() as db:
        return db.query(Task).order_by(Task.created_at, Task.id).all()


def set_active_task(task_id: int | None) -> Task | None:
    """Make ``task_id`` the active task (None clears it)."""
    with get_session() as db:
        db.query(Task).filter(Task.is_active == True).update(  # noqa: E712
            {Task.is_active: False}
        )
        if task_id is None:
            return None
        task = db.get(Task, task_id)
        if task is not None:
            task.is_active = True
    return task


def get_active_task() -> Task | None:
    with get_session() as db:
        return db.query(Task).filter(Task.is_active == True).first()  # noqa: E712


def credit_active_task() -> Task | None:
    """Count one more completed focus session on the active task."""
    with get_session() as db:
        task = db.query(Task).filter(Task.is_active == True).first()  # noqa: E712
        if task is None:
            return None
        task.completed_sessions += 1
        task.updated_at = datetime.now()
    return task
