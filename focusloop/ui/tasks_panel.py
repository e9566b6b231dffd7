"""Tasks panel: add, edit, remove and pick the task focus sessions count toward."""

from __future__ import annotations

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel, QLineEdit,
    QPlainTextEdit, QSpinBox, QPushButton, QListWidget, QListWidgetItem,
    QDialog, QDialogButtonBox,
)

from .. import tasks as task_store
from ..database.models import Task


def task_caption(task: Task) -> str:
    """``"Write report  (2/4)"`` or ``"Write report  (2)"`` without estimate."""
    done = task.completed_sessions or 0
    if task.estimate:
        return f"{task.title}  ({done}/{task.estimate})"
    return f"{task.title}  ({done})"


class TaskEditDialog(QDialog):
    """Edit a task's title, notes and estimate."""

    def __init__(self, task: Task, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Edit Task")
        self.setMinimumWidth(360)
        self.setModal(True)

        form = QFormLayout(self)
        self._title_input = QLineEdit(task.title, self)
        self._title_input.setMaxLength(200)
        form.addRow("Title:", self._title_input)

        self._notes_input = QPlainTextEdit(task.notes or "", self)
        self._notes_input.setFixedHeight(80)
        form.addRow("Notes:", self._notes_input)

        self._estimate_spin = QSpinBox(self)
        self._estimate_spin.setRange(0, 20)
        self._estimate_spin.setSpecialValueText("None")
        self._estimate_spin.setValue(task.estimate or 0)
        form.addRow("Estimate:", self._estimate_spin)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save
            | QDialogButtonBox.StandardButton.Cancel,
            self,
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        form.addRow(buttons)

    def accept(self) -> None:  # type: ignore[override]
        # a task always keeps a title
        if not self._title_input.text().strip():
            self._title_input.setFocus()
            return
        super().accept()

    def values(self) -> dict:
        """Keyword arguments for :func:`focusloop.tasks.update_task`."""
        return {
            "title": self._title_input.text().strip(),
            "notes": self._notes_input.toPlainText().strip() or None,
            "estimate": self._estimate_spin.value() or None,
        }


class TasksPanel(QWidget):
    """Task list backed by :mod:`focusloop.tasks`.

    The checked row is the active task.
    """

    active_task_changed = pyqtSignal(object)  # task id or None

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._refreshing = False
        self._build_ui()
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        header = QLabel("Tasks")
        header.setObjectName("sectionHeader")
        layout.addWidget(header)

        add_row = QHBoxLayout()
        self._title_input = QLineEdit(self)
        self._title_input.setPlaceholderText("Add a task…")
        self._title_input.setMaxLength(200)
        self._title_input.returnPressed.connect(self._on_add)

        self._estimate_spin = QSpinBox(self)
        self._estimate_spin.setRange(0, 20)
        self._estimate_spin.setSpecialValueText("est.")
        self._estimate_spin.setToolTip("Estimated focus sessions")

        self._add_btn = QPushButton("Add", self)
        self._add_btn.clicked.connect(self._on_add)

        add_row.addWidget(self._title_input, 1)
        add_row.addWidget(self._estimate_spin)
        add_row.addWidget(self._add_btn)
        layout.addLayout(add_row)

        self._notes_input = QLineEdit(self)
        self._notes_input.setPlaceholderText("Notes (optional)")
        self._notes_input.setMaxLength(500)
        self._notes_input.returnPressed.connect(self._on_add)
        layout.addWidget(self._notes_input)

        self._list = QListWidget(self)
        self._list.itemChanged.connect(self._on_item_changed)
        self._list.itemDoubleClicked.connect(self._edit_item)
        layout.addWidget(self._list, 1)

        button_row = QHBoxLayout()
        button_row.addStretch(1)
        self._edit_btn = QPushButton("Edit…", self)
        self._edit_btn.clicked.connect(self._on_edit)
        button_row.addWidget(self._edit_btn)
        self._delete_btn = QPushButton("Delete selected", self)
        self._delete_btn.clicked.connect(self._on_delete)
        button_row.addWidget(self._delete_btn)
        layout.addLayout(button_row)

    # ── refresh ───────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Reload the list from the database."""
        self._refreshing = True
        try:
            self._list.clear()
            for task in task_store.list_tasks():
                item = QListWidgetItem(task_caption(task))
                item.setData(Qt.ItemDataRole.UserRole, task.id)
                item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                item.setCheckState(
                    Qt.CheckState.Checked if task.is_active else Qt.CheckState.Unchecked
                )
                item.setToolTip(task.notes or "")
                self._list.addItem(item)
        finally:
            self._refreshing = False

    def task_ids(self) -> list[int]:
        return [
            self._list.item(i).data(Qt.ItemDataRole.UserRole)
            for i in range(self._list.count())
        ]

    # ── slots ─────────────────────────────────────────────────────────

    def _on_add(self) -> None:
        title = self._title_input.text().strip()
        if not title:
            return
        estimate = self._estimate_spin.value() or None
        notes = self._notes_input.text().strip() or None
        task_store.add_task(title, notes=notes, estimate=estimate)
        self._title_input.clear()
        self._notes_input.clear()
        self._estimate_spin.setValue(0)
        self.refresh()

    def _on_edit(self) -> None:
        item = self._list.currentItem()
        if item is not None:
            self._edit_item(item)

    def _edit_item(self, item: QListWidgetItem) -> None:
        task_id = item.data(Qt.ItemDataRole.UserRole)
        task = next(
            (t for t in task_store.list_tasks() if t.id == task_id), None
        )
        if task is None:
            return
        dialog = TaskEditDialog(task, self)
        if dialog.exec():
            task_store.update_task(task_id, **dialog.values())
            self.refresh()
            if task.is_active:
                self.active_task_changed.emit(task_id)

    def _on_delete(self) -> None:
        item = self._list.currentItem()
        if item is None:
            return
        was_active = item.checkState() == Qt.CheckState.Checked
        task_store.delete_task(item.data(Qt.ItemDataRole.UserRole))
        self.refresh()
        if was_active:
            self.active_task_changed.emit(None)

    def _on_item_changed(self, item: QListWidgetItem) -> None:
        if self._refreshing:
            return
        task_id = item.data(Qt.ItemDataRole.UserRole)
        if item.checkState() == Qt.CheckState.Checked:
            task_store.set_active_task(task_id)
        else:
            task_id = None
            task_store.set_active_task(None)
        # only one row may stay checked
        self._refreshing = True
        try:
            for i in range(self._list.count()):
                other = self._list.item(i)
                if other.data(Qt.ItemDataRole.UserRole) != task_id:
                    other.setCheckState(Qt.CheckState.Unchecked)
        finally:
            self._refreshing = False
        self.active_task_changed.emit(task_id)
