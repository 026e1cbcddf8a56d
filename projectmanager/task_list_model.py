"""Qt list model exposing the filtered task view to QML."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import (
    QAbstractListModel,
    QDateTime,
    QLocale,
    QModelIndex,
    Qt,
    Signal,
    Slot,
    Property,
)

from .codec import format_timestamp
from .commands import visible_tasks
from .document import ProjectDocument
from .errors import DocumentError
from .types import Task


class TaskListModel(QAbstractListModel):
    """Rows are the tasks currently visible under the document's settings.

    The rows are recomputed from scratch whenever the document changes, so a
    row number is only meaningful until the next ``modelReset``. Use
    ``taskIndexAt`` to translate a row into the index expected by the
    document's edit slots.
    """

    NameRole = Qt.UserRole + 1
    NotesRole = Qt.UserRole + 2
    DoneRole = Qt.UserRole + 3
    StatusRole = Qt.UserRole + 4
    HasDueDateRole = Qt.UserRole + 5
    DueDateRole = Qt.UserRole + 6
    DueDateDisplayRole = Qt.UserRole + 7
    TaskIndexRole = Qt.UserRole + 8

    countChanged = Signal()

    def __init__(self, document: ProjectDocument, parent=None):
        super().__init__(parent)
        self._document = document
        self._rows: List[Tuple[int, Task]] = self._compute_rows()
        self._document.projectChanged.connect(self.refresh)

    def _compute_rows(self) -> List[Tuple[int, Task]]:
        try:
            return visible_tasks(self._document.project)
        except DocumentError:
            return []

    @Slot()
    def refresh(self) -> None:
        """Recompute the visible rows from the document."""
        self.beginResetModel()
        self._rows = self._compute_rows()
        self.endResetModel()
        self.countChanged.emit()

    def rowCount(self, parent: Optional[QModelIndex] = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._rows)

    @Property(int, notify=countChanged)
    def count(self) -> int:
        return len(self._rows)

    @Slot(int, result=int)
    def taskIndexAt(self, row: int) -> int:
        """Map a view row to its index in the project's task list."""
        if 0 <= row < len(self._rows):
            return self._rows[row][0]
        return -1

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._rows)):
            return None

        task_index, task = self._rows[index.row()]
        if role in (self.NameRole, Qt.DisplayRole):
            return task.name
        if role == self.NotesRole:
            return task.notes
        if role == self.DoneRole:
            return task.done
        if role == self.StatusRole:
            return task.status.value
        if role == self.HasDueDateRole:
            return task.has_due_date
        if role == self.DueDateRole:
            return format_timestamp(task.due_date) if task.due_date is not None else ""
        if role == self.DueDateDisplayRole:
            return self._format_due_date(task)
        if role == self.TaskIndexRole:
            return task_index
        return None

    def _format_due_date(self, task: Task) -> str:
        due = task.effective_due_date()
        if due is None:
            return ""
        stamp = QDateTime.fromSecsSinceEpoch(int(due.timestamp()))
        return QLocale().toString(stamp.toLocalTime(), QLocale.FormatType.ShortFormat)

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return {
            self.NameRole: b"name",
            self.NotesRole: b"notes",
            self.DoneRole: b"done",
            self.StatusRole: b"status",
            self.HasDueDateRole: b"hasDueDate",
            self.DueDateRole: b"dueDate",
            self.DueDateDisplayRole: b"dueDateDisplay",
            self.TaskIndexRole: b"taskIndex",
        }
