"""Document controller owning the Project of one open document.

``ProjectDocument`` is the only object that reads or writes project files.
Presentation code (QML) talks to it through slots; each slot wraps one of the
commands in :mod:`projectmanager.commands` and turns bad indices or values
into a logged no-op plus an ``errorOccurred`` signal.
"""

from __future__ import annotations

import logging
import os
import re
import stat
import tempfile
from typing import Any, Callable, Iterable, List, Optional

from PySide6.QtCore import Property, QObject, QSettings, QUrl, Signal, Slot

from . import commands
from .codec import decode_project, encode_project
from .constants import (
    FILE_EXTENSION,
    MAX_RECENT_DOCUMENTS,
    RECENT_DOCUMENTS_KEY,
    SETTINGS_APPLICATION,
    SETTINGS_ORGANIZATION,
)
from .errors import CorruptDocument, DocumentError, IndexOutOfRange, ValidationError
from .types import Project, default_project

logger = logging.getLogger(__name__)


def local_path(location: str) -> str:
    """Return the filesystem path named by a plain path or a ``file:`` URL."""
    if location.startswith("file:"):
        url = QUrl(location)
        location = url.toLocalFile() if url.isLocalFile() else url.path()
    # "/C:/dir/plan.pmproject" from a Windows file URL
    if os.name == "nt" and re.match(r"/[A-Za-z]:", location):
        location = location[1:]
    return location


def _new_file_mode() -> int:
    """Permissions a freshly created file gets under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _to_indices(values: Iterable[Any]) -> List[int]:
    """Convert QML numbers (which may arrive as floats) into list indices."""
    indices = []
    for value in values:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        indices.append(value)
    return indices


class ProjectDocument(QObject):
    """Owns one Project and mediates file I/O and edits for it."""

    projectChanged = Signal()  # Emitted after every successful edit or load
    modifiedChanged = Signal()
    filePathChanged = Signal()
    saveCompleted = Signal(str)  # Emitted with file path after successful save
    loadCompleted = Signal(str)  # Emitted with file path after successful load
    errorOccurred = Signal(str)  # Emitted with error message on failure
    recentDocumentsChanged = Signal()

    def __init__(
        self,
        project: Optional[Project] = None,
        settings: Optional[QSettings] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._project: Optional[Project] = project if project is not None else default_project()
        self._file_path: str = ""
        self._modified: bool = False
        self._settings = settings if settings is not None else QSettings(
            SETTINGS_ORGANIZATION, SETTINGS_APPLICATION
        )
        self._recent_documents: List[str] = self._read_recent()

    # Project access

    @property
    def project(self) -> Project:
        if self._project is None:
            raise DocumentError("Document is closed")
        return self._project

    @property
    def file_path(self) -> str:
        return self._file_path

    @property
    def is_modified(self) -> bool:
        return self._modified

    def _set_modified(self, modified: bool) -> None:
        if self._modified != modified:
            self._modified = modified
            self.modifiedChanged.emit()

    def _set_file_path(self, file_path: str) -> None:
        if self._file_path != file_path:
            self._file_path = file_path
            self.filePathChanged.emit()

    # Bytes

    def _replace_project(self, project: Project, file_path: str) -> None:
        self._project = project
        self._set_file_path(file_path)
        self._set_modified(False)
        self.projectChanged.emit()

    def load_bytes(self, data: Optional[bytes]) -> Project:
        """Replace the current project with one decoded from ``data``.

        The loaded project is not tied to any file, so ``filePath`` is
        cleared and ``saveCurrentProject`` needs a new path first.

        Raises:
            CorruptDocument: If ``data`` is not a valid project. The current
                project and path are left untouched.
        """
        project = decode_project(data)
        self._replace_project(project, "")
        return project

    def to_bytes(self) -> bytes:
        """Serialize the current project."""
        return encode_project(self.project)

    # Files

    def open_file(self, file_path: str) -> Project:
        """Load a project file and make it the current document.

        Raises:
            DocumentError: If the file cannot be read.
            CorruptDocument: If its contents are not a valid project.
        """
        file_path = local_path(file_path)
        if not file_path:
            raise DocumentError("No file path specified")
        if not os.path.exists(file_path):
            raise DocumentError(f"File not found: {file_path}")

        try:
            with open(file_path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise DocumentError(f"Failed to load project: {e}") from e

        try:
            project = decode_project(data)
        except CorruptDocument as e:
            raise CorruptDocument(f"Corrupted project file {file_path}: {e}") from e

        self._replace_project(project, file_path)
        self._remember(file_path)
        self.loadCompleted.emit(file_path)
        logger.info("Project loaded from: %s", file_path)
        return project

    def save_file(self, file_path: Optional[str] = None) -> str:
        """Write the current project to ``file_path`` (or the current path).

        The file is written to a temporary sibling first and then moved into
        place, so an interrupted save never leaves a truncated document. An
        existing file keeps its permissions; a new one gets the umask default.

        Returns:
            The path actually written, with the extension appended if missing.

        Raises:
            DocumentError: If no path is known or the file cannot be written.
        """
        file_path = local_path(file_path or self._file_path)
        if not file_path:
            raise DocumentError("No file path specified")

        if not file_path.endswith(FILE_EXTENSION):
            file_path += FILE_EXTENSION

        data = self.to_bytes()
        directory = os.path.dirname(os.path.abspath(file_path))
        tmp_path = ""
        try:
            try:
                mode = stat.S_IMODE(os.stat(file_path).st_mode)
            except FileNotFoundError:
                mode = _new_file_mode()
            with tempfile.NamedTemporaryFile(
                "wb", dir=directory, prefix=".", suffix=".tmp", delete=False
            ) as f:
                tmp_path = f.name
                f.write(data)
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, file_path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise DocumentError(f"Failed to save project: {e}") from e

        self._set_file_path(file_path)
        self._set_modified(False)
        self._remember(file_path)
        self.saveCompleted.emit(file_path)
        logger.info("Project saved to: %s", file_path)
        return file_path

    def close(self) -> None:
        """Release the project; the document cannot be edited afterwards."""
        self._project = None
        self._set_file_path("")
        self._set_modified(False)
        self.projectChanged.emit()

    # Recent documents

    def _read_recent(self) -> List[str]:
        stored = self._settings.value(RECENT_DOCUMENTS_KEY)
        # An INI store hands a one-entry list back as a bare string
        if isinstance(stored, str):
            stored = [stored]
        if not isinstance(stored, (list, tuple)):
            return []
        existing = [path for path in stored if isinstance(path, str) and os.path.isfile(path)]
        return existing[:MAX_RECENT_DOCUMENTS]

    def _write_recent(self) -> None:
        self._settings.setValue(RECENT_DOCUMENTS_KEY, self._recent_documents)
        self._settings.sync()
        self.recentDocumentsChanged.emit()

    def _remember(self, file_path: str) -> None:
        """Move ``file_path`` to the front of the recent documents."""
        others = [path for path in self._recent_documents if path != file_path]
        self._recent_documents = ([file_path] + others)[:MAX_RECENT_DOCUMENTS]
        self._write_recent()

    @Property("QVariantList", notify=recentDocumentsChanged)
    def recentDocuments(self) -> List[str]:
        return self._recent_documents

    @Slot()
    def clearRecentDocuments(self) -> None:
        self._recent_documents = []
        self._write_recent()

    # Properties for QML

    @Property(bool, notify=modifiedChanged)
    def modified(self) -> bool:
        return self._modified

    @Property(str, notify=filePathChanged)
    def filePath(self) -> str:
        return self._file_path

    @Property(bool, notify=projectChanged)
    def showDoneTasks(self) -> bool:
        return self._project is not None and self._project.settings.show_done_tasks

    @Property(int, notify=projectChanged)
    def taskCount(self) -> int:
        return len(self._project.tasks) if self._project is not None else 0

    @Property(str, notify=projectChanged)
    def projectName(self) -> str:
        return self._project.project_info.name if self._project is not None else ""

    # File slots

    def _report(self, message: str) -> None:
        logger.warning(message)
        self.errorOccurred.emit(message)

    @Slot()
    def newProject(self) -> None:
        """Start a new, unsaved document."""
        self._replace_project(default_project(), "")

    @Slot(str, result=bool)
    def openProject(self, file_path: str) -> bool:
        try:
            self.open_file(file_path)
        except DocumentError as e:
            self._report(str(e))
            return False
        return True

    @Slot(str, result=bool)
    def saveProject(self, file_path: str) -> bool:
        try:
            self.save_file(file_path)
        except DocumentError as e:
            self._report(str(e))
            return False
        return True

    @Slot(result=bool)
    def saveCurrentProject(self) -> bool:
        if not self._file_path:
            self._report("No current project file selected")
            return False
        return self.saveProject(self._file_path)

    # Edit slots

    def _apply(self, description: str, command: Callable[..., Any], *args: Any) -> Any:
        """Run an edit command; reject bad input as a logged no-op."""
        try:
            result = command(self.project, *args)
        except (IndexOutOfRange, ValidationError) as e:
            self._report(f"{description} failed: {e}")
            return None
        except DocumentError as e:
            self._report(str(e))
            return None
        self._set_modified(True)
        self.projectChanged.emit()
        return result

    @Slot(result=int)
    def addTask(self) -> int:
        """Append a blank task and return its index (-1 if closed)."""
        index = self._apply("Add task", commands.add_task)
        return -1 if index is None else index

    @Slot(int)
    def deleteTask(self, index: int) -> None:
        self._apply("Delete task", commands.delete_tasks, [index])

    @Slot(list)
    def deleteTasks(self, indices: List[Any]) -> None:
        self._apply("Delete tasks", commands.delete_tasks, _to_indices(indices))

    @Slot(int)
    def toggleTaskStatus(self, index: int) -> None:
        self._apply("Toggle task", commands.toggle_task_status, index)

    @Slot(int, str)
    def setTaskName(self, index: int, name: str) -> None:
        self._apply("Rename task", commands.set_task_field, index, "name", name)

    @Slot(int, str)
    def setTaskNotes(self, index: int, notes: str) -> None:
        self._apply("Edit task notes", commands.set_task_field, index, "notes", notes)

    @Slot(int, bool)
    def setTaskHasDueDate(self, index: int, has_due_date: bool) -> None:
        self._apply("Edit task due flag", commands.set_task_field, index, "hasDueDate", has_due_date)

    @Slot(int, str)
    def setTaskDueDate(self, index: int, due_date: str) -> None:
        """Set a task's due date from an ISO-8601 string (empty clears it)."""
        self._apply("Edit task due date", commands.set_task_field, index, "dueDate", due_date or None)

    @Slot(int)
    def clearTaskDueDate(self, index: int) -> None:
        self._apply("Clear task due date", commands.set_task_field, index, "dueDate", None)

    @Slot(result=bool)
    def toggleShowDoneTasks(self) -> bool:
        shown = self._apply("Toggle done tasks", commands.toggle_show_done_tasks)
        return bool(shown)

    @Slot(str, str, result=int)
    def addBookmark(self, name: str, url: str) -> int:
        index = self._apply("Add bookmark", commands.add_bookmark, name, url)
        return -1 if index is None else index

    @Slot(int)
    def deleteBookmark(self, index: int) -> None:
        self._apply("Delete bookmark", commands.delete_bookmarks, [index])

    @Slot(int, str, str)
    def setBookmarkField(self, index: int, field: str, value: str) -> None:
        self._apply("Edit bookmark", commands.set_bookmark_field, index, field, value)

    @Slot(str, result=int)
    def addQuickNote(self, text: str) -> int:
        index = self._apply("Add quick note", commands.add_quick_note, text)
        return -1 if index is None else index

    @Slot(int)
    def deleteQuickNote(self, index: int) -> None:
        self._apply("Delete quick note", commands.delete_quick_notes, [index])

    @Slot(int, str)
    def setQuickNoteText(self, index: int, text: str) -> None:
        self._apply("Edit quick note", commands.set_quick_note_text, index, text)

    @Slot(str, str)
    def setProjectInfo(self, name: str, description: str) -> None:
        self._apply("Edit project info", commands.set_project_info, name, description)

    @Slot(str)
    def setSelectedView(self, view: str) -> None:
        self._apply("Select view", commands.set_selected_view, view or None)
