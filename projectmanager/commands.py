"""Editing commands for a Project.

Every command mutates the given project in place and either completes fully
or raises before touching it. Elements are addressed by their current
position; positions held by callers are stale after any insert or delete.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .codec import parse_timestamp
from .constants import BOOKMARK_FIELDS, TASK_FIELDS
from .errors import IndexOutOfRange, ValidationError
from .types import Bookmark, Project, QuickNote, Task, TaskStatus


def _check_index(items: Sequence[Any], index: int, collection: str) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValidationError(f"Index must be an integer, got {index!r}")
    if index < 0 or index >= len(items):
        raise IndexOutOfRange(index, len(items), collection)


def _check_text(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{what} must be a string")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValidationError(f"{what} is not valid text: {exc.reason}") from exc
    return value


def _delete_indices(items: List[Any], indices: Iterable[int], collection: str) -> int:
    unique = set(indices)
    for index in unique:
        _check_index(items, index, collection)
    # Remove in reverse order to maintain indices
    for index in sorted(unique, reverse=True):
        del items[index]
    return len(unique)


# Tasks

def add_task(project: Project) -> int:
    """Append a blank task and return its index."""
    project.tasks.append(Task())
    return len(project.tasks) - 1


def delete_tasks(project: Project, indices: Iterable[int]) -> int:
    """Remove the tasks at ``indices`` (positions before deletion).

    Raises:
        IndexOutOfRange: If any index is invalid; nothing is removed.
    """
    return _delete_indices(project.tasks, indices, "tasks")


def toggle_task_status(project: Project, index: int) -> TaskStatus:
    """Flip a task between todo and done and return the new status."""
    _check_index(project.tasks, index, "tasks")
    task = project.tasks[index]
    task.status = task.status.toggled()
    return task.status


def _coerce_task_value(attribute: str, value: Any) -> Any:
    if attribute in ("name", "notes"):
        return _check_text(value, f"Task {attribute}")
    if attribute == "has_due_date":
        if not isinstance(value, bool):
            raise ValidationError("Task hasDueDate must be a boolean")
        return value
    if value is None:
        return None
    if not isinstance(value, (str, datetime)):
        raise ValidationError("Task dueDate must be a datetime, an ISO-8601 string or None")
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid due date {value!r}: {exc}") from exc


def set_task_field(project: Project, index: int, field: str, value: Any) -> None:
    """Set ``name``, ``notes``, ``hasDueDate`` or ``dueDate`` on a task.

    Snake-case attribute names (``has_due_date``, ``due_date``) are accepted
    as well.

    Raises:
        IndexOutOfRange: If ``index`` is invalid.
        ValidationError: If the field is unknown or the value has the wrong type.
    """
    _check_index(project.tasks, index, "tasks")
    attribute = TASK_FIELDS.get(field)
    if attribute is None and field in TASK_FIELDS.values():
        attribute = field
    if attribute is None:
        raise ValidationError(f"Unknown task field: {field!r}")
    setattr(project.tasks[index], attribute, _coerce_task_value(attribute, value))


def visible_tasks(project: Project) -> List[Tuple[int, Task]]:
    """Return ``(index, task)`` pairs for the tasks shown in listings.

    Done tasks are included only when ``settings.show_done_tasks`` is set.
    """
    show_done = project.settings.show_done_tasks
    return [
        (index, task)
        for index, task in enumerate(project.tasks)
        if task.status != TaskStatus.DONE or (show_done and task.status == TaskStatus.DONE)
    ]


def toggle_show_done_tasks(project: Project) -> bool:
    project.settings.show_done_tasks = not project.settings.show_done_tasks
    return project.settings.show_done_tasks


# Bookmarks

def add_bookmark(project: Project, name: str = "", url: str = "") -> int:
    _check_text(name, "Bookmark name")
    _check_text(url, "Bookmark url")
    project.bookmarks.append(Bookmark(name=name, url=url))
    return len(project.bookmarks) - 1


def delete_bookmarks(project: Project, indices: Iterable[int]) -> int:
    return _delete_indices(project.bookmarks, indices, "bookmarks")


def set_bookmark_field(project: Project, index: int, field: str, value: Any) -> None:
    _check_index(project.bookmarks, index, "bookmarks")
    if field not in BOOKMARK_FIELDS:
        raise ValidationError(f"Unknown bookmark field: {field!r}")
    setattr(project.bookmarks[index], field, _check_text(value, f"Bookmark {field}"))


# Quick notes

def add_quick_note(project: Project, text: str = "") -> int:
    _check_text(text, "Quick note text")
    project.quick_notes.append(QuickNote(text=text))
    return len(project.quick_notes) - 1


def delete_quick_notes(project: Project, indices: Iterable[int]) -> int:
    return _delete_indices(project.quick_notes, indices, "quickNotes")


def set_quick_note_text(project: Project, index: int, text: str) -> None:
    _check_index(project.quick_notes, index, "quickNotes")
    _check_text(text, "Quick note text")
    project.quick_notes[index].text = text


# Project metadata

def set_project_info(
    project: Project,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> None:
    """Update the project name and/or description."""
    for label, value in (("name", name), ("description", description)):
        if value is not None:
            _check_text(value, f"Project {label}")
    if name is not None:
        project.project_info.name = name
    if description is not None:
        project.project_info.description = description


def set_selected_view(project: Project, view: Optional[str]) -> None:
    if view is not None:
        _check_text(view, "Selected view")
    project.state.selected_view = view
