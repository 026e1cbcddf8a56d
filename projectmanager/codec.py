"""JSON encoding of project documents.

The on-disk format is a single UTF-8 JSON object using the camelCase keys of
earlier releases (``state``, ``settings``, ``projectInfo``, ``tasks``,
``bookmarks``, ``quickNotes``). Keys this version does not know about are
kept in each record's ``extra`` dict and written back unchanged.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .errors import CorruptDocument, ValidationError
from .types import (
    Bookmark,
    Project,
    ProjectInfo,
    QuickNote,
    SettingsModel,
    StateModel,
    Task,
    TaskStatus,
)

# Numeric dates are seconds since this instant (the default date encoding of earlier releases).
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)

_PROJECT_KEYS = ("state", "settings", "projectInfo", "tasks", "bookmarks", "quickNotes")
_TASK_KEYS = ("name", "notes", "status", "hasDueDate", "dueDate")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp into an aware datetime.

    Accepts ISO-8601 strings (naive values are taken as UTC), numbers of
    seconds since 2001-01-01 UTC, datetimes and None.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        try:
            return REFERENCE_DATE + timedelta(seconds=value)
        except OverflowError as exc:
            raise ValueError(f"Timestamp out of range: {value!r}") from exc
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _with_extra(known: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(known)
    for key, value in extra.items():
        result.setdefault(key, value)
    return result


def _extra(data: Dict[str, Any], known_keys) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known_keys}


def task_to_dict(task: Task) -> Dict[str, Any]:
    task_dict: Dict[str, Any] = {
        "name": task.name,
        "notes": task.notes,
        "status": task.status.value,
        "hasDueDate": task.has_due_date,
    }
    if task.due_date is not None:
        task_dict["dueDate"] = format_timestamp(task.due_date)
    return _with_extra(task_dict, task.extra)


def project_to_dict(project: Project) -> Dict[str, Any]:
    """Serialize a project to a JSON-compatible dictionary."""
    state = {}
    if project.state.selected_view is not None:
        state["selectedView"] = project.state.selected_view

    known = {
        "state": _with_extra(state, project.state.extra),
        "settings": _with_extra(
            {"showDoneTasks": project.settings.show_done_tasks},
            project.settings.extra,
        ),
        "projectInfo": _with_extra(
            {
                "name": project.project_info.name,
                "description": project.project_info.description,
            },
            project.project_info.extra,
        ),
        "tasks": [task_to_dict(task) for task in project.tasks],
        "bookmarks": [
            _with_extra({"name": bookmark.name, "url": bookmark.url}, bookmark.extra)
            for bookmark in project.bookmarks
        ],
        "quickNotes": [
            _with_extra({"text": note.text}, note.extra)
            for note in project.quick_notes
        ],
    }
    return _with_extra(known, project.extra)


def _dump(payload: Any) -> bytes:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def encode_project(project: Project) -> bytes:
    """Encode a project as UTF-8 JSON bytes.

    Raises:
        ValidationError: If some text in the project is not valid Unicode
            (a lone surrogate put there without going through the commands).
    """
    try:
        return _dump(project_to_dict(project))
    except UnicodeEncodeError as exc:
        raise ValidationError(f"Project contains text that cannot be saved: {exc}") from exc


class _Reader:
    """Typed access to a decoded JSON object, raising CorruptDocument on mismatch."""

    def __init__(self, data: Any, where: str) -> None:
        if not isinstance(data, dict):
            raise CorruptDocument(f"{where} must be an object, got {type(data).__name__}")
        self.data = data
        self.where = where

    def _get(self, key: str, required: bool) -> Any:
        if key not in self.data:
            if required:
                raise CorruptDocument(f"{self.where} is missing required field '{key}'")
            return None
        return self.data[key]

    def string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        required = default is None
        value = self._get(key, required=required)
        if value is None and not required:
            return default
        if not isinstance(value, str):
            raise CorruptDocument(f"{self.where}.{key} must be a string")
        return value

    def optional_string(self, key: str) -> Optional[str]:
        value = self._get(key, required=False)
        if value is not None and not isinstance(value, str):
            raise CorruptDocument(f"{self.where}.{key} must be a string")
        return value

    def boolean(self, key: str) -> bool:
        value = self._get(key, required=True)
        if not isinstance(value, bool):
            raise CorruptDocument(f"{self.where}.{key} must be a boolean")
        return value

    def array(self, key: str, required: bool = True) -> List[Any]:
        value = self._get(key, required=required)
        if value is None:
            if required:
                raise CorruptDocument(f"{self.where}.{key} must be a list")
            return []
        if not isinstance(value, list):
            raise CorruptDocument(f"{self.where}.{key} must be a list")
        return value

    def obj(self, key: str) -> "_Reader":
        return _Reader(self._get(key, required=True), f"{self.where}.{key}")

    def extra(self, known_keys) -> Dict[str, Any]:
        return _extra(self.data, known_keys)


def task_from_dict(data: Any, where: str = "task") -> Task:
    reader = _Reader(data, where)
    status_value = reader.string("status")
    try:
        status = TaskStatus(status_value)
    except ValueError as exc:
        raise CorruptDocument(f"{where}.status has unknown value {status_value!r}") from exc

    try:
        due_date = parse_timestamp(reader.data.get("dueDate"))
    except (TypeError, ValueError) as exc:
        raise CorruptDocument(f"{where}.dueDate is not a valid timestamp: {exc}") from exc

    return Task(
        name=reader.string("name"),
        notes=reader.string("notes"),
        status=status,
        has_due_date=reader.boolean("hasDueDate"),
        due_date=due_date,
        extra=reader.extra(_TASK_KEYS),
    )


def project_from_dict(data: Any) -> Project:
    """Build a Project from a decoded JSON object.

    Raises:
        CorruptDocument: If a required field is missing or has the wrong type.
    """
    root = _Reader(data, "project")

    state = root.obj("state")
    settings = root.obj("settings")
    info = root.obj("projectInfo")
    tasks_data = root.array("tasks")

    tasks = [task_from_dict(item, f"tasks[{i}]") for i, item in enumerate(tasks_data)]

    bookmarks = []
    for i, item in enumerate(root.array("bookmarks", required=False)):
        reader = _Reader(item, f"bookmarks[{i}]")
        bookmarks.append(Bookmark(
            name=reader.string("name", ""),
            url=reader.string("url", ""),
            extra=reader.extra(("name", "url")),
        ))

    quick_notes = []
    for i, item in enumerate(root.array("quickNotes", required=False)):
        reader = _Reader(item, f"quickNotes[{i}]")
        quick_notes.append(QuickNote(
            text=reader.string("text", ""),
            extra=reader.extra(("text",)),
        ))

    return Project(
        state=StateModel(
            selected_view=state.optional_string("selectedView"),
            extra=state.extra(("selectedView",)),
        ),
        settings=SettingsModel(
            show_done_tasks=settings.boolean("showDoneTasks"),
            extra=settings.extra(("showDoneTasks",)),
        ),
        project_info=ProjectInfo(
            name=info.string("name", ""),
            description=info.string("description", ""),
            extra=info.extra(("name", "description")),
        ),
        tasks=tasks,
        bookmarks=bookmarks,
        quick_notes=quick_notes,
        extra=root.extra(_PROJECT_KEYS),
    )


def validate_project(project: Project) -> None:
    """Check that every task's due date agrees with its has_due_date flag.

    Raises:
        ValidationError: On the first inconsistent task.
    """
    for index, task in enumerate(project.tasks):
        if task.has_due_date and task.due_date is None:
            raise ValidationError(f"Task {index} is marked as due but has no due date")
        if not task.has_due_date and task.due_date is not None:
            raise ValidationError(f"Task {index} has a due date but is not marked as due")


def decode_project(data: Optional[bytes], strict: bool = False) -> Project:
    """Decode document bytes into a new Project.

    Args:
        data: Raw file contents.
        strict: Also reject tasks whose due-date fields disagree.

    Raises:
        CorruptDocument: If the bytes are absent, empty or malformed.
        ValidationError: If ``strict`` is set and validation fails.
    """
    if not data:
        raise CorruptDocument("Document is empty")

    try:
        payload = json.loads(bytes(data).decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise CorruptDocument(f"Document is not valid UTF-8: {exc}") from exc
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError, oversized integer literals and runaway nesting
        raise CorruptDocument(f"Invalid project file format: {exc}") from exc

    # "\ud800" escapes decode to lone surrogates, which could never be saved again
    try:
        _dump(payload)
    except UnicodeEncodeError as exc:
        raise CorruptDocument(f"Document contains invalid text: {exc}") from exc

    project = project_from_dict(payload)
    if strict:
        validate_project(project)
    return project
