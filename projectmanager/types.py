"""Data types for project documents.

A project document holds exactly one Project. Tasks are addressed by their
position in ``Project.tasks``; nothing else references them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import DEFAULT_PROJECT_NAME


class TaskStatus(Enum):
    """Completion state of a task."""

    TODO = "todo"
    DONE = "done"

    def toggled(self) -> "TaskStatus":
        return TaskStatus.TODO if self is TaskStatus.DONE else TaskStatus.DONE


@dataclass
class Task:
    """A single to-do item."""

    name: str = ""
    notes: str = ""
    status: TaskStatus = TaskStatus.TODO
    has_due_date: bool = False
    due_date: Optional[datetime] = None  # only shown when has_due_date is set
    extra: Dict[str, Any] = field(default_factory=dict)

    def __setattr__(self, name: str, value: Any) -> None:
        # Due dates are always aware; naive values are taken as UTC, as on load
        if name == "due_date" and isinstance(value, datetime) and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        super().__setattr__(name, value)

    @property
    def done(self) -> bool:
        return self.status is TaskStatus.DONE

    def effective_due_date(self) -> Optional[datetime]:
        """Return the due date only when the task is flagged as having one."""
        if self.has_due_date and self.due_date is not None:
            return self.due_date
        return None


@dataclass
class Bookmark:
    """A named link stored with the project."""

    name: str = ""
    url: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QuickNote:
    """A free-form note stored with the project."""

    text: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SettingsModel:
    """Per-document display preferences."""

    show_done_tasks: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ProjectInfo:
    """Project metadata shown in the sidebar header."""

    name: str = DEFAULT_PROJECT_NAME
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StateModel:
    """Session state persisted so a reopened document restores its view."""

    selected_view: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Project:
    """Root aggregate of a project document."""

    state: StateModel = field(default_factory=StateModel)
    settings: SettingsModel = field(default_factory=SettingsModel)
    project_info: ProjectInfo = field(default_factory=ProjectInfo)
    tasks: List[Task] = field(default_factory=list)
    bookmarks: List[Bookmark] = field(default_factory=list)
    quick_notes: List[QuickNote] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)


def default_project() -> Project:
    """Return the empty project used for new documents."""
    return Project(
        state=StateModel(),
        settings=SettingsModel(show_done_tasks=False),
        project_info=ProjectInfo(),
        tasks=[],
        bookmarks=[],
        quick_notes=[],
    )
