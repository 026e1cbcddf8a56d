"""Document core for a personal task and project manager.

A project document holds one Project (tasks, bookmarks, quick notes,
settings, project info and session state) stored as a single JSON file.
``ProjectDocument`` owns the Project of an open document and exposes the
edit commands to a QML front end; ``TaskListModel`` presents the filtered
task list.
"""

from .codec import decode_project, encode_project, project_from_dict, project_to_dict, validate_project
from .commands import (
    add_bookmark,
    add_quick_note,
    add_task,
    delete_bookmarks,
    delete_quick_notes,
    delete_tasks,
    set_bookmark_field,
    set_project_info,
    set_quick_note_text,
    set_selected_view,
    set_task_field,
    toggle_show_done_tasks,
    toggle_task_status,
    visible_tasks,
)
from .constants import FILE_EXTENSION
from .document import ProjectDocument
from .errors import CorruptDocument, DocumentError, IndexOutOfRange, ValidationError
from .task_list_model import TaskListModel
from .types import (
    Bookmark,
    Project,
    ProjectInfo,
    QuickNote,
    SettingsModel,
    StateModel,
    Task,
    TaskStatus,
    default_project,
)

__all__ = [
    "Bookmark",
    "CorruptDocument",
    "DocumentError",
    "FILE_EXTENSION",
    "IndexOutOfRange",
    "Project",
    "ProjectDocument",
    "ProjectInfo",
    "QuickNote",
    "SettingsModel",
    "StateModel",
    "Task",
    "TaskListModel",
    "TaskStatus",
    "ValidationError",
    "add_bookmark",
    "add_quick_note",
    "add_task",
    "decode_project",
    "default_project",
    "delete_bookmarks",
    "delete_quick_notes",
    "delete_tasks",
    "encode_project",
    "project_from_dict",
    "project_to_dict",
    "set_bookmark_field",
    "set_project_info",
    "set_quick_note_text",
    "set_selected_view",
    "set_task_field",
    "toggle_show_done_tasks",
    "toggle_task_status",
    "validate_project",
    "visible_tasks",
]
