"""Constants shared by the project document core."""

FILE_EXTENSION = ".pmproject"
CONTENT_TYPE = "com.alexseifert.projectManagerProject"

SETTINGS_ORGANIZATION = "ProjectManager"
SETTINGS_APPLICATION = "ProjectManager"
RECENT_DOCUMENTS_KEY = "recentDocuments"
MAX_RECENT_DOCUMENTS = 10

DEFAULT_PROJECT_NAME = "Untitled Project"

# Task fields editable through set_task_field, keyed by file-format name.
TASK_FIELDS = {
    "name": "name",
    "notes": "notes",
    "hasDueDate": "has_due_date",
    "dueDate": "due_date",
}

BOOKMARK_FIELDS = ("name", "url")
