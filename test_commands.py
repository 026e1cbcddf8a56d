"""Tests for the project editing commands."""

from datetime import datetime, timezone

import pytest

from projectmanager import (
    IndexOutOfRange,
    Task,
    TaskStatus,
    ValidationError,
    add_bookmark,
    add_quick_note,
    add_task,
    default_project,
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


@pytest.fixture
def project():
    project = default_project()
    project.tasks = [Task(name="A"), Task(name="B"), Task(name="C")]
    return project


def _names(project):
    return [task.name for task in project.tasks]


class TestAddTask:
    def test_appends_blank_task(self):
        project = default_project()
        index = add_task(project)
        assert index == 0
        assert len(project.tasks) == 1
        task = project.tasks[0]
        assert task.name == ""
        assert task.notes == ""
        assert task.status is TaskStatus.TODO
        assert task.has_due_date is False
        assert task.due_date is None

    def test_appends_at_end(self, project):
        index = add_task(project)
        assert index == 3
        assert _names(project) == ["A", "B", "C", ""]


class TestDeleteTasks:
    def test_delete_multiple_uses_pre_deletion_indices(self, project):
        assert delete_tasks(project, {0, 2}) == 2
        assert _names(project) == ["B"]

    def test_delete_single(self, project):
        delete_tasks(project, [1])
        assert _names(project) == ["A", "C"]

    def test_duplicates_are_collapsed(self, project):
        assert delete_tasks(project, [1, 1]) == 1
        assert _names(project) == ["A", "C"]

    def test_out_of_range_is_all_or_nothing(self, project):
        with pytest.raises(IndexOutOfRange) as excinfo:
            delete_tasks(project, [0, 5])
        assert excinfo.value.index == 5
        assert excinfo.value.size == 3
        assert _names(project) == ["A", "B", "C"]

    def test_negative_index_is_rejected(self, project):
        with pytest.raises(IndexOutOfRange):
            delete_tasks(project, [-1])
        assert _names(project) == ["A", "B", "C"]

    def test_index_out_of_range_is_an_index_error(self, project):
        with pytest.raises(IndexError):
            delete_tasks(project, [3])

    def test_empty_selection(self, project):
        assert delete_tasks(project, []) == 0
        assert _names(project) == ["A", "B", "C"]


class TestToggleTaskStatus:
    def test_toggle_twice_restores_status(self, project):
        assert toggle_task_status(project, 1) is TaskStatus.DONE
        assert project.tasks[1].done
        assert toggle_task_status(project, 1) is TaskStatus.TODO
        assert project.tasks[1].status is TaskStatus.TODO

    def test_invalid_index(self, project):
        with pytest.raises(IndexOutOfRange):
            toggle_task_status(project, 3)


class TestSetTaskField:
    def test_set_name_and_notes(self, project):
        set_task_field(project, 0, "name", "Alpha")
        set_task_field(project, 0, "notes", "first")
        assert project.tasks[0].name == "Alpha"
        assert project.tasks[0].notes == "first"

    def test_empty_name_is_allowed(self, project):
        set_task_field(project, 0, "name", "")
        assert project.tasks[0].name == ""

    def test_set_due_date_fields(self, project):
        set_task_field(project, 2, "hasDueDate", True)
        set_task_field(project, 2, "dueDate", "2026-05-04T08:00:00Z")
        task = project.tasks[2]
        assert task.has_due_date is True
        assert task.due_date == datetime(2026, 5, 4, 8, tzinfo=timezone.utc)
        assert task.effective_due_date() == task.due_date

    def test_snake_case_names_are_accepted(self, project):
        due = datetime(2026, 5, 4, 8, tzinfo=timezone.utc)
        set_task_field(project, 0, "due_date", due)
        set_task_field(project, 0, "has_due_date", True)
        assert project.tasks[0].due_date == due
        assert project.tasks[0].has_due_date is True

    def test_clear_due_date(self, project):
        set_task_field(project, 0, "dueDate", "2026-05-04T08:00:00+02:00")
        set_task_field(project, 0, "dueDate", None)
        assert project.tasks[0].due_date is None

    def test_due_date_without_flag_is_tolerated(self, project):
        set_task_field(project, 0, "dueDate", "2026-05-04T08:00:00Z")
        assert project.tasks[0].has_due_date is False
        assert project.tasks[0].effective_due_date() is None

    def test_invalid_index_checked_first(self, project):
        with pytest.raises(IndexOutOfRange):
            set_task_field(project, 7, "bogus", 1)

    def test_unknown_field(self, project):
        with pytest.raises(ValidationError, match="Unknown task field"):
            set_task_field(project, 0, "status", "done")

    @pytest.mark.parametrize(
        "field,value",
        [("name", 5), ("notes", None), ("hasDueDate", "true"), ("dueDate", 12), ("dueDate", "soon")],
    )
    def test_wrong_value_type(self, project, field, value):
        before = _names(project)
        with pytest.raises(ValidationError):
            set_task_field(project, 0, field, value)
        assert _names(project) == before
        assert project.tasks[0].has_due_date is False
        assert project.tasks[0].due_date is None

    @pytest.mark.parametrize("field", ["name", "notes"])
    def test_lone_surrogate_is_rejected(self, project, field):
        with pytest.raises(ValidationError, match="not valid text"):
            set_task_field(project, 0, field, "bad\ud800")
        assert project.tasks[0].name == "A"
        assert project.tasks[0].notes == ""

    def test_naive_due_date_is_stored_as_utc(self, project):
        set_task_field(project, 0, "dueDate", datetime(2026, 5, 4, 8))
        assert project.tasks[0].due_date == datetime(2026, 5, 4, 8, tzinfo=timezone.utc)


class TestVisibleTasks:
    def test_hides_done_tasks_by_default(self):
        project = default_project()
        project.tasks = [Task(name="open"), Task(name="closed", status=TaskStatus.DONE)]
        assert [(i, t.name) for i, t in visible_tasks(project)] == [(0, "open")]

    def test_shows_done_tasks_when_enabled(self):
        project = default_project()
        project.tasks = [Task(name="open"), Task(name="closed", status=TaskStatus.DONE)]
        project.settings.show_done_tasks = True
        assert [(i, t.name) for i, t in visible_tasks(project)] == [(0, "open"), (1, "closed")]

    def test_indices_refer_to_full_list(self):
        project = default_project()
        project.tasks = [
            Task(name="a", status=TaskStatus.DONE),
            Task(name="b"),
            Task(name="c", status=TaskStatus.DONE),
            Task(name="d"),
        ]
        assert [i for i, _ in visible_tasks(project)] == [1, 3]

    def test_view_is_recomputed(self, project):
        assert len(visible_tasks(project)) == 3
        toggle_task_status(project, 0)
        assert len(visible_tasks(project)) == 2

    def test_toggle_show_done_tasks(self, project):
        assert toggle_show_done_tasks(project) is True
        assert project.settings.show_done_tasks is True
        assert toggle_show_done_tasks(project) is False


class TestBookmarksAndNotes:
    def test_bookmark_commands(self):
        project = default_project()
        assert add_bookmark(project, "Docs", "https://example.org") == 0
        assert add_bookmark(project, "Board") == 1
        set_bookmark_field(project, 1, "url", "https://example.org/board")
        assert project.bookmarks[1].url == "https://example.org/board"

        delete_bookmarks(project, [0])
        assert [b.name for b in project.bookmarks] == ["Board"]

    def test_bookmark_errors(self):
        project = default_project()
        add_bookmark(project, "Docs")
        with pytest.raises(IndexOutOfRange):
            set_bookmark_field(project, 1, "name", "x")
        with pytest.raises(ValidationError):
            set_bookmark_field(project, 0, "icon", "x")
        with pytest.raises(IndexOutOfRange):
            delete_bookmarks(project, [0, 1])
        assert len(project.bookmarks) == 1

    def test_quick_note_commands(self):
        project = default_project()
        add_quick_note(project, "one")
        add_quick_note(project, "two")
        set_quick_note_text(project, 0, "uno")
        assert [n.text for n in project.quick_notes] == ["uno", "two"]

        delete_quick_notes(project, {0, 1})
        assert project.quick_notes == []

    def test_quick_note_errors(self):
        project = default_project()
        with pytest.raises(IndexOutOfRange) as excinfo:
            set_quick_note_text(project, 0, "x")
        assert excinfo.value.collection == "quickNotes"
        with pytest.raises(ValidationError):
            add_quick_note(project, None)

    def test_lone_surrogates_are_rejected(self):
        project = default_project()
        add_bookmark(project, "Docs")
        add_quick_note(project, "one")
        with pytest.raises(ValidationError):
            add_bookmark(project, "bad\udc80")
        with pytest.raises(ValidationError):
            set_bookmark_field(project, 0, "url", "https://example.org/\ud800")
        with pytest.raises(ValidationError):
            set_quick_note_text(project, 0, "\ud800")
        with pytest.raises(ValidationError):
            set_project_info(project, name="ok", description="\udfff")
        assert [b.name for b in project.bookmarks] == ["Docs"]
        assert project.bookmarks[0].url == ""
        assert project.quick_notes[0].text == "one"
        assert project.project_info.name == "Untitled Project"


class TestProjectMetadata:
    def test_set_project_info(self):
        project = default_project()
        set_project_info(project, name="Renovation")
        assert project.project_info.name == "Renovation"
        assert project.project_info.description == ""
        set_project_info(project, description="Kitchen first")
        assert project.project_info.name == "Renovation"
        assert project.project_info.description == "Kitchen first"

    def test_set_selected_view(self):
        project = default_project()
        set_selected_view(project, "bookmarks")
        assert project.state.selected_view == "bookmarks"
        set_selected_view(project, None)
        assert project.state.selected_view is None
        with pytest.raises(ValidationError):
            set_selected_view(project, 3)
