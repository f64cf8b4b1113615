"""Tests for assistant command recognition."""

from app.modules.assistant.parser import (
    parse_create_task,
    parse_status_update,
    normalize_status,
    unknown_status_message,
    closest_task,
    find_task,
    find_project,
    project_list_text,
)

TASKS = [
    {"id": "task-1", "title": "Design landing page"},
    {"id": "task-2", "title": "Write copy"},
    {"id": "task-3", "title": "Set up analytics"},
]
PROJECTS = [
    {"id": "p-1", "name": "Website Redesign"},
    {"id": "p-2", "name": "Mobile App"},
]


class TestParseCreateTask:
    """Create-task requests in their different phrasings."""

    def test_project_before_title(self):
        command = parse_create_task("Create a task in Website Redesign called Fix footer")
        assert command.project == "Website Redesign"
        assert command.title == "Fix footer"
        assert command.priority == "medium"
        assert command.description == ""

    def test_title_before_project_with_priority(self):
        command = parse_create_task(
            "create a task called 'Update pricing' in the Website Redesign project with high priority"
        )
        assert command.title == "Update pricing"
        assert command.project == "Website Redesign"
        assert command.priority == "high"
        assert command.description == ""

    def test_add_to_project_with_priority_and_description(self):
        command = parse_create_task(
            "add 'Write tests' to Mobile App with low priority and description cover edge cases"
        )
        assert command.title == "Write tests"
        assert command.project == "Mobile App"
        assert command.priority == "low"
        assert command.description == "cover edge cases"

    def test_question_is_not_a_command(self):
        assert parse_create_task("What tasks are due this week?") is None


class TestParseStatusUpdate:
    """Status change requests, including follow-ups that rely on history."""

    def test_mark_title_as_status(self):
        command = parse_status_update("mark Design landing page as done")
        assert command.task_title == "Design landing page"
        assert command.status_term == "done"

    def test_move_to_column(self):
        command = parse_status_update("move Write copy to review")
        assert command.task_title == "Write copy"
        assert command.status_term == "review"

    def test_complete_shortcut(self):
        command = parse_status_update("complete Write copy")
        assert command.task_title == "Write copy"
        assert command.status_term == "done"

    def test_mark_title_complete(self):
        command = parse_status_update("mark Write copy complete")
        assert command.task_title == "Write copy"
        assert command.status_term == "done"

    def test_status_only_uses_previous_user_message(self):
        history = [
            {"role": "user", "content": "create task 'Write copy' in Website Redesign"},
            {"role": "assistant", "content": "Done!"},
        ]
        command = parse_status_update("mark as in progress", history)
        assert command.task_title == "Write copy"
        assert command.status_term == "in progress"

    def test_status_only_without_history(self):
        assert parse_status_update("mark as done") is None

    def test_unknown_term_is_kept_for_the_reply(self):
        command = parse_status_update("set Write copy to banana")
        assert command.status_term == "banana"
        assert normalize_status(command.status_term) is None

    def test_question_is_not_a_command(self):
        assert parse_status_update("What is due soon?") is None


class TestNormalizeStatus:
    def test_synonyms(self):
        assert normalize_status("WIP") == "in_progress"
        assert normalize_status("Finished.") == "done"
        assert normalize_status("to-do") == "todo"
        assert normalize_status("under review") == "review"

    def test_quoted_term(self):
        assert normalize_status("'in progress'") == "in_progress"

    def test_unknown(self):
        assert normalize_status("nope") is None
        assert '"nope"' in unknown_status_message("nope")


class TestFindTask:
    def test_exact_title(self):
        assert find_task("Write copy", TASKS)["id"] == "task-2"

    def test_substring(self):
        assert find_task("landing", TASKS)["id"] == "task-1"

    def test_closest_by_word_overlap(self):
        assert closest_task("Write copy today", [{"id": "task-2", "title": "Write copy"}])["id"] == "task-2"

    def test_nothing_close_enough(self):
        search = "an entirely unrelated request that is much longer than every title here"
        assert closest_task(search, [{"id": "x", "title": "Hi"}]) is None


class TestFindProject:
    def test_prefix_and_suffix(self):
        assert find_project("website", PROJECTS)["id"] == "p-1"
        assert find_project("Redesign", PROJECTS)["id"] == "p-1"

    def test_word_overlap(self):
        assert find_project("mobile application", PROJECTS)["id"] == "p-2"

    def test_no_match(self):
        assert find_project("Marketing", PROJECTS) is None
        assert find_project("   ", PROJECTS) is None

    def test_project_list_is_sorted(self):
        assert project_list_text(PROJECTS) == '"Mobile App", "Website Redesign"'
