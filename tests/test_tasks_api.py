from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from app.core.email import EmailDeliveryError
from app.modules.tasks.service import TaskService, format_status, send_task_notification
from tests.conftest import PROJECT_ID, OWNER, MEMBER, VIEWER, OUTSIDER


def _task(fake_db, task_id):
    return next((t for t in fake_db.rows("tasks") if t["id"] == task_id), None)


def _descriptions(fake_db):
    return [a["description"] for a in fake_db.rows("activities")]


def _progress(fake_db):
    return next(p for p in fake_db.rows("projects") if p["id"] == PROJECT_ID)["progress"]


class TestCreateTask:
    def test_defaults_and_assignee(self, client, fake_db, current_user):
        current_user["user"] = MEMBER
        response = client.post(f"/api/v1/projects/{PROJECT_ID}/tasks", json={"title": "Fix footer"})
        assert response.status_code == 201
        task = response.json()
        assert task["status"] == "todo"
        assert task["priority"] == "medium"
        assert task["assignee_id"] == MEMBER["id"]
        assert task["assignee"]["full_name"] == "Mark Member"
        assert "Mark Member created task: Fix footer" in _descriptions(fake_db)
        # 1 done out of 4
        assert _progress(fake_db) == 25

    def test_viewer_cannot_create(self, client, current_user):
        current_user["user"] = VIEWER
        response = client.post(f"/api/v1/projects/{PROJECT_ID}/tasks", json={"title": "Nope"})
        assert response.status_code == 403

    def test_assignee_must_be_member(self, client):
        response = client.post(
            f"/api/v1/projects/{PROJECT_ID}/tasks", json={"title": "Fix footer", "assignee_id": OUTSIDER["id"]}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Assignee must be a member of this project"

    def test_invalid_priority(self, client):
        response = client.post(f"/api/v1/projects/{PROJECT_ID}/tasks", json={"title": "X", "priority": "urgent"})
        assert response.status_code == 422


class TestReadTasks:
    def test_list_project_tasks(self, client):
        response = client.get(f"/api/v1/projects/{PROJECT_ID}/tasks")
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == ["task-3", "task-2", "task-1"]

    def test_filter_by_status(self, client):
        response = client.get(f"/api/v1/projects/{PROJECT_ID}/tasks?status=done")
        assert [t["id"] for t in response.json()] == ["task-3"]

    def test_get_task(self, client):
        response = client.get("/api/v1/tasks/task-1")
        assert response.status_code == 200
        assert response.json()["assignee"]["full_name"] == "Mark Member"

    def test_get_task_other_project(self, client):
        assert client.get("/api/v1/tasks/task-4").status_code == 403

    def test_missing_task(self, client):
        assert client.get("/api/v1/tasks/nope").status_code == 404

    def test_my_pending(self, client, current_user):
        current_user["user"] = MEMBER
        response = client.get("/api/v1/tasks/me/pending")
        assert response.status_code == 200
        tasks = response.json()
        assert [t["id"] for t in tasks] == ["task-1"]
        assert tasks[0]["project_name"] == "Website Redesign"


class TestChangeTask:
    def test_status_change(self, client, fake_db, current_user):
        current_user["user"] = MEMBER
        response = client.put("/api/v1/tasks/task-1/status", json={"status": "done"})
        assert response.status_code == 200
        assert _task(fake_db, "task-1")["status"] == "done"
        assert "Mark Member updated status to Done" in _descriptions(fake_db)
        assert _progress(fake_db) == 67

    def test_same_status_is_a_no_op(self, client, fake_db):
        response = client.put("/api/v1/tasks/task-1/status", json={"status": "todo"})
        assert response.status_code == 200
        assert fake_db.rows("activities") == []

    def test_viewer_cannot_change_status(self, client, current_user):
        current_user["user"] = VIEWER
        assert client.put("/api/v1/tasks/task-1/status", json={"status": "done"}).status_code == 403

    def test_update_details(self, client, fake_db):
        response = client.put("/api/v1/tasks/task-2", json={"title": "Write better copy", "due_date": "2024-04-01"})
        assert response.status_code == 200
        assert response.json()["title"] == "Write better copy"
        assert _task(fake_db, "task-2")["due_date"] == "2024-04-01"

    def test_null_title_or_priority_is_rejected(self, client, fake_db):
        assert client.put("/api/v1/tasks/task-1", json={"title": None}).status_code == 422
        assert client.put("/api/v1/tasks/task-1", json={"priority": None}).status_code == 422
        task = _task(fake_db, "task-1")
        assert task["title"] == "Design landing page"
        assert task["priority"] == "high"
        assert task["updated_at"] is None

    def test_description_and_due_date_can_be_cleared(self, client, fake_db):
        response = client.put("/api/v1/tasks/task-1", json={"description": None, "due_date": None})
        assert response.status_code == 200
        assert response.json()["title"] == "Design landing page"
        task = _task(fake_db, "task-1")
        assert task["description"] is None
        assert task["due_date"] is None

    def test_reassign(self, client, fake_db):
        response = client.put("/api/v1/tasks/task-2/assignee", json={"assignee_id": MEMBER["id"]})
        assert response.status_code == 200
        assert response.json()["assignee"]["full_name"] == "Mark Member"
        assert "Olivia Owner assigned task to Mark Member" in _descriptions(fake_db)

    def test_reassign_to_outsider(self, client):
        response = client.put("/api/v1/tasks/task-2/assignee", json={"assignee_id": OUTSIDER["id"]})
        assert response.status_code == 400

    def test_delete(self, client, fake_db):
        fake_db.tables["activities"].append({
            "id": "old", "project_id": PROJECT_ID, "task_id": "task-1", "user_id": OWNER["id"],
            "type": "comment", "description": "old note", "created_at": "2024-02-10T00:00:00+00:00",
        })
        response = client.delete("/api/v1/tasks/task-1")
        assert response.status_code == 204
        assert _task(fake_db, "task-1") is None
        activities = fake_db.rows("activities")
        assert [a["description"] for a in activities] == ["Olivia Owner deleted task: Design landing page"]
        assert activities[0]["task_id"] is None
        # 1 done out of 2
        assert _progress(fake_db) == 50


class TestTaskUpdates:
    def test_post_and_list_updates(self, client, fake_db):
        first = client.post("/api/v1/tasks/task-1/updates", json={"text": "Started wireframes"})
        assert first.status_code == 201
        fake_db.tables["activities"][-1]["created_at"] = "2024-03-01T00:00:00+00:00"
        client.post("/api/v1/tasks/task-1/updates", json={"text": "  Halfway there  "})

        response = client.get("/api/v1/tasks/task-1/updates")
        assert response.status_code == 200
        assert [u["description"] for u in response.json()] == [
            "Olivia Owner: Halfway there",
            "Olivia Owner: Started wireframes",
        ]

    def test_blank_update(self, client):
        response = client.post("/api/v1/tasks/task-1/updates", json={"text": "   "})
        assert response.status_code == 400


class TestNotifications:
    def test_assignee_is_notified_of_other_peoples_changes(self, fake_db):
        background_tasks = MagicMock()
        email_client = MagicMock()
        service = TaskService(fake_db, email_client=email_client, background_tasks=background_tasks)

        service.change_status("task-1", "in_progress", OWNER["id"])

        background_tasks.add_task.assert_called_once()
        func, supabase, client, recipient, task_email = background_tasks.add_task.call_args[0]
        assert func is send_task_notification
        assert recipient == MEMBER["id"]
        assert task_email.action == "status_changed"
        assert task_email.status == "In Progress"
        assert task_email.project_name == "Website Redesign"

    def test_own_changes_are_not_notified(self, fake_db):
        background_tasks = MagicMock()
        service = TaskService(fake_db, email_client=MagicMock(), background_tasks=background_tasks)
        service.change_status("task-1", "in_progress", MEMBER["id"])
        background_tasks.add_task.assert_not_called()

    def test_priority_change_email(self, fake_db):
        from app.modules.tasks.schemas import TaskUpdate

        background_tasks = MagicMock()
        service = TaskService(fake_db, email_client=MagicMock(), background_tasks=background_tasks)
        service.update_task("task-1", TaskUpdate(priority="low"), OWNER["id"])
        assert background_tasks.add_task.call_args[0][4].action == "priority_changed"

    def test_send_uses_auth_email(self, fake_db):
        fake_db.rpc_handlers["get_user_email"] = lambda db, params: "mark.auth@example.com"
        email_client = MagicMock()
        task_email = MagicMock()
        assert send_task_notification(fake_db, email_client, MEMBER["id"], task_email) is True
        email_client.send_task_notification.assert_called_once_with("mark.auth@example.com", "Mark", task_email)

    def test_send_falls_back_to_profile_email(self, fake_db):
        email_client = MagicMock()
        send_task_notification(fake_db, email_client, MEMBER["id"], MagicMock())
        assert email_client.send_task_notification.call_args[0][0] == MEMBER["email"]

    def test_send_failure_is_swallowed(self, fake_db):
        email_client = MagicMock()
        email_client.send_task_notification.side_effect = EmailDeliveryError("down")
        assert send_task_notification(fake_db, email_client, MEMBER["id"], MagicMock()) is False


class TestHelpers:
    def test_format_status(self):
        assert format_status("in_progress") == "In Progress"
        assert format_status("done") == "Done"

    def test_missing_task_in_service(self, fake_db):
        with pytest.raises(HTTPException) as exc:
            TaskService(fake_db, email_client=MagicMock()).get_task("nope")
        assert exc.value.status_code == 404
