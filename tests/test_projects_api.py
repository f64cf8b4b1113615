from app.modules.projects.service import calculate_progress, PROJECT_COLORS
from tests.conftest import PROJECT_ID, OTHER_PROJECT_ID, OWNER, MEMBER, VIEWER, OUTSIDER


class TestCalculateProgress:
    def test_empty_project(self):
        assert calculate_progress([]) == 0

    def test_rounds_half_up(self):
        assert calculate_progress(["done", "todo", "todo"]) == 33
        assert calculate_progress(["done"] + ["todo"] * 7) == 13
        assert calculate_progress(["done", "done", "review"]) == 67


class TestProjectsApi:
    def test_list_only_member_projects(self, client):
        response = client.get("/api/v1/projects")
        assert response.status_code == 200
        projects = response.json()
        assert [p["id"] for p in projects] == [PROJECT_ID]
        assert projects[0]["tasks_count"] == 3
        assert projects[0]["role"] == "owner"

    def test_create_project_makes_caller_owner(self, client, fake_db, current_user):
        current_user["user"] = MEMBER
        response = client.post("/api/v1/projects", json={"name": "Launch", "due_date": "2024-06-30"})
        assert response.status_code == 201
        project = response.json()
        assert project["progress"] == 0
        assert project["status"] == "planning"
        assert project["color"] in PROJECT_COLORS
        assert project["due_date"] == "2024-06-30"
        assert {"project_id": project["id"], "user_id": MEMBER["id"], "role": "owner"}.items() <= next(
            m for m in fake_db.rows("project_members") if m["project_id"] == project["id"]
        ).items()

    def test_create_requires_name(self, client):
        response = client.post("/api/v1/projects", json={"name": ""})
        assert response.status_code == 422

    def test_get_project_records_view(self, client, fake_db, current_user):
        current_user["user"] = VIEWER
        response = client.get(f"/api/v1/projects/{PROJECT_ID}")
        assert response.status_code == 200
        assert response.json()["name"] == "Website Redesign"
        views = fake_db.rows("project_views")
        assert [(v["project_id"], v["user_id"]) for v in views] == [(PROJECT_ID, VIEWER["id"])]

    def test_get_project_outsider(self, client, current_user):
        current_user["user"] = OUTSIDER
        assert client.get(f"/api/v1/projects/{PROJECT_ID}").status_code == 403

    def test_get_missing_project(self, client):
        assert client.get("/api/v1/projects/33333333-3333-3333-3333-333333333333").status_code == 404

    def test_recent_projects(self, client, fake_db):
        fake_db.tables["project_views"].extend([
            {"project_id": PROJECT_ID, "user_id": OWNER["id"], "viewed_at": "2024-03-01T00:00:00+00:00"},
            {"project_id": PROJECT_ID, "user_id": OWNER["id"], "viewed_at": "2024-03-02T00:00:00+00:00"},
            # no longer a member, must not show up
            {"project_id": OTHER_PROJECT_ID, "user_id": OWNER["id"], "viewed_at": "2024-03-03T00:00:00+00:00"},
        ])
        response = client.get("/api/v1/projects/recent")
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [PROJECT_ID]

    def test_member_cannot_update(self, client, current_user):
        current_user["user"] = MEMBER
        response = client.put(f"/api/v1/projects/{PROJECT_ID}", json={"name": "Renamed"})
        assert response.status_code == 403

    def test_owner_updates_and_activity_is_logged(self, client, fake_db):
        response = client.put(f"/api/v1/projects/{PROJECT_ID}", json={"name": "Renamed", "status": "in_review"})
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["status"] == "in_review"
        activity = fake_db.rows("activities")[-1]
        assert activity["type"] == "project_update"
        assert activity["description"] == "Olivia Owner updated the project details"

    def test_invalid_status(self, client):
        response = client.put(f"/api/v1/projects/{PROJECT_ID}", json={"status": "archived"})
        assert response.status_code == 422

    def test_null_name_or_status_is_rejected(self, client, fake_db):
        assert client.put(f"/api/v1/projects/{PROJECT_ID}", json={"name": None}).status_code == 422
        assert client.put(f"/api/v1/projects/{PROJECT_ID}", json={"status": None}).status_code == 422
        project = next(p for p in fake_db.rows("projects") if p["id"] == PROJECT_ID)
        assert project["name"] == "Website Redesign"
        assert project["status"] == "in_progress"
        assert fake_db.rows("activities") == []

    def test_due_date_can_be_cleared(self, client, fake_db):
        fake_db.tables["projects"][0]["due_date"] = "2024-06-01"
        response = client.put(f"/api/v1/projects/{PROJECT_ID}", json={"due_date": None})
        assert response.status_code == 200
        assert response.json()["due_date"] is None
        assert response.json()["name"] == "Website Redesign"

    def test_owner_deletes(self, client, fake_db):
        response = client.delete(f"/api/v1/projects/{PROJECT_ID}")
        assert response.status_code == 204
        assert PROJECT_ID not in [p["id"] for p in fake_db.rows("projects")]

    def test_viewer_cannot_delete(self, client, current_user):
        current_user["user"] = VIEWER
        assert client.delete(f"/api/v1/projects/{PROJECT_ID}").status_code == 403

    def test_recalculate_progress(self, client, fake_db):
        response = client.post(f"/api/v1/projects/{PROJECT_ID}/progress")
        assert response.status_code == 200
        assert response.json() == {"project_id": PROJECT_ID, "progress": 33}
        project = next(p for p in fake_db.rows("projects") if p["id"] == PROJECT_ID)
        assert project["progress"] == 33


class TestActivitiesApi:
    def test_project_feed_newest_first(self, client, fake_db):
        fake_db.tables["activities"].extend([
            {"id": "a1", "project_id": PROJECT_ID, "user_id": OWNER["id"], "type": "comment",
             "description": "first", "task_id": None, "created_at": "2024-03-01T00:00:00+00:00"},
            {"id": "a2", "project_id": PROJECT_ID, "user_id": MEMBER["id"], "type": "member_join",
             "description": "joined the project", "task_id": None, "created_at": "2024-03-02T00:00:00+00:00"},
            {"id": "a3", "project_id": OTHER_PROJECT_ID, "user_id": OUTSIDER["id"], "type": "comment",
             "description": "elsewhere", "task_id": None, "created_at": "2024-03-03T00:00:00+00:00"},
        ])
        response = client.get(f"/api/v1/projects/{PROJECT_ID}/activities?limit=1")
        assert response.status_code == 200
        assert [a["id"] for a in response.json()] == ["a2"]
