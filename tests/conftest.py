import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.dependencies import get_current_user_id
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import clear_auth_cache
from tests.fakes import FakeSupabase, create_project_with_owner, delete_document_with_relations

PROJECT_ID = "11111111-1111-1111-1111-111111111111"
OTHER_PROJECT_ID = "22222222-2222-2222-2222-222222222222"


def make_user(user_id, email, full_name, verified=True):
    return {
        "id": user_id,
        "email": email,
        "user_metadata": {"full_name": full_name, "email_verified": verified},
        "app_metadata": {},
    }


OWNER = make_user("user-owner", "olivia@example.com", "Olivia Owner")
MEMBER = make_user("user-member", "mark@example.com", "Mark Member")
VIEWER = make_user("user-viewer", "vera@example.com", "Vera Viewer")
OUTSIDER = make_user("user-outsider", "otto@example.com", "Otto Outsider")
UNVERIFIED = make_user("user-unverified", "una@example.com", "Una Unverified", verified=False)


def seed_tables():
    return {
        "users": [
            {"id": u["id"], "email": u["email"], "full_name": u["user_metadata"]["full_name"],
             "avatar_url": None, "created_at": "2024-01-01T00:00:00+00:00", "updated_at": None}
            for u in (OWNER, MEMBER, VIEWER, OUTSIDER, UNVERIFIED)
        ],
        "projects": [
            {"id": PROJECT_ID, "name": "Website Redesign", "description": "New marketing site",
             "status": "in_progress", "progress": 0, "color": "#8B5CF6", "due_date": None,
             "created_by": OWNER["id"], "created_at": "2024-01-02T00:00:00+00:00", "updated_at": None},
            {"id": OTHER_PROJECT_ID, "name": "Mobile App", "description": "iOS and Android",
             "status": "planning", "progress": 0, "color": "#67E3F9", "due_date": None,
             "created_by": OUTSIDER["id"], "created_at": "2024-01-03T00:00:00+00:00", "updated_at": None},
        ],
        "project_members": [
            {"project_id": PROJECT_ID, "user_id": OWNER["id"], "role": "owner", "created_at": "2024-01-02T00:00:00+00:00"},
            {"project_id": PROJECT_ID, "user_id": MEMBER["id"], "role": "member", "created_at": "2024-01-02T01:00:00+00:00"},
            {"project_id": PROJECT_ID, "user_id": VIEWER["id"], "role": "viewer", "created_at": "2024-01-02T02:00:00+00:00"},
            {"project_id": OTHER_PROJECT_ID, "user_id": OUTSIDER["id"], "role": "owner", "created_at": "2024-01-03T00:00:00+00:00"},
        ],
        "tasks": [
            {"id": "task-1", "project_id": PROJECT_ID, "title": "Design landing page", "description": "Hero and pricing",
             "status": "todo", "priority": "high", "assignee_id": MEMBER["id"], "due_date": "2024-03-10",
             "created_by": OWNER["id"], "created_at": "2024-02-01T00:00:00+00:00", "updated_at": None},
            {"id": "task-2", "project_id": PROJECT_ID, "title": "Write copy", "description": None,
             "status": "in_progress", "priority": "medium", "assignee_id": OWNER["id"], "due_date": "2024-03-01",
             "created_by": OWNER["id"], "created_at": "2024-02-02T00:00:00+00:00", "updated_at": None},
            {"id": "task-3", "project_id": PROJECT_ID, "title": "Set up analytics", "description": None,
             "status": "done", "priority": "low", "assignee_id": None, "due_date": None,
             "created_by": OWNER["id"], "created_at": "2024-02-03T00:00:00+00:00", "updated_at": None},
            {"id": "task-4", "project_id": OTHER_PROJECT_ID, "title": "Secret roadmap", "description": "hidden",
             "status": "todo", "priority": "medium", "assignee_id": OUTSIDER["id"], "due_date": None,
             "created_by": OUTSIDER["id"], "created_at": "2024-02-04T00:00:00+00:00", "updated_at": None},
        ],
        "activities": [],
        "documents": [],
        "project_invites": [],
        "project_views": [],
        "user_skills": [],
        "email_verification_codes": [],
    }


@pytest.fixture
def fake_db():
    db = FakeSupabase(seed_tables())
    db.rpc_handlers["create_project_with_owner"] = create_project_with_owner
    db.rpc_handlers["delete_document_with_relations"] = delete_document_with_relations
    return db


@pytest.fixture
def current_user():
    """Mutable holder for the user the overridden auth dependency returns."""
    return {"user": OWNER}


@pytest.fixture
def client(fake_db, current_user):
    clear_auth_cache()
    app.state.limiter.enabled = False
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_service_supabase] = lambda: fake_db
    app.dependency_overrides[get_current_user_id] = lambda: current_user["user"]
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.limiter.enabled = True
