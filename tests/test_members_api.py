from tests.conftest import PROJECT_ID, OWNER, MEMBER, VIEWER, OUTSIDER

MEMBERS_URL = f"/api/v1/projects/{PROJECT_ID}/members"


def _role(fake_db, user_id):
    rows = [m for m in fake_db.rows("project_members") if m["project_id"] == PROJECT_ID and m["user_id"] == user_id]
    return rows[0]["role"] if rows else None


class TestMembersApi:
    def test_list_members_with_profiles(self, client, current_user):
        current_user["user"] = VIEWER
        response = client.get(MEMBERS_URL)
        assert response.status_code == 200
        members = response.json()
        assert [(m["user_id"], m["role"]) for m in members] == [
            (OWNER["id"], "owner"), (MEMBER["id"], "member"), (VIEWER["id"], "viewer"),
        ]
        assert members[0]["user"]["full_name"] == "Olivia Owner"

    def test_missing_profile_falls_back(self, client, fake_db):
        fake_db.tables["users"] = [u for u in fake_db.rows("users") if u["id"] != VIEWER["id"]]
        members = client.get(MEMBERS_URL).json()
        assert members[-1]["user"]["full_name"] == "Unknown User"

    def test_outsider_cannot_list(self, client, current_user):
        current_user["user"] = OUTSIDER
        assert client.get(MEMBERS_URL).status_code == 403

    def test_member_cannot_change_roles(self, client, current_user):
        current_user["user"] = MEMBER
        response = client.put(f"{MEMBERS_URL}/{VIEWER['id']}", json={"role": "member"})
        assert response.status_code == 403

    def test_owner_changes_role(self, client, fake_db):
        response = client.put(f"{MEMBERS_URL}/{VIEWER['id']}", json={"role": "member"})
        assert response.status_code == 200
        assert response.json()["role"] == "member"
        assert _role(fake_db, VIEWER["id"]) == "member"

    def test_invalid_role(self, client):
        response = client.put(f"{MEMBERS_URL}/{VIEWER['id']}", json={"role": "admin"})
        assert response.status_code == 422

    def test_last_owner_cannot_be_demoted(self, client, fake_db):
        response = client.put(f"{MEMBERS_URL}/{OWNER['id']}", json={"role": "member"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot remove the last owner"
        assert _role(fake_db, OWNER["id"]) == "owner"

    def test_owner_can_step_down_after_promoting_another(self, client, fake_db):
        assert client.put(f"{MEMBERS_URL}/{MEMBER['id']}", json={"role": "owner"}).status_code == 200
        assert client.put(f"{MEMBERS_URL}/{OWNER['id']}", json={"role": "member"}).status_code == 200
        assert _role(fake_db, OWNER["id"]) == "member"

    def test_unknown_member(self, client):
        response = client.put(f"{MEMBERS_URL}/{OUTSIDER['id']}", json={"role": "viewer"})
        assert response.status_code == 404

    def test_member_leaves(self, client, fake_db, current_user):
        current_user["user"] = VIEWER
        assert client.delete(f"{MEMBERS_URL}/{VIEWER['id']}").status_code == 204
        assert _role(fake_db, VIEWER["id"]) is None

    def test_member_cannot_remove_others(self, client, current_user):
        current_user["user"] = MEMBER
        assert client.delete(f"{MEMBERS_URL}/{VIEWER['id']}").status_code == 403

    def test_owner_removes_member(self, client, fake_db):
        assert client.delete(f"{MEMBERS_URL}/{MEMBER['id']}").status_code == 204
        assert _role(fake_db, MEMBER["id"]) is None

    def test_last_owner_cannot_leave(self, client):
        response = client.delete(f"{MEMBERS_URL}/{OWNER['id']}")
        assert response.status_code == 400
