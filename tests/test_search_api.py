from app.modules.search.service import clean_search_term
from tests.conftest import PROJECT_ID, OUTSIDER


class TestCleanSearchTerm:
    def test_filter_characters_removed(self):
        assert clean_search_term("a,b(c)") == "a b c"
        assert clean_search_term('50% "off"') == "50   off"

    def test_blank(self):
        assert clean_search_term(None) == ""
        assert clean_search_term(" ,() ") == ""


class TestSearchApi:
    def test_matches_projects_and_tasks(self, client):
        response = client.get("/api/v1/search?q=design")
        assert response.status_code == 200
        body = response.json()
        assert [p["id"] for p in body["projects"]] == [PROJECT_ID]
        assert [t["id"] for t in body["tasks"]] == ["task-1"]
        assert body["tasks"][0]["project_name"] == "Website Redesign"

    def test_case_insensitive_description_match(self, client):
        body = client.get("/api/v1/search?q=PRICING").json()
        assert [t["id"] for t in body["tasks"]] == ["task-1"]

    def test_other_projects_are_hidden(self, client):
        body = client.get("/api/v1/search?q=secret").json()
        assert body["tasks"] == []

    def test_outsider_sees_own_project(self, client, current_user):
        current_user["user"] = OUTSIDER
        body = client.get("/api/v1/search?q=secret").json()
        assert [t["id"] for t in body["tasks"]] == ["task-4"]

    def test_blank_query(self, client, fake_db):
        response = client.get("/api/v1/search?q=%20%20")
        assert response.status_code == 200
        assert response.json()["projects"] == []
        assert ("projects", "select") not in fake_db.calls
