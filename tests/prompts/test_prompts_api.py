# -*- coding: utf-8 -*-
import pytest

from extensions.database import db
from models.prompt import Prompt


@pytest.fixture
def make_prompt(client):
    def _create(user, **overrides):
        payload = {"title": "Summarize", "content": "Summarize the text", "category": "general"}
        payload.update(overrides)
        resp = client.post("/api/prompts", json=payload, headers=user["headers"])
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]["prompt"]
    return _create


class TestPromptCrud:

    def test_create_normalizes_tags(self, client, basic_user, make_prompt):
        prompt = make_prompt(basic_user, tags=["SQL", " sql ", "Python"])

        assert prompt["tags"] == ["sql", "python"]
        assert prompt["usageCount"] == 0
        assert prompt["isFavorite"] is False
        assert prompt["createdBy"] == basic_user["id"]

    @pytest.mark.parametrize("missing", ["title", "content", "category"])
    def test_required_fields(self, client, basic_user, missing):
        payload = {"title": "t", "content": "c", "category": "general"}
        payload.pop(missing)

        resp = client.post("/api/prompts", json=payload, headers=basic_user["headers"])

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Title, content, and category are required"

    def test_unknown_category(self, client, basic_user):
        resp = client.post("/api/prompts", json={"title": "t", "content": "c", "category": "999"},
                           headers=basic_user["headers"])

        assert resp.status_code == 400

    def test_owner_updates_other_user_denied(self, client, basic_user, make_user, make_prompt):
        prompt = make_prompt(basic_user)
        stranger = make_user()

        denied = client.put(f"/api/prompts/{prompt['id']}", json={"title": "x"}, headers=stranger["headers"])
        allowed = client.put(f"/api/prompts/{prompt['id']}", json={"title": "Better"},
                             headers=basic_user["headers"])

        assert denied.status_code == 403
        assert denied.get_json()["error"] == "Permission denied"
        assert allowed.get_json()["data"]["prompt"]["title"] == "Better"

    def test_admin_may_edit_any_prompt(self, client, basic_user, admin, make_prompt):
        prompt = make_prompt(basic_user)

        resp = client.put(f"/api/prompts/{prompt['id']}", json={"description": "  note "},
                          headers=admin["headers"])

        assert resp.get_json()["data"]["prompt"]["description"] == "note"

    def test_delete_is_soft(self, app, client, basic_user, make_prompt):
        prompt = make_prompt(basic_user)

        assert client.delete(f"/api/prompts/{prompt['id']}", headers=basic_user["headers"]).status_code == 200
        assert client.get(f"/api/prompts/{prompt['id']}", headers=basic_user["headers"]).status_code == 404

        with app.app_context():
            assert db.session.get(Prompt, prompt["id"]).is_active is False


class TestPromptListing:

    def test_filters_and_pagination(self, client, basic_user, make_prompt):
        make_prompt(basic_user, title="Alpha", tags=["sql"])
        make_prompt(basic_user, title="Beta", tags=["python"])
        make_prompt(basic_user, title="Gamma", tags=["sql", "python"])

        by_tag = client.get("/api/prompts?tags=sql&sortBy=title&sortOrder=asc",
                            headers=basic_user["headers"]).get_json()["data"]
        paged = client.get("/api/prompts?limit=2&page=1", headers=basic_user["headers"]).get_json()["data"]

        assert [p["title"] for p in by_tag["prompts"]] == ["Alpha", "Gamma"]
        assert paged["pagination"] == {
            "page": 1, "limit": 2, "total": 3, "totalPages": 2, "hasNext": True, "hasPrev": False,
        }

    def test_invalid_sort_field(self, client, basic_user):
        resp = client.get("/api/prompts?sortBy=content", headers=basic_user["headers"])

        assert resp.status_code == 400


class TestPromptActions:

    def test_toggle_favorite(self, client, basic_user, make_prompt):
        prompt = make_prompt(basic_user)

        on = client.post(f"/api/prompts/{prompt['id']}/favorite", headers=basic_user["headers"]).get_json()
        off = client.post(f"/api/prompts/{prompt['id']}/favorite", headers=basic_user["headers"]).get_json()

        assert on["data"]["isFavorite"] is True
        assert on["message"] == "Added to favorites"
        assert off["data"]["isFavorite"] is False

    def test_usage_counter(self, client, basic_user, make_user, make_prompt):
        prompt = make_prompt(basic_user)
        other = make_user()

        client.post(f"/api/prompts/{prompt['id']}/usage", headers=basic_user["headers"])
        resp = client.post(f"/api/prompts/{prompt['id']}/usage", headers=other["headers"])

        assert resp.get_json()["data"]["usageCount"] == 2

    def test_duplicate(self, client, basic_user, make_user, make_prompt):
        prompt = make_prompt(basic_user, tags=["x"])
        client.post(f"/api/prompts/{prompt['id']}/usage", headers=basic_user["headers"])
        other = make_user()

        resp = client.post(f"/api/prompts/{prompt['id']}/duplicate", headers=other["headers"])

        assert resp.status_code == 201
        copy = resp.get_json()["data"]["prompt"]
        assert copy["title"] == "Summarize (Copy)"
        assert copy["usageCount"] == 0
        assert copy["createdBy"] == other["id"]
        assert copy["tags"] == ["x"]

    def test_bulk_update_skips_foreign_prompts(self, client, basic_user, make_user, make_prompt):
        mine = make_prompt(basic_user)
        theirs = make_prompt(make_user())

        resp = client.put(
            "/api/prompts",
            json={"promptIds": [mine["id"], theirs["id"]], "updates": {"tags": ["Bulk"]}},
            headers=basic_user["headers"],
        )

        assert resp.get_json()["message"] == "Updated 1 prompts"
        assert resp.get_json()["data"]["modifiedCount"] == 1
        assert client.get(f"/api/prompts/{mine['id']}", headers=basic_user["headers"]) \
            .get_json()["data"]["prompt"]["tags"] == ["bulk"]

    def test_bulk_update_rejects_other_fields(self, client, basic_user, make_prompt):
        prompt = make_prompt(basic_user)

        resp = client.put("/api/prompts", json={"promptIds": [prompt["id"]], "updates": {"title": "x"}},
                          headers=basic_user["headers"])

        assert resp.status_code == 400

    def test_bulk_delete(self, client, admin, basic_user, make_prompt):
        ids = [make_prompt(basic_user)["id"] for _ in range(2)]

        resp = client.delete("/api/prompts", json={"promptIds": ids}, headers=admin["headers"])

        assert resp.get_json()["data"]["deletedCount"] == 2
        listing = client.get("/api/prompts", headers=admin["headers"]).get_json()["data"]
        assert listing["pagination"]["total"] == 0

    def test_bulk_requires_ids(self, client, basic_user):
        resp = client.delete("/api/prompts", json={}, headers=basic_user["headers"])

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Prompt IDs are required"


class TestPromptStats:

    def test_stats_shape(self, client, basic_user, make_user, make_prompt):
        first = make_prompt(basic_user, tags=["sql"])
        make_prompt(basic_user, tags=["sql", "etl"])
        make_prompt(make_user())
        client.post(f"/api/prompts/{first['id']}/favorite", headers=basic_user["headers"])
        for _ in range(3):
            client.post(f"/api/prompts/{first['id']}/usage", headers=basic_user["headers"])

        stats = client.get("/api/prompts/stats", headers=basic_user["headers"]).get_json()["data"]["stats"]

        assert stats["totalPrompts"] == 3
        assert stats["favoritePrompts"] == 1
        assert stats["totalUsage"] == 3
        assert stats["averageUsagePerPrompt"] == 1
        assert stats["favoritePercentage"] == 33.33
        assert stats["tagStats"][0] == {"tag": "sql", "count": 2}
        assert stats["categoryStats"][0]["categoryInfo"]["color"] == "#6B7280"
        assert stats["topPrompts"][0]["id"] == first["id"]
        assert stats["userStats"] is None

    def test_personal_stats(self, client, basic_user, make_user, make_prompt):
        make_prompt(basic_user)
        make_prompt(make_user())

        stats = client.get("/api/prompts/stats?personal=true", headers=basic_user["headers"]) \
            .get_json()["data"]["stats"]

        assert stats["totalPrompts"] == 1
        assert stats["userStats"]["userId"] == basic_user["id"]
