# -*- coding: utf-8 -*-
import pytest


class TestReleaseCreate:

    def test_create_release_defaults(self, client, admin):
        resp = client.post(
            "/api/releases",
            json={"title": "Autumn", "applicationName": "NRE", "description": "d", "type": "major",
                  "version": "2.0.0"},
            headers=admin["headers"],
        )

        assert resp.status_code == 201
        release = resp.get_json()["data"]["release"]
        assert release["status"] == "draft"
        assert release["isPublished"] is False
        assert release["workItems"] == []
        assert release["author"]["id"] == admin["id"]

    def test_missing_fields(self, client, admin):
        resp = client.post("/api/releases", json={"title": "x"}, headers=admin["headers"])

        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Missing required fields: title, applicationName, description, type"

    def test_bad_version_is_rejected(self, client, super_admin):
        resp = client.post(
            "/api/releases",
            json={"title": "t", "applicationName": "NRE", "description": "d", "type": "minor", "version": "1.0"},
            headers=super_admin["headers"],
        )

        assert resp.status_code == 400
        assert "semantic versioning" in resp.get_json()["details"][0]

    def test_duplicate_version_conflicts(self, client, super_admin, make_release):
        make_release(version="1.2.3")

        resp = client.post(
            "/api/releases",
            json={"title": "t", "applicationName": "NRE", "description": "d", "type": "minor",
                  "version": "1.2.3"},
            headers=super_admin["headers"],
        )

        assert resp.status_code == 409

    def test_unknown_application(self, client, super_admin):
        resp = client.post(
            "/api/releases",
            json={"title": "t", "applicationName": "Nowhere", "description": "d", "type": "minor"},
            headers=super_admin["headers"],
        )

        assert resp.status_code == 400

    def test_admin_outside_application_scope(self, client, admin):
        resp = client.post(
            "/api/releases",
            json={"title": "t", "applicationName": "NVE", "description": "d", "type": "minor"},
            headers=admin["headers"],
        )

        assert resp.status_code == 403

    def test_basic_user_cannot_create(self, client, basic_user):
        resp = client.post(
            "/api/releases",
            json={"title": "t", "applicationName": "NRE", "description": "d", "type": "minor"},
            headers=basic_user["headers"],
        )

        assert resp.status_code == 403

    def test_publishing_draft_marks_stable(self, client, admin, make_release):
        release = make_release()

        resp = client.put(f"/api/releases/{release['id']}", json={"isPublished": True}, headers=admin["headers"])

        assert resp.status_code == 200
        updated = resp.get_json()["data"]["release"]
        assert updated["isPublished"] is True
        assert updated["status"] == "stable"


class TestReleaseVisibility:

    def test_basic_user_sees_published_only(self, client, basic_user, make_release):
        hidden = make_release(title="Hidden")
        shown = make_release(title="Shown", isPublished=True)

        listing = client.get("/api/releases", headers=basic_user["headers"]).get_json()["data"]

        assert [r["id"] for r in listing["releases"]] == [shown["id"]]
        assert listing["total"] == 1
        assert client.get(f"/api/releases/{hidden['id']}", headers=basic_user["headers"]).status_code == 404
        assert client.get(f"/api/releases/{shown['id']}", headers=basic_user["headers"]).status_code == 200

    def test_application_scope_filters_listing(self, client, admin, make_release):
        make_release(applicationName="NRE")
        make_release(applicationName="NVE")

        listing = client.get("/api/releases", headers=admin["headers"]).get_json()["data"]

        assert {r["applicationName"] for r in listing["releases"]} == {"NRE"}

    def test_listing_filters_and_pagination(self, client, super_admin, make_release):
        for i in range(3):
            make_release(title=f"Patch {i}", type="patch")
        make_release(title="Big", type="major")

        resp = client.get("/api/releases?type=patch&limit=2&page=2", headers=super_admin["headers"])

        data = resp.get_json()["data"]
        assert data["total"] == 3
        assert data["totalPages"] == 2
        assert len(data["releases"]) == 1

    def test_stats(self, client, super_admin, make_release):
        make_release(isPublished=True, workItems=[{"type": "bug", "title": "b"}])
        make_release(type="patch")

        stats = client.get("/api/releases/stats", headers=super_admin["headers"]).get_json()["data"]

        assert stats["total"] == 2
        assert stats["published"] == 1
        assert stats["drafts"] == 1
        assert stats["byType"] == {"minor": 1, "patch": 1}
        assert stats["workItems"]["bugs"] == 1

    def test_delete_requires_super_admin(self, client, admin, super_admin, make_release):
        release = make_release()

        assert client.delete(f"/api/releases/{release['id']}", headers=admin["headers"]).status_code == 403
        assert client.delete(f"/api/releases/{release['id']}", headers=super_admin["headers"]).status_code == 200
        assert client.get(f"/api/releases/{release['id']}", headers=super_admin["headers"]).status_code == 404


class TestWorkItems:

    @pytest.fixture
    def release(self, make_release):
        return make_release(workItems=[
            {"_id": "root", "type": "epic", "title": "Platform"},
            {"_id": "child", "type": "feature", "title": "Login", "parentId": "root"},
            {"_id": "leaf", "type": "bug", "title": "Typo", "parentId": "child"},
        ])

    def test_detail_includes_ordered_items(self, client, super_admin, release):
        detail = client.get(f"/api/releases/{release['id']}", headers=super_admin["headers"]).get_json()

        ordered = detail["data"]["release"]["orderedWorkItems"]
        assert [(i["_id"], i["level"]) for i in ordered] == [("root", 0), ("child", 1), ("leaf", 2)]
        assert ordered[1]["typeLabel"] == "Feature"

    def test_add_item(self, client, admin, release):
        resp = client.post(
            f"/api/releases/{release['id']}/work-items",
            json={"type": "User Story", "title": "  Signup  ", "actualHours": "2.5"},
            headers=admin["headers"],
        )

        assert resp.status_code == 201
        item = resp.get_json()["data"]["workItem"]
        assert item["type"] == "user_story"
        assert item["title"] == "Signup"
        assert item["actualHours"] == 2.5
        assert item["_id"]

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "spike", "title": "x"},
            {"type": "bug", "title": ""},
            {"type": "bug", "title": "x", "actualHours": -1},
            {"type": "bug", "title": "x", "hyperlink": "ftp://nope"},
        ],
    )
    def test_add_item_validation(self, client, admin, release, payload):
        resp = client.post(f"/api/releases/{release['id']}/work-items", json=payload, headers=admin["headers"])

        assert resp.status_code == 400

    def test_update_item(self, client, admin, release):
        resp = client.put(
            f"/api/releases/{release['id']}/work-items/leaf",
            json={"title": "Typo in header", "remarks": "minor"},
            headers=admin["headers"],
        )

        item = resp.get_json()["data"]["workItem"]
        assert item["title"] == "Typo in header"
        assert item["type"] == "bug"
        assert item["parentId"] == "child"
        assert item["remarks"] == "minor"

    def test_delete_reparents_children(self, client, admin, super_admin, release):
        resp = client.delete(f"/api/releases/{release['id']}/work-items/child", headers=admin["headers"])

        assert resp.status_code == 200
        items = client.get(f"/api/releases/{release['id']}", headers=super_admin["headers"]) \
            .get_json()["data"]["release"]["workItems"]
        assert {i["_id"]: i["parentId"] for i in items} == {"root": None, "leaf": "root"}

    def test_unknown_parent_is_kept_and_listed_as_root(self, client, admin, super_admin, release):
        resp = client.post(
            f"/api/releases/{release['id']}/work-items",
            json={"_id": "stray", "type": "bug", "title": "Stray", "parentId": "ghost"},
            headers=admin["headers"],
        )

        assert resp.status_code == 201
        assert resp.get_json()["data"]["workItem"]["parentId"] == "ghost"
        ordered = client.get(f"/api/releases/{release['id']}", headers=super_admin["headers"]) \
            .get_json()["data"]["release"]["orderedWorkItems"]
        assert [(i["_id"], i["level"]) for i in ordered][-1] == ("stray", 0)

    def test_own_parent_is_rejected(self, client, admin, release):
        resp = client.post(
            f"/api/releases/{release['id']}/work-items",
            json={"_id": "self", "type": "bug", "title": "Loop", "parentId": "self"},
            headers=admin["headers"],
        )

        assert resp.status_code == 400

    def test_unknown_item_is_404(self, client, admin, release):
        resp = client.delete(f"/api/releases/{release['id']}/work-items/ghost", headers=admin["headers"])

        assert resp.status_code == 404

    def test_basic_user_cannot_edit(self, client, basic_user, release):
        resp = client.post(
            f"/api/releases/{release['id']}/work-items",
            json={"type": "bug", "title": "x"},
            headers=basic_user["headers"],
        )

        assert resp.status_code == 403
