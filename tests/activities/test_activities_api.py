import pytest

DENIED = "Access denied. Super Admin role required."


@pytest.mark.parametrize("path", ["/api/activities", "/api/activities/stats"])
def test_admin_is_denied(client, admin, path):
    resp = client.get(path, headers=admin["headers"])

    assert resp.status_code == 403
    assert resp.get_json()["error"] == DENIED


def test_list_logs_the_view(client, super_admin):
    first = client.get("/api/activities?application=all", headers=super_admin["headers"]).get_json()["data"]
    second = client.get("/api/activities", headers=super_admin["headers"]).get_json()["data"]

    assert first["totalCount"] == 0
    assert second["totalCount"] == 1
    assert second["activities"][0]["action"] == "report_generated"
    assert second["activities"][0]["userId"] == super_admin["id"]
    assert second["hasMore"] is False


def test_list_paging(client, super_admin):
    for _ in range(3):
        client.post("/api/activities", json={"action": "login", "resource": "user", "details": "x"},
                    headers=super_admin["headers"])

    data = client.get("/api/activities?action=login&limit=2", headers=super_admin["headers"]).get_json()["data"]

    assert data["totalCount"] == 3
    assert len(data["activities"]) == 2
    assert data["hasMore"] is True


def test_create_activity(client, super_admin):
    resp = client.post(
        "/api/activities",
        json={"action": "release_created", "resource": "release", "details": "manual", "application": "NRE",
              "resourceId": "42"},
        headers=super_admin["headers"],
    )

    assert resp.status_code == 201
    assert resp.get_json()["message"] == "Activity logged successfully"
    activity = resp.get_json()["data"]["activity"]
    assert activity["application"] == "NRE"
    assert activity["userEmail"] == super_admin["email"]


@pytest.mark.parametrize(
    "payload",
    [
        {"action": "dance", "resource": "user", "details": "x"},
        {"action": "login", "resource": "planet", "details": "x"},
        {"action": "login", "resource": "user"},
    ],
)
def test_create_validation(client, super_admin, payload):
    resp = client.post("/api/activities", json=payload, headers=super_admin["headers"])

    assert resp.status_code == 400


def test_stats_shape(client, super_admin, make_release):
    make_release()

    stats = client.get("/api/activities/stats", headers=super_admin["headers"]).get_json()["data"]

    assert stats["totalActivities"] == 1
    assert stats["uniqueUsers"] == 1
    assert stats["activitiesByAction"] == {"release_created": 1}
    assert stats["activitiesByApplication"][0]["application"] == "NRE"
    assert stats["topUsers"][0]["activityCount"] == 1
    assert sum(day["count"] for day in stats["activityTimeline"]) == 1
