import pytest


def test_defaults_are_listed(client, basic_user):
    resp = client.get("/api/applications", headers=basic_user["headers"])

    names = [a["name"] for a in resp.get_json()["data"]["applications"]]
    assert {"NRE", "NVE", "FMS"} <= set(names)


def test_create_requires_super_admin(client, admin):
    resp = client.post("/api/applications", json={"name": "Atlas", "displayName": "Atlas"}, headers=admin["headers"])

    assert resp.status_code == 403


@pytest.mark.parametrize(
    "payload, status",
    [
        ({"name": "Atlas"}, 400),
        ({"name": "A", "displayName": "A"}, 400),
        ({"name": "bad/name", "displayName": "Bad"}, 400),
        ({"name": "nre", "displayName": "Dup"}, 409),
    ],
)
def test_create_validation(client, super_admin, payload, status):
    resp = client.post("/api/applications", json=payload, headers=super_admin["headers"])

    assert resp.status_code == status


def test_application_lifecycle(client, super_admin):
    created = client.post(
        "/api/applications",
        json={"name": "Atlas 2.0", "displayName": "Atlas", "description": "maps"},
        headers=super_admin["headers"],
    )
    assert created.status_code == 201
    app_id = created.get_json()["data"]["application"]["id"]

    updated = client.put(f"/api/applications/{app_id}", json={"isActive": False}, headers=super_admin["headers"])
    assert updated.get_json()["data"]["application"]["isActive"] is False

    # 停用的应用不能再用于创建发布
    resp = client.post(
        "/api/releases",
        json={"title": "t", "applicationName": "Atlas 2.0", "description": "d", "type": "minor"},
        headers=super_admin["headers"],
    )
    assert resp.status_code == 400

    assert client.delete(f"/api/applications/{app_id}", headers=super_admin["headers"]).status_code == 200
    assert client.get(f"/api/applications/{app_id}", headers=super_admin["headers"]).status_code == 404
