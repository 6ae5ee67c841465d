import uuid

import pytest


@pytest.fixture
def project_data():
    suffix = uuid.uuid4().hex[:6]
    return {
        "name": f"Project {suffix}",
        "code": f"prj-{suffix}",
        "description": "示例项目",
        "startDate": "2024-01-01",
        "technologies": ["flask", "react"],
    }


@pytest.fixture
def project(client, admin, project_data):
    resp = client.post("/api/projects", json=project_data, headers=admin["headers"])
    assert resp.status_code == 201
    return resp.get_json()["data"]["project"]


def test_create_project(project, project_data, admin):
    assert project["name"] == project_data["name"]
    assert project["code"] == project_data["code"].upper()
    assert project["status"] == "planning"
    assert project["manager"]["id"] == admin["id"]
    assert project["technologies"] == ["flask", "react"]


def test_create_requires_admin(client, basic_user, project_data):
    resp = client.post("/api/projects", json=project_data, headers=basic_user["headers"])

    assert resp.status_code == 403


def test_missing_fields(client, admin):
    resp = client.post("/api/projects", json={"name": "x"}, headers=admin["headers"])

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Missing required fields: name, description, code, startDate"


def test_duplicate_code(client, admin, project, project_data):
    payload = dict(project_data, name="Other", code=project_data["code"].lower())

    resp = client.post("/api/projects", json=payload, headers=admin["headers"])

    assert resp.status_code == 409


def test_end_date_must_follow_start(client, admin, project):
    resp = client.put(f"/api/projects/{project['id']}", json={"endDate": "2023-12-31"}, headers=admin["headers"])

    assert resp.status_code == 400
    assert "End date must be after start date" in resp.get_json()["details"]


def test_list_projects(client, basic_user, project):
    resp = client.get("/api/projects", query_string={"search": project["code"]}, headers=basic_user["headers"])

    assert resp.status_code == 200
    assert [p["id"] for p in resp.get_json()["data"]["projects"]] == [project["id"]]


def test_project_lifecycle(client, admin, super_admin, project):
    update_resp = client.put(f"/api/projects/{project['id']}", json={"status": "active"}, headers=admin["headers"])
    assert update_resp.get_json()["data"]["project"]["status"] == "active"

    assert client.delete(f"/api/projects/{project['id']}", headers=admin["headers"]).status_code == 403
    assert client.delete(f"/api/projects/{project['id']}", headers=super_admin["headers"]).status_code == 200

    # 软删除后查询不到，列表中标记为失效
    assert client.get(f"/api/projects/{project['id']}", headers=admin["headers"]).status_code == 404
    listing = client.get("/api/projects?active=false", headers=admin["headers"]).get_json()["data"]["projects"]
    assert [p["isActive"] for p in listing] == [False]
