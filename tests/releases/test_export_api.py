# -*- coding: utf-8 -*-
import io

from openpyxl import load_workbook


def _release_with_items(make_release):
    return make_release(
        title="Winter",
        workItems=[
            {"_id": "a", "type": "bug", "title": "Crash, on start", "id": "BUG-1"},
            {"_id": "b", "type": "epic", "title": "Checkout", "id": "EP-1"},
            {"_id": "c", "type": "feature", "title": 'Say "hi"', "parentId": "b"},
        ],
    )


def test_csv_export(client, super_admin, make_release):
    release = _release_with_items(make_release)

    resp = client.get(f"/api/releases/{release['id']}/export?format=csv", headers=super_admin["headers"])

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    disposition = resp.headers["Content-Disposition"]
    assert "attachment" in disposition
    assert "NRE_Winter_WorkItems_" in disposition
    lines = resp.data.decode("utf-8").splitlines()
    assert lines[0] == "Type,ID,Title,Flag Name,Remarks,Parent,Hyperlink,Created Date,Updated Date"
    assert lines[1].startswith("Epic,EP-1,Checkout,")
    assert lines[2].startswith('Feature,,"Say ""hi""",,,Checkout,')
    assert lines[3].startswith('Bug,BUG-1,"Crash, on start",')


def test_xlsx_export(client, super_admin, make_release):
    release = _release_with_items(make_release)

    resp = client.get(f"/api/releases/{release['id']}/export", headers=super_admin["headers"])

    assert resp.status_code == 200
    assert resp.data[:2] == b"PK"
    sheet = load_workbook(io.BytesIO(resp.data))["Work Items"]
    assert sheet.cell(row=1, column=1).value == "Type"
    assert [sheet.cell(row=r, column=3).value for r in range(2, 5)] == ["Checkout", 'Say "hi"', "Crash, on start"]


def test_export_without_items(client, super_admin, make_release):
    release = make_release()

    resp = client.get(f"/api/releases/{release['id']}/export", headers=super_admin["headers"])

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No work items to export"


def test_unknown_format(client, super_admin, make_release):
    release = _release_with_items(make_release)

    resp = client.get(f"/api/releases/{release['id']}/export?format=pdf", headers=super_admin["headers"])

    assert resp.status_code == 400


def test_export_stats(client, super_admin, make_release):
    release = _release_with_items(make_release)

    resp = client.get(f"/api/releases/{release['id']}/export/stats", headers=super_admin["headers"])

    assert resp.get_json()["data"] == {
        "total": 3, "epics": 1, "features": 1, "userStories": 0, "bugs": 1, "incidents": 0,
    }


def test_export_is_logged(client, super_admin, make_release):
    release = _release_with_items(make_release)
    client.get(f"/api/releases/{release['id']}/export?format=csv", headers=super_admin["headers"])

    resp = client.get("/api/activities?action=release_exported", headers=super_admin["headers"])

    activities = resp.get_json()["data"]["activities"]
    assert len(activities) == 1
    assert activities[0]["resourceId"] == str(release["id"])
