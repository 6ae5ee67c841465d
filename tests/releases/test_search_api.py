# -*- coding: utf-8 -*-
from services.search_service import SHORT_QUERY_MESSAGE


def _search(client, user, **params):
    return client.get("/api/search", query_string=params, headers=user["headers"]).get_json()["data"]


def test_short_query_returns_message(client, super_admin):
    data = _search(client, super_admin, q=" a ")

    assert data["results"] == []
    assert data["totalCount"] == 0
    assert data["message"] == SHORT_QUERY_MESSAGE


def test_title_match(client, super_admin, make_release):
    release = make_release(workItems=[
        {"type": "bug", "title": "Payment timeout"},
        {"type": "feature", "title": "Dark mode"},
    ])

    data = _search(client, super_admin, q="timeout")

    assert data["totalCount"] == 1
    hit = data["results"][0]
    assert hit["matchType"] == "title"
    assert hit["workItem"]["title"] == "Payment timeout"
    assert hit["release"]["id"] == release["id"]
    assert data["hasMore"] is False


def test_id_match_ranks_before_title(client, super_admin, make_release):
    make_release(workItems=[
        {"type": "bug", "title": "Fix PAY-12 regression"},
        {"type": "bug", "title": "Unrelated", "id": "PAY-12"},
    ])

    results = _search(client, super_admin, q="pay-12")["results"]

    assert [r["matchType"] for r in results] == ["id", "title"]
    assert results[0]["matchText"] == "PAY-12"


def test_type_filter_and_limit(client, super_admin, make_release):
    make_release(workItems=[
        {"type": "bug", "title": "Cache bug one"},
        {"type": "bug", "title": "Cache bug two"},
        {"type": "epic", "title": "Cache epic"},
    ])

    data = _search(client, super_admin, q="cache", type="bug", limit=1)

    assert data["totalCount"] == 2
    assert len(data["results"]) == 1
    assert data["hasMore"] is True


def test_remarks_mentions_do_not_hide_older_title_match(client, super_admin, make_release):
    make_release(title="Old", workItems=[{"type": "bug", "title": "zzfoo crash"}])
    for title in ("Newer", "Newest"):
        make_release(title=title, workItems=[{"type": "bug", "title": "Other", "remarks": "see zzfoo"}])

    data = _search(client, super_admin, q="zzfoo", limit=1)

    assert data["totalCount"] == 1
    assert data["results"][0]["workItem"]["title"] == "zzfoo crash"
    assert data["results"][0]["release"]["title"] == "Old"


def test_query_matching_field_names_only_hits_titles(client, super_admin, make_release):
    make_release(title="Old", workItems=[{"type": "bug", "title": "Retitle button"}])
    for title in ("Newer", "Newest"):
        make_release(title=title, workItems=[{"type": "bug", "title": "Other"}])

    data = _search(client, super_admin, q="itle", limit=1)

    assert data["totalCount"] == 1
    assert data["results"][0]["workItem"]["title"] == "Retitle button"


def test_type_filter_applies_before_candidate_cutoff(client, super_admin, make_release):
    make_release(title="Old", workItems=[{"type": "bug", "title": "Cache bug"}])
    for title in ("Newer", "Newest"):
        make_release(title=title, workItems=[{"type": "epic", "title": "Cache epic"}])

    data = _search(client, super_admin, q="cache", type="bug", limit=1)

    assert data["totalCount"] == 1
    assert data["results"][0]["release"]["title"] == "Old"


def test_unknown_type_returns_nothing(client, super_admin, make_release):
    make_release(workItems=[{"type": "bug", "title": "Cache bug"}])

    data = _search(client, super_admin, q="cache", type="spike")

    assert data["results"] == []
    assert data["totalCount"] == 0
    assert data["hasMore"] is False


def test_basic_user_only_sees_published(client, basic_user, make_release):
    make_release(title="Draft", workItems=[{"type": "bug", "title": "Secret widget"}])
    make_release(title="Live", isPublished=True, workItems=[{"type": "bug", "title": "Public widget"}])

    results = _search(client, basic_user, q="widget")["results"]

    assert [r["release"]["title"] for r in results] == ["Live"]


def test_search_requires_auth(client):
    assert client.get("/api/search?q=anything").status_code == 401
