# -*- coding: utf-8 -*-
from types import SimpleNamespace

import pytest

from client.api_client import APIError, TrackerAPIClient
from client.state import PromptsStore, ReleasesStore


class FakeSession:
    """按顺序返回预置响应，并记录每次请求参数"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.before_return = None

    def request(self, **kwargs):
        self.calls.append(kwargs)
        if self.before_return:
            self.before_return()
        status, body = self.responses.pop(0)
        content = body if isinstance(body, bytes) else b""
        return SimpleNamespace(status_code=status, json=lambda: body, content=content)


def _ok(data, message="Success"):
    return 200, {"code": 200, "message": message, "data": data}


def _client(*responses):
    session = FakeSession(*responses)
    return TrackerAPIClient("http://tracker.local/", session=session), session


class TestApiClient:

    def test_login_stores_token_and_attaches_it(self):
        api, session = _client(
            _ok({"user": {"id": 1}, "token": "tok-1"}),
            _ok({"user": {"id": 1, "email": "a@example.com"}}),
        )

        api.login("a@example.com", "secret1")
        me = api.me()

        assert me["email"] == "a@example.com"
        assert "Authorization" not in session.calls[0]["headers"]
        assert session.calls[1]["headers"]["Authorization"] == "Bearer tok-1"
        assert session.calls[1]["url"] == "http://tracker.local/api/auth/me"

    def test_error_envelope_raises(self):
        api, _ = _client((400, {"code": 400, "message": "Validation error", "error": "Validation error",
                                "details": ["Title is required"]}))

        with pytest.raises(APIError) as exc:
            api.create_release({})

        assert exc.value.status == 400
        assert exc.value.details == ["Title is required"]

    def test_logout_clears_token_even_on_failure(self):
        api, _ = _client((401, {"error": "Invalid or expired token"}))
        api.set_token("stale")

        with pytest.raises(APIError):
            api.logout()

        assert api.token is None

    def test_search_params(self):
        api, session = _client(_ok({"results": [], "totalCount": 0}))

        api.search("pay", limit=5, item_type="bug")

        assert session.calls[0]["params"] == {"q": "pay", "limit": 5, "type": "bug"}

    def test_export_returns_raw_bytes(self):
        api, session = _client((200, b"PK\x03\x04"), (400, {"error": "No work items to export"}))

        assert api.export_release(7, fmt="csv") == b"PK\x03\x04"
        assert session.calls[0]["params"] == {"format": "csv"}
        with pytest.raises(APIError) as exc:
            api.export_release(7)
        assert exc.value.status == 400


class TestReleasesStore:

    def test_fetch_applies_listing(self):
        api, session = _client(_ok({"releases": [{"id": 1}], "total": 1, "page": 1, "limit": 10, "totalPages": 1}))
        store = ReleasesStore(api)

        assert store.fetch(status="draft", search="") is True

        assert store.releases == [{"id": 1}]
        assert store.total_pages == 1
        assert store.loading is False
        assert session.calls[0]["params"] == {"status": "draft", "page": 1, "limit": 10}

    def test_fetch_one_sets_current(self):
        api, _ = _client(_ok({"release": {"id": 3, "orderedWorkItems": []}}))
        store = ReleasesStore(api)

        store.fetch_one(3)

        assert store.current == {"id": 3, "orderedWorkItems": []}

    def test_stale_response_is_discarded(self):
        api, session = _client(_ok({"releases": [{"id": 99}], "total": 1}))
        store = ReleasesStore(api)
        store.releases = [{"id": 1}]
        # 请求途中又发出了新的请求
        session.before_return = store.begin_request

        assert store.fetch() is False

        assert store.releases == [{"id": 1}]
        assert store.loading is True

    def test_failed_fetch_records_error(self):
        api, _ = _client((403, {"error": "Access denied"}))
        store = ReleasesStore(api)

        with pytest.raises(APIError):
            store.fetch()

        assert store.error == "Access denied"
        assert store.loading is False

    def test_create_update_delete_merge(self):
        api, _ = _client(
            _ok({"release": {"id": 2, "title": "New"}}),
            _ok({"release": {"id": 2, "title": "Renamed"}}),
            _ok(None),
        )
        store = ReleasesStore(api)
        store.releases, store.total = [{"id": 1, "title": "Old"}], 1
        store.current = {"id": 2, "title": "New", "orderedWorkItems": []}

        store.create({"title": "New"})
        assert [r["id"] for r in store.releases] == [2, 1]
        assert store.total == 2

        store.update(2, {"title": "Renamed"})
        assert store.releases[0]["title"] == "Renamed"
        assert store.current == {"id": 2, "title": "Renamed", "orderedWorkItems": []}

        store.delete(2)
        assert store.releases == [{"id": 1, "title": "Old"}]
        assert store.total == 1
        assert store.current is None


class TestPromptsStore:

    def test_fetch_joins_tags(self):
        api, session = _client(_ok({"prompts": [], "pagination": {"total": 0, "page": 2}}))
        store = PromptsStore(api)

        store.fetch(page=2, tags=["sql", "etl"])

        assert session.calls[0]["params"]["tags"] == "sql,etl"
        assert store.pagination["page"] == 2
        assert store.pagination["hasNext"] is False

    def test_actions_merge_by_id(self):
        api, _ = _client(
            _ok({"isFavorite": True, "prompt": {"id": 1, "isFavorite": True}}),
            _ok({"usageCount": 1, "prompt": {"id": 1, "isFavorite": True, "usageCount": 1}}),
            _ok({"prompt": {"id": 5, "title": "p (Copy)"}}),
        )
        store = PromptsStore(api)
        store.prompts = [{"id": 1, "isFavorite": False}, {"id": 2}]

        store.toggle_favorite(1)
        store.record_usage(1)
        store.duplicate(1)

        assert store.prompts[0] == {"id": 5, "title": "p (Copy)"}
        assert store.prompts[1] == {"id": 1, "isFavorite": True, "usageCount": 1}
        assert store.pagination["total"] == 1

    def test_mutation_error_is_kept(self):
        api, _ = _client((403, {"error": "Permission denied"}))
        store = PromptsStore(api)

        with pytest.raises(APIError):
            store.delete(3)

        assert store.error == "Permission denied"
