"""客户端状态容器。

数据全部来自服务端响应，本地只做缓存与合并：
- 列表请求带代次（generation），晚于当前代次之前发出的响应被丢弃；
- 写操作成功后按 id 合并到本地列表。
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from client.api_client import APIError, TrackerAPIClient

logger = logging.getLogger(__name__)


class _Store:

    def __init__(self, client: TrackerAPIClient):
        self.client = client
        self.loading = False
        self.error: Optional[str] = None
        self._generation = 0

    def begin_request(self) -> int:
        self._generation += 1
        self.loading = True
        self.error = None
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _finish(self, generation: int, error: Optional[str] = None) -> bool:
        if not self.is_current(generation):
            logger.debug("discard stale response generation=%s current=%s", generation, self._generation)
            return False
        self.loading = False
        self.error = error
        return True

    def _run(self, call: Callable[[], Any], apply: Callable[[Any], None]) -> bool:
        """执行请求；仅当期间没有更新的请求发出时才写入状态"""
        generation = self.begin_request()
        try:
            data = call()
        except APIError as e:
            self._finish(generation, e.message)
            raise
        if not self._finish(generation):
            return False
        apply(data)
        return True

    def _mutate(self, call: Callable[[], Any]):
        self.error = None
        try:
            return call()
        except APIError as e:
            self.error = e.message
            raise


def _replace(items: List[dict], updated: dict) -> List[dict]:
    return [updated if item.get("id") == updated.get("id") else item for item in items]


class ReleasesStore(_Store):

    def __init__(self, client: TrackerAPIClient):
        super().__init__(client)
        self.releases: List[dict] = []
        self.current: Optional[dict] = None
        self.total = 0
        self.page = 1
        self.limit = 10
        self.total_pages = 0

    def apply_list(self, data: Dict[str, Any]):
        self.releases = list(data.get("releases") or [])
        self.total = data.get("total", len(self.releases))
        self.page = data.get("page", 1)
        self.limit = data.get("limit", self.limit)
        self.total_pages = data.get("totalPages", 0)

    def fetch(self, page: int = 1, limit: int = 10, **filters) -> bool:
        params = {k: v for k, v in filters.items() if v not in (None, "")}
        params.update(page=page, limit=limit)
        return self._run(lambda: self.client.list_releases(**params), self.apply_list)

    def fetch_one(self, release_id: int) -> bool:
        def apply(release):
            self.current = release

        return self._run(lambda: self.client.get_release(release_id), apply)

    def create(self, payload: dict) -> dict:
        release = self._mutate(lambda: self.client.create_release(payload))
        self.releases = [release] + self.releases
        self.total += 1
        return release

    def update(self, release_id: int, payload: dict) -> dict:
        release = self._mutate(lambda: self.client.update_release(release_id, payload))
        self.releases = _replace(self.releases, release)
        if self.current and self.current.get("id") == release_id:
            self.current = dict(self.current, **release)
        return release

    def delete(self, release_id: int):
        self._mutate(lambda: self.client.delete_release(release_id))
        before = len(self.releases)
        self.releases = [r for r in self.releases if r.get("id") != release_id]
        if len(self.releases) < before:
            self.total = max(self.total - 1, 0)
        if self.current and self.current.get("id") == release_id:
            self.current = None


class PromptsStore(_Store):

    def __init__(self, client: TrackerAPIClient):
        super().__init__(client)
        self.prompts: List[dict] = []
        self.pagination: Dict[str, Any] = {
            "page": 1, "limit": 10, "total": 0, "totalPages": 0, "hasNext": False, "hasPrev": False,
        }

    def apply_list(self, data: Dict[str, Any]):
        self.prompts = list(data.get("prompts") or [])
        self.pagination = dict(self.pagination, **(data.get("pagination") or {}))

    def fetch(self, page: int = 1, limit: int = 10, **filters) -> bool:
        params = {k: v for k, v in filters.items() if v not in (None, "")}
        if isinstance(params.get("tags"), (list, tuple)):
            params["tags"] = ",".join(params["tags"])
        params.update(page=page, limit=limit)
        return self._run(lambda: self.client.list_prompts(**params), self.apply_list)

    def _merge(self, prompt: dict) -> dict:
        self.prompts = _replace(self.prompts, prompt)
        return prompt

    def _prepend(self, prompt: dict) -> dict:
        self.prompts = [prompt] + self.prompts
        self.pagination["total"] = self.pagination.get("total", 0) + 1
        return prompt

    def create(self, payload: dict) -> dict:
        return self._prepend(self._mutate(lambda: self.client.create_prompt(payload)))

    def update(self, prompt_id: int, payload: dict) -> dict:
        return self._merge(self._mutate(lambda: self.client.update_prompt(prompt_id, payload)))

    def delete(self, prompt_id: int):
        self._mutate(lambda: self.client.delete_prompt(prompt_id))
        before = len(self.prompts)
        self.prompts = [p for p in self.prompts if p.get("id") != prompt_id]
        if len(self.prompts) < before:
            self.pagination["total"] = max(self.pagination.get("total", 0) - 1, 0)

    def toggle_favorite(self, prompt_id: int) -> dict:
        return self._merge(self._mutate(lambda: self.client.toggle_favorite(prompt_id)))

    def record_usage(self, prompt_id: int) -> dict:
        return self._merge(self._mutate(lambda: self.client.increment_usage(prompt_id)))

    def duplicate(self, prompt_id: int) -> dict:
        return self._prepend(self._mutate(lambda: self.client.duplicate_prompt(prompt_id)))
