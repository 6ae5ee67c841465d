import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class APIError(Exception):
    """非 2xx 响应：保留状态码、错误信息与字段级 details"""

    def __init__(self, status: int, message: str, details: Optional[List[str]] = None, payload=None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details or []
        self.payload = payload


class TrackerAPIClient:
    """Tracker 服务的 HTTP 客户端，统一封装 token 与响应信封"""

    def __init__(self, base_url: str, timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token: Optional[str] = None
        self.session = session or requests.Session()

    def set_token(self, token: Optional[str]):
        """设置认证token"""
        self.token = token

    def _headers(self, attach_token: bool) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if attach_token and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, method: str, path: str, params=None, json_data=None, attach_token: bool = True):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method=method.upper(),
                url=url,
                headers=self._headers(attach_token),
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method.upper(), url, e)
            raise APIError(0, str(e)) from e
        logger.debug("%s %s -> %s", method.upper(), url, response.status_code)
        return response

    def request(self, method: str, path: str,
                params: Optional[Dict] = None,
                json_data: Optional[Dict] = None,
                attach_token: bool = True) -> Any:
        """
        发送请求并解包 {"code","message","data"} 信封，返回 data；
        非 2xx 抛出 APIError
        """
        response = self._send(method, path, params=params, json_data=json_data, attach_token=attach_token)
        try:
            body = response.json()
        except ValueError:
            body = None
        if not 200 <= response.status_code < 300:
            body = body if isinstance(body, dict) else {}
            message = body.get("error") or body.get("message") or f"HTTP {response.status_code}"
            raise APIError(response.status_code, message, body.get("details"), payload=body)
        if not isinstance(body, dict):
            return None
        return body.get("data")

    # ---------- 认证 ----------
    def login(self, email: str, password: str) -> dict:
        data = self.request("POST", "/api/auth/login",
                            json_data={"email": email, "password": password}, attach_token=False)
        self.set_token(data["token"])
        return data["user"]

    def register(self, email: str, name: str, password: str) -> dict:
        data = self.request("POST", "/api/auth/register",
                            json_data={"email": email, "name": name, "password": password},
                            attach_token=False)
        self.set_token(data["token"])
        return data["user"]

    def logout(self):
        try:
            self.request("POST", "/api/auth/logout")
        finally:
            self.set_token(None)

    def me(self) -> dict:
        return self.request("GET", "/api/auth/me")["user"]

    # ---------- 发布 ----------
    def list_releases(self, **params) -> dict:
        return self.request("GET", "/api/releases", params=params)

    def get_release(self, release_id: int) -> dict:
        return self.request("GET", f"/api/releases/{release_id}")["release"]

    def create_release(self, payload: dict) -> dict:
        return self.request("POST", "/api/releases", json_data=payload)["release"]

    def update_release(self, release_id: int, payload: dict) -> dict:
        return self.request("PUT", f"/api/releases/{release_id}", json_data=payload)["release"]

    def delete_release(self, release_id: int):
        self.request("DELETE", f"/api/releases/{release_id}")

    def export_release(self, release_id: int, fmt: str = "xlsx") -> bytes:
        response = self._send("GET", f"/api/releases/{release_id}/export", params={"format": fmt})
        if not 200 <= response.status_code < 300:
            raise APIError(response.status_code, f"Export failed with HTTP {response.status_code}")
        return response.content

    def search(self, query: str, limit: int = 20, item_type: Optional[str] = None) -> dict:
        params = {"q": query, "limit": limit}
        if item_type:
            params["type"] = item_type
        return self.request("GET", "/api/search", params=params)

    # ---------- Prompt ----------
    def list_prompts(self, **params) -> dict:
        return self.request("GET", "/api/prompts", params=params)

    def create_prompt(self, payload: dict) -> dict:
        return self.request("POST", "/api/prompts", json_data=payload)["prompt"]

    def update_prompt(self, prompt_id: int, payload: dict) -> dict:
        return self.request("PUT", f"/api/prompts/{prompt_id}", json_data=payload)["prompt"]

    def delete_prompt(self, prompt_id: int):
        self.request("DELETE", f"/api/prompts/{prompt_id}")

    def toggle_favorite(self, prompt_id: int) -> dict:
        return self.request("POST", f"/api/prompts/{prompt_id}/favorite")["prompt"]

    def increment_usage(self, prompt_id: int) -> dict:
        return self.request("POST", f"/api/prompts/{prompt_id}/usage")["prompt"]

    def duplicate_prompt(self, prompt_id: int) -> dict:
        return self.request("POST", f"/api/prompts/{prompt_id}/duplicate")["prompt"]
