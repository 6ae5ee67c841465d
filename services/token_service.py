# services/token_service.py
from flask import current_app
from extensions.jwt import create_token, revoke_token, verify_token


class TokenService:
    """
    token 签发 / 校验 / 传输。
    传输约定：Authorization: Bearer <token> 优先，其次 auth_token cookie。
    """

    @staticmethod
    def issue(user) -> str:
        return create_token(user)

    @staticmethod
    def verify(token: str | None):
        return verify_token(token)

    @staticmethod
    def revoke(token: str | None):
        if not token:
            return
        revoke_token(token)

    @staticmethod
    def extract_token(req) -> str | None:
        auth_header = req.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header[7:].strip()
            if token:
                return token
        cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "auth_token")
        return req.cookies.get(cookie_name) or None

    @staticmethod
    def set_auth_cookie(response, token: str):
        cfg = current_app.config
        response.set_cookie(
            cfg.get("AUTH_COOKIE_NAME", "auth_token"),
            token,
            max_age=cfg["JWT_EXPIRES_SECONDS"],
            httponly=True,
            secure=cfg.get("AUTH_COOKIE_SECURE", False),
            samesite="Lax",
            path="/",
        )
        return response

    @staticmethod
    def clear_auth_cookie(response):
        response.delete_cookie(current_app.config.get("AUTH_COOKIE_NAME", "auth_token"), path="/")
        return response
