# controllers/auth_helpers.py
from __future__ import annotations

from functools import wraps

from flask import g, request

from constants.roles import UserRole
from services.token_service import TokenService
from utils.exceptions import AuthenticationError
from utils.permissions import build_permission_scope, get_permission_scope
from utils.response import json_response


def _attach_claims(claims: dict):
    g.claims = claims
    g.current_user = None
    g.permission_scope = build_permission_scope(claims)
    return g.permission_scope


def _reset_context():
    g.claims = None
    g.current_user = None
    g.permission_scope = None


def auth_required():
    """
    鉴权装饰器：
      - token 取自 Authorization: Bearer <token>，其次 auth_token cookie
      - 校验签名 / 过期 / 注销，失败统一 401
      - 注入 g.claims 与 g.permission_scope
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            _reset_context()
            token = TokenService.extract_token(request)
            if not token:
                return json_response(code=401, message="Authentication required")
            claims = TokenService.verify(token)
            if not claims:
                return json_response(code=401, message="Invalid or expired token")
            try:
                _attach_claims(claims)
            except AuthenticationError as e:
                return json_response(code=401, message=e.message)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def optional_auth():
    """
    可选鉴权：
      - 无 token 或 token 无效：g.permission_scope = None，继续
      - token 有效：注入 g.permission_scope
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            _reset_context()
            claims = TokenService.verify(TokenService.extract_token(request))
            if claims:
                try:
                    _attach_claims(claims)
                except AuthenticationError:
                    _reset_context()
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def _normalize_role_value(value: UserRole | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, UserRole):
        return value.value
    value = value.strip().lower()
    return value or None


def require_roles(*roles: UserRole | str, message: str = "Insufficient permissions"):
    """
    角色校验，依赖 @auth_required 预先注入的 PermissionScope。
    """
    normalized = {_normalize_role_value(role) for role in roles if role}
    if not normalized:
        raise ValueError("require_roles 需要至少指定一个角色")

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            scope = get_permission_scope()
            if not scope:
                return json_response(code=401, message="Authentication required")
            if not scope.has_role(*normalized):
                return json_response(code=403, message=message)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


ADMIN_OR_ABOVE = (UserRole.SUPER_ADMIN, UserRole.ADMIN)
SUPER_ADMIN_ONLY = (UserRole.SUPER_ADMIN,)
