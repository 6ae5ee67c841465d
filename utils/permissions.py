from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from flask import g

from constants.roles import UserRole, ADMIN_ROLES
from utils.exceptions import AuthenticationError, NotFoundError


def _normalize_role_value(value: UserRole | str | None) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, UserRole):
        return value.value
    return value.strip().lower()


@dataclass(frozen=True)
class PermissionScope:
    """
    由 token claims 构造的请求级权限视图（无状态，不查库）。
    """
    user_id: int
    email: str
    name: str
    role: str

    def has_role(self, *roles: UserRole | str) -> bool:
        normalized = {_normalize_role_value(r) for r in roles if r}
        if not normalized:
            return False
        return self.role in normalized

    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    def is_admin(self) -> bool:
        """admin 或 super_admin"""
        return self.role in ADMIN_ROLES

    def can_manage(self, owner_id: int | None) -> bool:
        """资源属主或管理员可编辑"""
        return self.is_admin() or (owner_id is not None and int(owner_id) == int(self.user_id))


def build_permission_scope(claims: dict) -> PermissionScope:
    if not claims or claims.get("userId") is None:
        raise AuthenticationError("Invalid or expired token")
    return PermissionScope(
        user_id=int(claims["userId"]),
        email=claims.get("email") or "",
        name=claims.get("name") or "",
        role=_normalize_role_value(claims.get("role")) or UserRole.BASIC.value,
    )


def get_permission_scope(default=None) -> PermissionScope | None:
    return getattr(g, "permission_scope", default)


def require_scope() -> PermissionScope:
    scope = get_permission_scope()
    if scope is None:
        raise AuthenticationError()
    return scope


def get_current_user():
    """
    获取当前登录用户实体（按 token 中的 userId 查库，结果缓存在 g 上）
    """
    cached = getattr(g, "current_user", None)
    if cached is not None:
        return cached
    scope = require_scope()
    from repositories.user_repository import UserRepository  # 避免循环导入
    user = UserRepository.find_by_id(scope.user_id)
    if not user:
        raise NotFoundError("User not found")
    g.current_user = user
    return user


def accessible_applications(user) -> Optional[Sequence[str]]:
    """
    返回允许访问的应用名称列表：
      - super_admin => None（表示全量）
      - 否则返回用户的应用白名单
    """
    if user.role == UserRole.SUPER_ADMIN.value:
        return None
    return list(user.applications or [])


def can_access_application(user, application_name: str) -> bool:
    allowed = accessible_applications(user)
    return allowed is None or application_name in allowed

