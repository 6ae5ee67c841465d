from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    系统角色，严格层级：super_admin ⊇ admin ⊇ basic
    - 大部分调用点按集合成员判断，而非数值比较
    """

    SUPER_ADMIN = "super_admin"  # 全部权限，可管理超级管理员
    ADMIN = "admin"              # 管理发布、项目、用户
    BASIC = "basic"              # 只读已发布内容，维护自己的 prompt

    @classmethod
    def values(cls) -> list[str]:
        return [role.value for role in cls]

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls.values()


ROLE_LABELS: dict[str, str] = {
    UserRole.SUPER_ADMIN.value: "Super Admin",
    UserRole.ADMIN.value: "Admin",
    UserRole.BASIC.value: "Basic",
}

ALL_ROLES: set[str] = set(UserRole.values())

# 管理类操作允许的角色集合
ADMIN_ROLES: tuple[str, ...] = (UserRole.SUPER_ADMIN.value, UserRole.ADMIN.value)

DEFAULT_ROLE = UserRole.BASIC


def normalize_role(raw: str | None, default: UserRole = DEFAULT_ROLE) -> str:
    """
    清洗外部传入的角色值：
    - None 或空 => 默认
    - 去掉首尾空白、转小写
    - 校验是否在已注册角色中
    """
    if not raw:
        return default.value
    value = raw.strip().lower()
    if value not in ALL_ROLES:
        raise ValueError(f"Invalid role: {raw}")
    return value
