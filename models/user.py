# -*- coding: utf-8 -*-
"""
user.py
--------------------------------------------------------------------
用户实体。
说明：
- role 为系统角色：basic / admin / super_admin。
- email 唯一，入库前统一小写去空白。
- is_active 控制账号启用状态；物理删除仅限超级管理员操作。
- applications 为该用户可访问的应用名称列表（超级管理员不受限）。
- reset_password_token 同一时刻至多一个，过期或使用后作废。
"""

from extensions.database import db
from .mixins import TimestampMixin, COMMON_TABLE_ARGS
from constants.roles import UserRole, ROLE_LABELS
from utils.datetime_helpers import to_iso, utcnow


class User(TimestampMixin, db.Model):
    __tablename__ = "user"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default=UserRole.BASIC.value,
                     server_default=UserRole.BASIC.value)
    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default="1")
    applications = db.Column(db.JSON, nullable=False, default=list)
    reset_password_token = db.Column(db.String(128), index=True)
    reset_password_expires = db.Column(db.DateTime)
    last_login_at = db.Column(db.DateTime)

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"

    @property
    def role_label(self) -> str:
        return ROLE_LABELS.get(self.role, self.role)

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN.value

    def has_valid_reset_token(self, token: str) -> bool:
        if not token or not self.reset_password_token:
            return False
        if self.reset_password_token != token:
            return False
        return bool(self.reset_password_expires and self.reset_password_expires > utcnow())

    def clear_reset_token(self):
        self.reset_password_token = None
        self.reset_password_expires = None

    def to_dict(self):
        # 密码与重置 token 永不外发
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "role_label": self.role_label,
            "isActive": bool(self.is_active),
            "applications": list(self.applications or []),
            "lastLogin": to_iso(self.last_login_at),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
