# models/mixins.py
from sqlalchemy import func, DateTime
from extensions.database import db
from utils.datetime_helpers import utcnow

COMMON_TABLE_ARGS = {
    "mysql_engine": "InnoDB",
    "mysql_charset": "utf8mb4",
    "mysql_collate": "utf8mb4_unicode_ci",
}


class TimestampMixin:
    created_at = db.Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), index=True)
    updated_at = db.Column(DateTime, nullable=False, default=utcnow, server_default=func.now(),
                           onupdate=utcnow, index=True)


class SoftDeleteMixin:
    """软删除混入类：is_active = False 即视为删除"""
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default="1",
        index=True,
        comment="是否有效"
    )
    deleted_at = db.Column(
        DateTime,
        comment="删除时间"
    )
    deleted_by = db.Column(
        db.Integer,
        comment="删除人ID"
    )

    def soft_delete(self, user_id=None):
        """
        执行软删除
        :param user_id: 执行删除操作的用户ID
        """
        self.is_active = False
        self.deleted_at = utcnow()
        self.deleted_by = user_id

    def restore(self):
        """恢复软删除的记录"""
        self.is_active = True
        self.deleted_at = None
        self.deleted_by = None


class SnapshotMixin:
    """快照字段统一序列化：{"id", "name", "email"}，写入后不再同步"""

    @staticmethod
    def snapshot(user_id, name, email):
        if user_id is None and not name and not email:
            return None
        return {"id": user_id, "name": name, "email": email}
