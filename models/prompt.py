# -*- coding: utf-8 -*-
"""
prompt.py
--------------------------------------------------------------------
Prompt：用户自建的可复用文本片段。
- category 保存 PromptCategory 的 id（字符串），或兜底值 "general"。
- tags 统一小写去重。
- 删除为软删除；创建者或管理员可编辑。
"""

from extensions.database import db
from .mixins import TimestampMixin, SoftDeleteMixin, COMMON_TABLE_ARGS
from utils.datetime_helpers import to_iso


class Prompt(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = "prompt"
    __table_args__ = (
        db.Index("ix_prompt_category_active", "category", "is_active"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    description = db.Column(db.String(500))
    category = db.Column(db.String(64), nullable=False, index=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    is_favorite = db.Column(db.Boolean, nullable=False, default=False, server_default="0", index=True)
    usage_count = db.Column(db.Integer, nullable=False, default=0, server_default="0", index=True)
    created_by = db.Column(
        db.Integer, db.ForeignKey("user.id", ondelete="SET NULL"), index=True
    )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags or []),
            "isFavorite": bool(self.is_favorite),
            "usageCount": self.usage_count or 0,
            "isActive": bool(self.is_active),
            "createdBy": self.created_by,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
