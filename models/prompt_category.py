# -*- coding: utf-8 -*-
"""
prompt_category.py
--------------------------------------------------------------------
Prompt 分类（可选父子层级，parent_id 指向另一分类）。
- prompt_count 为冗余计数，随 prompt 写入或批量重算维护。
- 父分类不存在 / 已失效时视为根分类。
"""

from extensions.database import db
from .mixins import TimestampMixin, SoftDeleteMixin, COMMON_TABLE_ARGS
from constants.prompt import DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON
from utils.datetime_helpers import to_iso


class PromptCategory(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = "prompt_category"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.String(500))
    color = db.Column(db.String(7), nullable=False, default=DEFAULT_CATEGORY_COLOR)
    icon = db.Column(db.String(50), nullable=False, default=DEFAULT_CATEGORY_ICON)
    parent_id = db.Column(db.Integer, index=True)
    order_no = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    prompt_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    created_by = db.Column(db.Integer)

    @property
    def key(self) -> str:
        """Prompt.category 中保存的引用值"""
        return str(self.id)

    def to_dict(self, with_children: bool = False):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "icon": self.icon,
            "parentId": self.parent_id,
            "order": self.order_no,
            "promptCount": self.prompt_count or 0,
            "isActive": bool(self.is_active),
            "createdBy": self.created_by,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
        if with_children:
            data["children"] = []
        return data
