# -*- coding: utf-8 -*-
"""
release.py
--------------------------------------------------------------------
发布实体。
说明：
- version 可选；填写时需满足语义化版本格式且全局唯一。
- work_items 以 JSON 数组内嵌于发布中，节点间通过 parentId 指向同一发布内
  另一节点的 _id，构成森林。
- author_* 为创建时的作者快照，不随用户资料变化同步。
- 发布（is_published）一个 draft 版本时状态自动变为 stable。
"""

from extensions.database import db
from .mixins import TimestampMixin, SnapshotMixin, COMMON_TABLE_ARGS
from constants.release import ReleaseStatus, DEFAULT_RELEASE_STATUS
from utils.datetime_helpers import to_iso, utcnow


class Release(TimestampMixin, SnapshotMixin, db.Model):
    __tablename__ = "release"
    __table_args__ = (
        db.Index("ix_release_published_date", "is_published", "release_date"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    version = db.Column(db.String(64), unique=True)
    title = db.Column(db.String(200), nullable=False)
    application_name = db.Column(db.String(50), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    release_date = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_RELEASE_STATUS,
                       server_default=DEFAULT_RELEASE_STATUS, index=True)
    type = db.Column(db.String(32), nullable=False, index=True)
    features = db.Column(db.JSON, nullable=False, default=list)
    bug_fixes = db.Column(db.JSON, nullable=False, default=list)
    breaking_changes = db.Column(db.JSON, nullable=False, default=list)
    work_items = db.Column(db.JSON, nullable=False, default=list)
    download_url = db.Column(db.String(500))
    download_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    is_published = db.Column(db.Boolean, nullable=False, default=False, server_default="0", index=True)

    # 作者快照
    author_id = db.Column(db.Integer, index=True)
    author_name = db.Column(db.String(100))
    author_email = db.Column(db.String(120))

    def __repr__(self):
        return f"<Release id={self.id} title={self.title} version={self.version}>"

    def apply_publish_rule(self):
        if self.is_published and self.status == ReleaseStatus.DRAFT.value:
            self.status = ReleaseStatus.STABLE.value

    def to_summary(self):
        return {
            "id": self.id,
            "title": self.title,
            "applicationName": self.application_name,
            "version": self.version,
            "isPublished": bool(self.is_published),
            "createdAt": to_iso(self.created_at),
        }

    def to_dict(self):
        return {
            "id": self.id,
            "version": self.version,
            "title": self.title,
            "applicationName": self.application_name,
            "description": self.description,
            "releaseDate": to_iso(self.release_date),
            "status": self.status,
            "type": self.type,
            "features": list(self.features or []),
            "bugFixes": list(self.bug_fixes or []),
            "breakingChanges": list(self.breaking_changes or []),
            "workItems": list(self.work_items or []),
            "author": self.snapshot(self.author_id, self.author_name, self.author_email),
            "downloadUrl": self.download_url,
            "downloadCount": self.download_count or 0,
            "isPublished": bool(self.is_published),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
