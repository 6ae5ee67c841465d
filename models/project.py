# -*- coding: utf-8 -*-
"""
project.py
--------------------------------------------------------------------
项目实体：
- code 全局唯一，统一大写。
- manager_* 为创建人快照；team 为成员快照列表 [{userId, name, email, role}]。
- 删除走软删除（is_active = False）。
"""

from extensions.database import db
from .mixins import TimestampMixin, SoftDeleteMixin, SnapshotMixin, COMMON_TABLE_ARGS
from constants.project import DEFAULT_PROJECT_STATUS
from utils.datetime_helpers import to_iso


class Project(TimestampMixin, SoftDeleteMixin, SnapshotMixin, db.Model):
    __tablename__ = "project"
    __table_args__ = (COMMON_TABLE_ARGS,)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(1000), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False, index=True)
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_PROJECT_STATUS,
                       server_default=DEFAULT_PROJECT_STATUS, index=True)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime)
    technologies = db.Column(db.JSON, nullable=False, default=list)
    team = db.Column(db.JSON, nullable=False, default=list)
    repository = db.Column(db.String(500))

    manager_id = db.Column(db.Integer)
    manager_name = db.Column(db.String(100))
    manager_email = db.Column(db.String(120))

    release_plans = db.relationship("ReleasePlan", back_populates="project", passive_deletes=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "code": self.code,
            "status": self.status,
            "startDate": to_iso(self.start_date),
            "endDate": to_iso(self.end_date),
            "manager": self.snapshot(self.manager_id, self.manager_name, self.manager_email),
            "team": list(self.team or []),
            "technologies": list(self.technologies or []),
            "repository": self.repository,
            "isActive": bool(self.is_active),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
