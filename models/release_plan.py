# -*- coding: utf-8 -*-
"""
release_plan.py
--------------------------------------------------------------------
发布计划：挂在项目下的前瞻性版本规划。
- project_name / project_code 为创建时的项目快照。
- (project_id, version) 唯一。
- assignee_* / created_by_* 为用户快照。
"""

from extensions.database import db
from .mixins import TimestampMixin, SnapshotMixin, COMMON_TABLE_ARGS
from constants.project import DEFAULT_PLAN_STATUS, DEFAULT_PLAN_PRIORITY
from utils.datetime_helpers import to_iso


class ReleasePlan(TimestampMixin, SnapshotMixin, db.Model):
    __tablename__ = "release_plan"
    __table_args__ = (
        db.UniqueConstraint("project_id", "version", name="uq_release_plan_project_version"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer, db.ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_name = db.Column(db.String(200), nullable=False)
    project_code = db.Column(db.String(20), nullable=False)
    planned_date = db.Column(db.DateTime, nullable=False, index=True)
    version = db.Column(db.String(64), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(1000))
    status = db.Column(db.String(32), nullable=False, default=DEFAULT_PLAN_STATUS,
                       server_default=DEFAULT_PLAN_STATUS, index=True)
    priority = db.Column(db.String(32), nullable=False, default=DEFAULT_PLAN_PRIORITY,
                         server_default=DEFAULT_PLAN_PRIORITY, index=True)
    estimated_effort = db.Column(db.Integer)
    features = db.Column(db.JSON, nullable=False, default=list)
    dependencies = db.Column(db.JSON, nullable=False, default=list)
    risks = db.Column(db.JSON, nullable=False, default=list)

    assignee_id = db.Column(db.Integer)
    assignee_name = db.Column(db.String(100))
    assignee_email = db.Column(db.String(120))

    created_by_id = db.Column(db.Integer, nullable=False)
    created_by_name = db.Column(db.String(100))
    created_by_email = db.Column(db.String(120))

    project = db.relationship("Project", back_populates="release_plans")

    def to_dict(self):
        return {
            "id": self.id,
            "project": {
                "id": self.project_id,
                "name": self.project_name,
                "code": self.project_code,
            },
            "plannedDate": to_iso(self.planned_date),
            "version": self.version,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "estimatedEffort": self.estimated_effort,
            "assignee": self.snapshot(self.assignee_id, self.assignee_name, self.assignee_email),
            "features": list(self.features or []),
            "dependencies": list(self.dependencies or []),
            "risks": list(self.risks or []),
            "createdBy": self.snapshot(self.created_by_id, self.created_by_name, self.created_by_email),
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
