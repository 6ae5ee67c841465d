# -*- coding: utf-8 -*-
"""
activity.py
--------------------------------------------------------------------
审计日志（只追加，不修改）。
- user_* 为操作人快照。
- application 为空表示系统级操作，统计时归入 "System"。
"""

from extensions.database import db
from .mixins import COMMON_TABLE_ARGS
from utils.datetime_helpers import to_iso, utcnow


class Activity(db.Model):
    __tablename__ = "activity"
    __table_args__ = (
        db.Index("ix_activity_user_timestamp", "user_id", "timestamp"),
        COMMON_TABLE_ARGS,
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    user_name = db.Column(db.String(100), nullable=False)
    user_email = db.Column(db.String(120), nullable=False)
    user_role = db.Column(db.String(32), nullable=False)
    action = db.Column(db.String(50), nullable=False, index=True)
    resource = db.Column(db.String(50), nullable=False, index=True)
    resource_id = db.Column(db.String(64))
    details = db.Column(db.Text)
    application = db.Column(db.String(50), index=True)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(255))
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "userName": self.user_name,
            "userEmail": self.user_email,
            "userRole": self.user_role,
            "action": self.action,
            "resource": self.resource,
            "resourceId": self.resource_id,
            "details": self.details,
            "application": self.application,
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
            "timestamp": to_iso(self.timestamp),
        }
