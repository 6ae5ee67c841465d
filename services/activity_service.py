# services/activity_service.py
import json
import logging
from collections import Counter
from datetime import timedelta
from typing import Optional

from flask import has_request_context, request

from constants.activity import (
    ActivityAction,
    ActivityResource,
    RECENT_ACTIVITIES_LIMIT,
    TIMELINE_DAYS,
    TOP_USERS_LIMIT,
)
from models.activity import Activity
from repositories.activity_repository import ActivityRepository
from utils.datetime_helpers import to_iso, utcnow
from utils.exceptions import ValidationError
from utils.filters import ActivityFilters

logger = logging.getLogger(__name__)


def _enum_value(value):
    return getattr(value, "value", value)


def _actor_snapshot(actor) -> dict:
    """
    actor 可以是 User 实体，也可以是 PermissionScope
    """
    user_id = getattr(actor, "user_id", None)
    if user_id is None:
        user_id = getattr(actor, "id", None)
    return {
        "user_id": user_id,
        "user_name": getattr(actor, "name", None) or "Unknown",
        "user_email": getattr(actor, "email", None) or "",
        "user_role": getattr(actor, "role", None) or "",
    }


def _client_info() -> dict:
    if not has_request_context():
        return {"ip_address": None, "user_agent": None}
    forwarded = request.headers.get("X-Forwarded-For")
    ip = forwarded.split(",")[0].strip() if forwarded else (
        request.headers.get("X-Real-IP") or request.remote_addr
    )
    ua = request.headers.get("User-Agent")
    return {"ip_address": ip, "user_agent": ua[:255] if ua else None}


class ActivityService:

    @staticmethod
    def log(actor, action, resource, details: str = None, resource_id=None,
            application: Optional[str] = None) -> Optional[Activity]:
        """
        记录审计日志。属于附带写入：失败只记日志并回滚，返回 None，不影响主流程。
        """
        try:
            activity = Activity(
                **_actor_snapshot(actor),
                **_client_info(),
                action=_enum_value(action),
                resource=_enum_value(resource),
                resource_id=str(resource_id) if resource_id is not None else None,
                details=details,
                application=application or None,
                timestamp=utcnow(),
            )
            ActivityRepository.add(activity)
            ActivityRepository.commit()
            return activity
        except Exception:
            logger.exception("activity log failed action=%s resource=%s", action, resource)
            ActivityRepository.rollback()
            return None

    @staticmethod
    def create(actor, data: dict) -> Activity:
        """POST /api/activities：内部接口，字段需合法"""
        action = data.get("action")
        resource = data.get("resource")
        errors = []
        if action not in ActivityAction.values():
            errors.append(f"action must be one of {ActivityAction.values()}")
        if resource not in ActivityResource.values():
            errors.append(f"resource must be one of {ActivityResource.values()}")
        if not data.get("details"):
            errors.append("details is required")
        if errors:
            raise ValidationError("Validation error", details=errors)

        snapshot = _actor_snapshot(actor)
        if data.get("userId") is not None:
            snapshot = {
                "user_id": data.get("userId"),
                "user_name": data.get("userName") or snapshot["user_name"],
                "user_email": data.get("userEmail") or snapshot["user_email"],
                "user_role": data.get("userRole") or snapshot["user_role"],
            }
        client = _client_info()
        activity = Activity(
            **snapshot,
            action=action,
            resource=resource,
            resource_id=data.get("resourceId"),
            details=data.get("details"),
            application=data.get("application") or None,
            ip_address=data.get("ipAddress") or client["ip_address"],
            user_agent=data.get("userAgent") or client["user_agent"],
            timestamp=utcnow(),
        )
        ActivityRepository.add(activity)
        ActivityRepository.commit()
        return activity

    @staticmethod
    def list(actor, filters: ActivityFilters) -> dict:
        items, total = ActivityRepository.list(filters)
        ActivityService.log(
            actor,
            ActivityAction.REPORT_GENERATED,
            ActivityResource.SYSTEM,
            details=f"Viewed activities page with filters: {json.dumps(filters.describe())}",
            application=filters.application,
        )
        return {
            "activities": [a.to_dict() for a in items],
            "totalCount": total,
            "hasMore": filters.skip + filters.limit < total,
        }

    @staticmethod
    def stats(actor, start=None, end=None, application: Optional[str] = None) -> dict:
        # 起止时间需同时提供
        if not (start and end):
            start = end = None

        by_application = [
            {
                "application": row["application"],
                "count": row["count"],
                "uniqueUsers": row["unique_users"],
                "lastActivity": to_iso(row["last_activity"]),
            }
            for row in ActivityRepository.application_breakdown(start, end)
        ]
        top_users = [
            {
                "userId": row["user_id"],
                "userName": row["user_name"],
                "userEmail": row["user_email"],
                "userRole": row["user_role"],
                "activityCount": row["activity_count"],
                "lastActivity": to_iso(row["last_activity"]),
            }
            for row in ActivityRepository.top_users(TOP_USERS_LIMIT, start, end)
        ]
        recent = ActivityRepository.recent(RECENT_ACTIVITIES_LIMIT, start, end, application)

        since = utcnow() - timedelta(days=TIMELINE_DAYS)
        per_day = Counter(ts.strftime("%Y-%m-%d") for ts in ActivityRepository.timestamps_since(since))
        timeline = [{"date": day, "count": per_day[day]} for day in sorted(per_day)]

        result = {
            "totalActivities": ActivityRepository.count(start, end),
            "uniqueUsers": ActivityRepository.count_unique_users(start, end),
            "activitiesByAction": ActivityRepository.count_by(Activity.action, start, end),
            "activitiesByResource": ActivityRepository.count_by(Activity.resource, start, end),
            "activitiesByApplication": by_application,
            "topUsers": top_users,
            "recentActivities": [a.to_dict() for a in recent],
            "activityTimeline": timeline,
        }
        ActivityService.log(
            actor,
            ActivityAction.REPORT_GENERATED,
            ActivityResource.SYSTEM,
            details="Viewed activity statistics dashboard",
            application=application,
        )
        return result
