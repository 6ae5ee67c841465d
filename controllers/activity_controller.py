# controllers/activity_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import SUPER_ADMIN_ONLY, auth_required, require_roles
from services.activity_service import ActivityService
from utils.datetime_helpers import parse_datetime
from utils.filters import ActivityFilters
from utils.permissions import require_scope
from utils.response import json_response

activity_bp = Blueprint("activities", __name__, url_prefix="/api/activities")

SUPER_ADMIN_REQUIRED = "Access denied. Super Admin role required."


@activity_bp.get("")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY, message=SUPER_ADMIN_REQUIRED)
def list_activities():
    """
    GET /api/activities
    查询参数：application（all 表示不过滤）, action, resource, userId,
             startDate, endDate（需同时提供）, limit, skip
    """
    result = ActivityService.list(require_scope(), ActivityFilters.from_args(request.args))
    return json_response(data=result)


@activity_bp.post("")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY, message=SUPER_ADMIN_REQUIRED)
def create_activity():
    data = request.get_json(silent=True) or {}
    activity = ActivityService.create(require_scope(), data)
    return json_response(message="Activity logged successfully", data={"activity": activity.to_dict()}, code=201)


@activity_bp.get("/stats")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY, message=SUPER_ADMIN_REQUIRED)
def activity_stats():
    args = request.args
    application = args.get("application")
    result = ActivityService.stats(
        require_scope(),
        start=parse_datetime(args.get("startDate"), "startDate"),
        end=parse_datetime(args.get("endDate"), "endDate"),
        application=None if not application or application == "all" else application,
    )
    return json_response(data=result)
