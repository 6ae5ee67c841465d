# controllers/release_plan_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import ADMIN_OR_ABOVE, SUPER_ADMIN_ONLY, auth_required, require_roles
from services.release_plan_service import ReleasePlanService
from utils.filters import ReleasePlanFilters
from utils.permissions import require_scope
from utils.response import json_response

release_plan_bp = Blueprint("release_plans", __name__, url_prefix="/api/release-plans")


@release_plan_bp.get("")
@auth_required()
def list_release_plans():
    plans = ReleasePlanService.list(ReleasePlanFilters.from_args(request.args))
    return json_response(data={"releasePlans": [p.to_dict() for p in plans]})


@release_plan_bp.post("")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def create_release_plan():
    data = request.get_json(silent=True) or {}
    plan = ReleasePlanService.create(require_scope(), data)
    return json_response(message="Release plan created successfully",
                         data={"releasePlan": plan.to_dict()}, code=201)


@release_plan_bp.get("/<int:plan_id>")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def get_release_plan(plan_id: int):
    return json_response(data={"releasePlan": ReleasePlanService.get(plan_id).to_dict()})


@release_plan_bp.put("/<int:plan_id>")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def update_release_plan(plan_id: int):
    data = request.get_json(silent=True) or {}
    plan = ReleasePlanService.update(require_scope(), plan_id, data)
    return json_response(message="Release plan updated successfully", data={"releasePlan": plan.to_dict()})


@release_plan_bp.delete("/<int:plan_id>")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def delete_release_plan(plan_id: int):
    ReleasePlanService.delete(require_scope(), plan_id)
    return json_response(message="Release plan deleted successfully")
