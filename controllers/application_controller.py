# controllers/application_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import SUPER_ADMIN_ONLY, auth_required, require_roles
from services.application_service import ApplicationService
from utils.permissions import require_scope
from utils.response import json_response
from utils.validators import parse_bool

application_bp = Blueprint("applications", __name__, url_prefix="/api/applications")


@application_bp.get("")
@auth_required()
def list_applications():
    apps = ApplicationService.list(
        search=(request.args.get("search") or "").strip() or None,
        is_active=parse_bool(request.args.get("isActive")),
    )
    return json_response(data={"applications": [a.to_dict() for a in apps]})


@application_bp.post("")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def create_application():
    data = request.get_json(silent=True) or {}
    application = ApplicationService.create(require_scope(), data)
    return json_response(message="Application created successfully",
                         data={"application": application.to_dict()}, code=201)


@application_bp.get("/<int:application_id>")
@auth_required()
def get_application(application_id: int):
    return json_response(data={"application": ApplicationService.get(application_id).to_dict()})


@application_bp.put("/<int:application_id>")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def update_application(application_id: int):
    data = request.get_json(silent=True) or {}
    application = ApplicationService.update(require_scope(), application_id, data)
    return json_response(message="Application updated successfully", data={"application": application.to_dict()})


@application_bp.delete("/<int:application_id>")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def delete_application(application_id: int):
    ApplicationService.delete(require_scope(), application_id)
    return json_response(message="Application deleted successfully")
