# controllers/project_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import ADMIN_OR_ABOVE, SUPER_ADMIN_ONLY, auth_required, require_roles
from services.project_service import ProjectService
from utils.filters import ProjectFilters
from utils.permissions import require_scope
from utils.response import json_response

project_bp = Blueprint("project", __name__, url_prefix="/api/projects")


@project_bp.get("")
@auth_required()
def list_projects():
    projects = ProjectService.list(ProjectFilters.from_args(request.args))
    return json_response(data={"projects": [p.to_dict() for p in projects]})


@project_bp.post("")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def create_project():
    data = request.get_json(silent=True) or {}
    project = ProjectService.create(require_scope(), data)
    return json_response(message="Project created successfully", data={"project": project.to_dict()}, code=201)


@project_bp.get("/<int:project_id>")
@auth_required()
def get_project(project_id: int):
    return json_response(data={"project": ProjectService.get(project_id).to_dict()})


@project_bp.put("/<int:project_id>")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def update_project(project_id: int):
    data = request.get_json(silent=True) or {}
    project = ProjectService.update(require_scope(), project_id, data)
    return json_response(message="Project updated successfully", data={"project": project.to_dict()})


@project_bp.delete("/<int:project_id>")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def delete_project(project_id: int):
    ProjectService.delete(require_scope(), project_id)
    return json_response(message="Project deleted successfully")
