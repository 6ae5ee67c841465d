# controllers/user_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import ADMIN_OR_ABOVE, SUPER_ADMIN_ONLY, auth_required, require_roles
from services.user_service import UserService
from utils.filters import Page, UserFilters
from utils.permissions import require_scope
from utils.response import json_response

user_bp = Blueprint("users", __name__)


@user_bp.get("")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def list_users():
    """
    GET /api/users
    查询参数：page, limit, search（姓名/邮箱模糊）, role, isActive
    """
    page = Page.from_args(request.args, default_limit=10)
    users, total = UserService.list_users(UserFilters.from_args(request.args), page)
    return json_response(data={
        "users": [u.to_dict() for u in users],
        "pagination": {
            "page": page.page,
            "limit": page.limit,
            "total": total,
            "totalPages": page.total_pages(total),
        },
    })


@user_bp.post("")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def create_user():
    data = request.get_json(silent=True) or {}
    user = UserService.create_user(require_scope(), data)
    return json_response(message="User created successfully", data={"user": user.to_dict()}, code=201)


@user_bp.get("/<int:user_id>")
@auth_required()
def get_user(user_id: int):
    user = UserService.get_user(require_scope(), user_id)
    return json_response(data={"user": user.to_dict()})


@user_bp.put("/<int:user_id>")
@auth_required()
def update_user(user_id: int):
    data = request.get_json(silent=True) or {}
    user = UserService.update_user(require_scope(), user_id, data)
    return json_response(message="User updated successfully", data={"user": user.to_dict()})


@user_bp.delete("/<int:user_id>")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def delete_user(user_id: int):
    UserService.delete_user(require_scope(), user_id)
    return json_response(message="User deleted successfully")
