# controllers/prompt_category_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import ADMIN_OR_ABOVE, SUPER_ADMIN_ONLY, auth_required, require_roles
from services.prompt_category_service import PromptCategoryService
from utils.permissions import require_scope
from utils.response import json_response
from utils.validators import parse_bool

prompt_category_bp = Blueprint("prompt_categories", __name__, url_prefix="/api/prompt-categories")


@prompt_category_bp.get("")
@auth_required()
def list_categories():
    """
    GET /api/prompt-categories
    hierarchy=true 返回树形结构；parentId 仅返回直接子分类；includeInactive 含已删除
    """
    args = request.args
    categories = PromptCategoryService.list(
        include_inactive=bool(parse_bool(args.get("includeInactive"))),
        parent_id=args.get("parentId"),
        hierarchy=bool(parse_bool(args.get("hierarchy"))),
    )
    return json_response(data={"categories": categories})


@prompt_category_bp.post("")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def create_category():
    data = request.get_json(silent=True) or {}
    category = PromptCategoryService.create(require_scope(), data)
    return json_response(message="Category created successfully", data={"category": category.to_dict()}, code=201)


@prompt_category_bp.put("")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def recount_categories():
    updated = PromptCategoryService.recount()
    return json_response(message="Prompt counts updated successfully", data={"updatedCount": updated})


@prompt_category_bp.get("/stats")
@auth_required()
def category_stats():
    return json_response(data=PromptCategoryService.stats())


@prompt_category_bp.get("/<int:category_id>")
@auth_required()
def get_category(category_id: int):
    return json_response(data={"category": PromptCategoryService.get(category_id).to_dict()})


@prompt_category_bp.put("/<int:category_id>")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def update_category(category_id: int):
    data = request.get_json(silent=True) or {}
    category = PromptCategoryService.update(require_scope(), category_id, data)
    return json_response(message="Category updated successfully", data={"category": category.to_dict()})


@prompt_category_bp.delete("/<int:category_id>")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def delete_category(category_id: int):
    purge = bool(parse_bool(request.args.get("purge")))
    result = PromptCategoryService.delete(require_scope(), category_id, purge=purge)
    return json_response(message="Category deleted successfully", data=result)
