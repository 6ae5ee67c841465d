# controllers/prompt_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required
from services.prompt_service import PromptService
from utils.filters import Page, PromptFilters
from utils.permissions import require_scope
from utils.validators import parse_bool
from utils.response import json_response

prompt_bp = Blueprint("prompts", __name__, url_prefix="/api/prompts")


@prompt_bp.get("")
@auth_required()
def list_prompts():
    page = Page.from_args(request.args, default_limit=10)
    result = PromptService.list(PromptFilters.from_args(request.args), page)
    return json_response(data=result)


@prompt_bp.post("")
@auth_required()
def create_prompt():
    data = request.get_json(silent=True) or {}
    prompt = PromptService.create(require_scope(), data)
    return json_response(message="Prompt created successfully", data={"prompt": prompt.to_dict()}, code=201)


@prompt_bp.put("")
@auth_required()
def bulk_update_prompts():
    data = request.get_json(silent=True) or {}
    count = PromptService.bulk_update(require_scope(), data.get("promptIds"), data.get("updates"))
    return json_response(message=f"Updated {count} prompts", data={"modifiedCount": count})


@prompt_bp.delete("")
@auth_required()
def bulk_delete_prompts():
    data = request.get_json(silent=True) or {}
    count = PromptService.bulk_delete(require_scope(), data.get("promptIds"))
    return json_response(message=f"Deleted {count} prompts", data={"deletedCount": count})


@prompt_bp.get("/stats")
@auth_required()
def prompt_stats():
    """
    personal=true 时只统计当前用户（或 userId 指定用户）的 prompt
    """
    user_id = None
    if parse_bool(request.args.get("personal")):
        user_id = request.args.get("userId", type=int) or require_scope().user_id
    return json_response(data={"stats": PromptService.stats(user_id)})


@prompt_bp.get("/<int:prompt_id>")
@auth_required()
def get_prompt(prompt_id: int):
    return json_response(data={"prompt": PromptService.get(prompt_id).to_dict()})


@prompt_bp.put("/<int:prompt_id>")
@auth_required()
def update_prompt(prompt_id: int):
    data = request.get_json(silent=True) or {}
    prompt = PromptService.update(require_scope(), prompt_id, data)
    return json_response(message="Prompt updated successfully", data={"prompt": prompt.to_dict()})


@prompt_bp.delete("/<int:prompt_id>")
@auth_required()
def delete_prompt(prompt_id: int):
    PromptService.delete(require_scope(), prompt_id)
    return json_response(message="Prompt deleted successfully")


@prompt_bp.post("/<int:prompt_id>/favorite")
@auth_required()
def toggle_favorite(prompt_id: int):
    prompt = PromptService.toggle_favorite(require_scope(), prompt_id)
    message = "Added to favorites" if prompt.is_favorite else "Removed from favorites"
    return json_response(message=message, data={"isFavorite": bool(prompt.is_favorite), "prompt": prompt.to_dict()})


@prompt_bp.post("/<int:prompt_id>/usage")
@auth_required()
def increment_usage(prompt_id: int):
    prompt = PromptService.increment_usage(prompt_id)
    return json_response(message="Usage count incremented",
                         data={"usageCount": prompt.usage_count, "prompt": prompt.to_dict()})


@prompt_bp.post("/<int:prompt_id>/duplicate")
@auth_required()
def duplicate_prompt(prompt_id: int):
    prompt = PromptService.duplicate(require_scope(), prompt_id)
    return json_response(message="Prompt duplicated successfully", data={"prompt": prompt.to_dict()}, code=201)
