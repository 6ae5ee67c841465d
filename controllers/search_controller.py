# controllers/search_controller.py
from flask import Blueprint, request

from controllers.auth_helpers import auth_required
from services.search_service import DEFAULT_LIMIT, SearchService
from utils.permissions import get_current_user
from utils.response import json_response

search_bp = Blueprint("search", __name__, url_prefix="/api/search")


@search_bp.get("")
@auth_required()
def search_work_items():
    """
    GET /api/search?q=&limit=&type=
    按工作项外部 id / 标题模糊检索
    """
    limit = request.args.get("limit", default=DEFAULT_LIMIT, type=int)
    result = SearchService.search(
        get_current_user(),
        request.args.get("q"),
        limit=limit,
        item_type=request.args.get("type") or None,
    )
    return json_response(data=result)
