# controllers/release_controller.py
import io

from flask import Blueprint, request, send_file

from controllers.auth_helpers import ADMIN_OR_ABOVE, SUPER_ADMIN_ONLY, auth_required, require_roles
from services.export_service import ExportService
from services.release_service import ReleaseService
from services.work_item_service import WorkItemService
from utils.filters import Page, ReleaseFilters
from utils.permissions import get_current_user, require_scope
from utils.response import json_response

release_bp = Blueprint("releases", __name__, url_prefix="/api/releases")


@release_bp.get("")
@auth_required()
def list_releases():
    """
    GET /api/releases
    查询参数：page, limit, status, type, applicationName, search,
             dateFrom, dateTo, releaseDate（同一天）, published
    """
    page = Page.from_args(request.args, default_limit=10)
    filters = ReleaseFilters.from_args(request.args)
    releases, total = ReleaseService.list(get_current_user(), filters, page)
    return json_response(data={
        "releases": [r.to_dict() for r in releases],
        "total": total,
        "page": page.page,
        "limit": page.limit,
        "totalPages": page.total_pages(total),
    })


@release_bp.post("")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def create_release():
    data = request.get_json(silent=True) or {}
    release = ReleaseService.create(require_scope(), get_current_user(), data)
    return json_response(message="Release created successfully", data={"release": release.to_dict()}, code=201)


@release_bp.get("/stats")
@auth_required()
def release_stats():
    return json_response(data=ReleaseService.stats(get_current_user()))


@release_bp.get("/<int:release_id>")
@auth_required()
def get_release(release_id: int):
    release = ReleaseService.get(get_current_user(), release_id)
    return json_response(data={"release": ReleaseService.detail(release)})


@release_bp.put("/<int:release_id>")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def update_release(release_id: int):
    data = request.get_json(silent=True) or {}
    release = ReleaseService.update(require_scope(), get_current_user(), release_id, data)
    return json_response(message="Release updated successfully", data={"release": release.to_dict()})


@release_bp.delete("/<int:release_id>")
@auth_required()
@require_roles(*SUPER_ADMIN_ONLY)
def delete_release(release_id: int):
    ReleaseService.delete(require_scope(), release_id)
    return json_response(message="Release deleted successfully")


# ---------- 导出 ----------
@release_bp.get("/<int:release_id>/export")
@auth_required()
def export_release(release_id: int):
    release = ReleaseService.get(get_current_user(), release_id)
    content, filename, mimetype = ExportService.export(
        require_scope(), release, request.args.get("format", "xlsx")
    )
    return send_file(
        io.BytesIO(content),
        mimetype=mimetype,
        as_attachment=True,
        download_name=filename,
    )


@release_bp.get("/<int:release_id>/export/stats")
@auth_required()
def export_stats(release_id: int):
    release = ReleaseService.get(get_current_user(), release_id)
    return json_response(data=ExportService.stats(release))


# ---------- 工作项 ----------
def _editable_release(release_id: int):
    # 复用读取权限：应用白名单之外按无权限处理
    return ReleaseService.get(get_current_user(), release_id)


@release_bp.post("/<int:release_id>/work-items")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def add_work_item(release_id: int):
    data = request.get_json(silent=True) or {}
    item = WorkItemService.add_item(require_scope(), _editable_release(release_id), data)
    return json_response(message="Work item added successfully", data={"workItem": item}, code=201)


@release_bp.put("/<int:release_id>/work-items/<string:item_id>")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def update_work_item(release_id: int, item_id: str):
    data = request.get_json(silent=True) or {}
    item = WorkItemService.update_item(require_scope(), _editable_release(release_id), item_id, data)
    return json_response(message="Work item updated successfully", data={"workItem": item})


@release_bp.delete("/<int:release_id>/work-items/<string:item_id>")
@auth_required()
@require_roles(*ADMIN_OR_ABOVE)
def delete_work_item(release_id: int, item_id: str):
    WorkItemService.delete_item(require_scope(), _editable_release(release_id), item_id)
    return json_response(message="Work item deleted successfully")
