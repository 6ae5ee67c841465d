# services/work_item_service.py
import uuid
from typing import List, Optional

from constants.activity import ActivityAction, ActivityResource
from constants.work_item import WorkItemType, normalize_type
from repositories.release_repository import ReleaseRepository
from services.activity_service import ActivityService
from utils.datetime_helpers import to_iso, utcnow
from utils.exceptions import NotFoundError, ValidationError
from utils.permissions import PermissionScope
from utils.validators import validate_url
from utils.work_items import WorkItem

TITLE_MAX_LENGTH = 500
TEXT_FIELDS = ("id", "flagName", "remarks", "hyperlink")


def new_item_id() -> str:
    return uuid.uuid4().hex[:24]


class WorkItemService:
    """
    发布内嵌工作项的校验与增删改。
    工作项整体存放在 Release.work_items（JSON），每次写入都整体替换列表。
    """

    @staticmethod
    def normalize_item(raw, existing: Optional[WorkItem] = None, errors: Optional[list] = None) -> WorkItem:
        own_errors = [] if errors is None else errors
        if not isinstance(raw, dict):
            own_errors.append("Work item must be an object")
            if errors is None:
                raise ValidationError("Validation error", details=own_errors)
            return {}

        item: WorkItem = dict(existing or {})
        merged = dict(item)
        merged.update(raw)

        item_type = normalize_type(merged.get("type"))
        if not item_type:
            own_errors.append(f"Work item type must be one of {WorkItemType.values()}")
        title = (merged.get("title") or "").strip() if isinstance(merged.get("title"), str) else ""
        if not title:
            own_errors.append("Work item title is required")
        elif len(title) > TITLE_MAX_LENGTH:
            own_errors.append(f"Work item title cannot exceed {TITLE_MAX_LENGTH} characters")

        hours = merged.get("actualHours")
        if hours not in (None, ""):
            try:
                hours = float(hours)
            except (TypeError, ValueError):
                hours = -1
            if hours < 0:
                own_errors.append("Actual hours cannot be negative")
        else:
            hours = None

        hyperlink = merged.get("hyperlink")
        if hyperlink and not validate_url(str(hyperlink)):
            own_errors.append("Hyperlink must be a valid HTTP/HTTPS URL")

        item_id = merged.get("_id") or new_item_id()
        parent_id = merged.get("parentId") or None
        if parent_id and parent_id == item_id:
            own_errors.append("A work item cannot be its own parent")

        if errors is None and own_errors:
            raise ValidationError("Validation error", details=own_errors)

        now = to_iso(utcnow())
        item.update({
            "_id": item_id,
            "type": item_type,
            "title": title,
            "parentId": parent_id,
            "actualHours": hours,
            "createdAt": item.get("createdAt") or merged.get("createdAt") or now,
            "updatedAt": now,
        })
        for field in TEXT_FIELDS:
            value = merged.get(field)
            item[field] = str(value).strip() if value not in (None, "") else None
        return item

    @staticmethod
    def normalize_list(raw_items) -> List[WorkItem]:
        if raw_items is None:
            return []
        if not isinstance(raw_items, list):
            raise ValidationError("Validation error", details=["workItems must be a list"])
        errors: list[str] = []
        items = [WorkItemService.normalize_item(raw, errors=errors) for raw in raw_items]
        seen = set()
        for item in items:
            key = item.get("_id")
            if key in seen:
                errors.append(f"Duplicate work item id: {key}")
            seen.add(key)
        if errors:
            raise ValidationError("Validation error", details=errors)
        return items

    @staticmethod
    def _find(release, item_id: str) -> WorkItem:
        for item in release.work_items or []:
            if item.get("_id") == item_id:
                return item
        raise NotFoundError("Work item not found")

    @staticmethod
    def _save(release, items: List[WorkItem], actor: PermissionScope, details: str):
        release.work_items = items
        ReleaseRepository.commit()
        ActivityService.log(actor, ActivityAction.RELEASE_UPDATED, ActivityResource.RELEASE,
                            details=details, resource_id=release.id,
                            application=release.application_name)

    @staticmethod
    def add_item(actor: PermissionScope, release, data: dict) -> WorkItem:
        items = list(release.work_items or [])
        item = WorkItemService.normalize_item(data)
        if any(existing.get("_id") == item["_id"] for existing in items):
            raise ValidationError("Validation error", details=[f"Duplicate work item id: {item['_id']}"])
        items.append(item)
        WorkItemService._save(release, items, actor, f"Added work item {item['title']}")
        return item

    @staticmethod
    def update_item(actor: PermissionScope, release, item_id: str, data: dict) -> WorkItem:
        current = WorkItemService._find(release, item_id)
        payload = dict(data)
        payload["_id"] = item_id
        updated = WorkItemService.normalize_item(payload, existing=current)
        items = [updated if i.get("_id") == item_id else i for i in release.work_items or []]
        WorkItemService._save(release, items, actor, f"Updated work item {updated['title']}")
        return updated

    @staticmethod
    def delete_item(actor: PermissionScope, release, item_id: str):
        """删除节点，其直接子节点挂到被删节点的父节点上"""
        target = WorkItemService._find(release, item_id)
        new_parent = target.get("parentId")
        if new_parent == item_id:
            new_parent = None
        items = []
        for item in release.work_items or []:
            if item.get("_id") == item_id:
                continue
            if item.get("parentId") == item_id:
                item = dict(item, parentId=new_parent, updatedAt=to_iso(utcnow()))
            items.append(item)
        WorkItemService._save(release, items, actor, f"Deleted work item {target.get('title')}")

