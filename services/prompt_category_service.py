# services/prompt_category_service.py
import logging
from typing import Dict, Iterable, List, Optional

from constants.activity import ActivityAction, ActivityResource
from constants.lifecycle import DeletePolicy, delete_policy
from constants.prompt import (
    CATEGORY_NAME_MAX_LENGTH,
    COLOR_RE,
    DESCRIPTION_MAX_LENGTH,
    FALLBACK_CATEGORY_ID,
    TOP_PROMPTS_LIMIT,
)
from models.prompt_category import PromptCategory
from repositories.prompt_category_repository import PromptCategoryRepository
from repositories.prompt_repository import PromptRepository
from services.activity_service import ActivityService
from utils.exceptions import NotFoundError, ValidationError
from utils.permissions import PermissionScope
from utils.validators import check_length

logger = logging.getLogger(__name__)

CATEGORY_NOT_FOUND = "Category not found"
DUPLICATE_NAME_MSG = "Category name already exists"


def _parse_parent_id(raw) -> Optional[int]:
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError("parentId must be an integer")


def build_hierarchy(categories: List[PromptCategory]) -> List[dict]:
    """
    组装分类树。父分类不在集合中（缺失或已失效）的节点视为根；
    仅经由环可达的节点最后作为根补齐，每个分类只出现一次。
    """
    by_id = {c.id: c for c in categories}
    children: Dict[int, List[PromptCategory]] = {}
    roots = []
    for cat in categories:
        if cat.parent_id in by_id and cat.parent_id != cat.id:
            children.setdefault(cat.parent_id, []).append(cat)
        else:
            roots.append(cat)

    def sort_key(c):
        return (c.order_no or 0, c.name or "", c.id)

    visited = set()

    def attach(cat) -> dict:
        node = cat.to_dict(with_children=True)
        visited.add(cat.id)
        for child in sorted(children.get(cat.id, []), key=sort_key):
            if child.id not in visited:
                node["children"].append(attach(child))
        return node

    tree = [attach(c) for c in sorted(roots, key=sort_key)]
    for cat in sorted(categories, key=sort_key):
        if cat.id not in visited:
            tree.append(attach(cat))
    return tree


class PromptCategoryService:

    @staticmethod
    def _validate(name, color, icon, description) -> None:
        errors = []
        if name is not None:
            errors.extend(check_length(name, "Name", CATEGORY_NAME_MAX_LENGTH, 1))
        if color is not None and not COLOR_RE.match(color):
            errors.append("Color must be a valid hex color")
        if icon is not None and not icon.strip():
            errors.append("Icon is required")
        errors.extend(check_length(description, "Description", DESCRIPTION_MAX_LENGTH))
        if errors:
            raise ValidationError("Validation error", details=errors)

    @staticmethod
    def list(include_inactive: bool = False, parent_id=None, hierarchy: bool = False):
        if hierarchy:
            return build_hierarchy(PromptCategoryRepository.list(include_inactive=include_inactive))
        categories = PromptCategoryRepository.list(
            include_inactive=include_inactive,
            parent_id=_parse_parent_id(parent_id),
        )
        return [c.to_dict() for c in categories]

    @staticmethod
    def get(category_id: int, include_inactive: bool = False) -> PromptCategory:
        category = PromptCategoryRepository.get_by_id(category_id, include_inactive=include_inactive)
        if not category:
            raise NotFoundError(CATEGORY_NOT_FOUND)
        return category

    @staticmethod
    def _check_parent(category_id: Optional[int], parent_id: Optional[int]):
        if parent_id is None:
            return
        if category_id is not None and parent_id == category_id:
            raise ValidationError("A category cannot be its own parent")
        parent = PromptCategoryRepository.get_by_id(parent_id)
        if not parent:
            raise ValidationError("Parent category not found")
        if category_id is None:
            return
        # 沿父链向上，禁止把分类挂到自己的后代下
        seen = set()
        current = parent
        while current is not None and current.id not in seen:
            if current.id == category_id:
                raise ValidationError("A category cannot be moved under its own descendant")
            seen.add(current.id)
            current = PromptCategoryRepository.get_by_id(current.parent_id) if current.parent_id else None

    @staticmethod
    def create(actor: PermissionScope, data: dict) -> PromptCategory:
        name = (data.get("name") or "").strip()
        color = (data.get("color") or "").strip()
        icon = (data.get("icon") or "").strip()
        if not name or not color or not icon:
            raise ValidationError("Name, color, and icon are required")
        description = (data.get("description") or "").strip() or None
        PromptCategoryService._validate(name, color, icon, description)
        parent_id = _parse_parent_id(data.get("parentId"))
        PromptCategoryService._check_parent(None, parent_id)
        if PromptCategoryRepository.find_live_sibling_by_name(name, parent_id):
            raise ValidationError(DUPLICATE_NAME_MSG)

        category = PromptCategory(
            name=name,
            description=description,
            color=color,
            icon=icon,
            parent_id=parent_id,
            order_no=int(data.get("order") or 0),
            prompt_count=0,
            created_by=actor.user_id,
            is_active=True,
        )
        PromptCategoryRepository.add(category)
        PromptCategoryRepository.commit()
        ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.PROMPT_CATEGORY,
                            details=f"Created prompt category {name}", resource_id=category.id)
        return category

    @staticmethod
    def update(actor: PermissionScope, category_id: int, data: dict) -> PromptCategory:
        category = PromptCategoryService.get(category_id, include_inactive=True)
        name = data.get("name")
        name = name.strip() if isinstance(name, str) else None
        color = data.get("color")
        icon = data.get("icon")
        PromptCategoryService._validate(name, color, icon, data.get("description"))

        parent_id = category.parent_id
        if "parentId" in data:
            parent_id = _parse_parent_id(data.get("parentId"))
            PromptCategoryService._check_parent(category.id, parent_id)
        if (name or "parentId" in data) and PromptCategoryRepository.find_live_sibling_by_name(
                name or category.name, parent_id, exclude_id=category.id):
            raise ValidationError(DUPLICATE_NAME_MSG)

        if name:
            category.name = name
        if color:
            category.color = color
        if icon:
            category.icon = icon.strip()
        if "description" in data:
            category.description = (data.get("description") or "").strip() or None
        if "order" in data:
            category.order_no = int(data.get("order") or 0)
        if "isActive" in data:
            if data.get("isActive"):
                category.restore()
            else:
                category.soft_delete(user_id=actor.user_id)
        category.parent_id = parent_id
        PromptCategoryRepository.commit()
        ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.PROMPT_CATEGORY,
                            details=f"Updated prompt category {category.name}", resource_id=category.id)
        return category

    @staticmethod
    def delete(actor: PermissionScope, category_id: int, purge: bool = False) -> dict:
        """
        默认软删除：存在有效 prompt 或有效子分类时拒绝。
        purge=True 时物理删除，子分类挂到其父分类，prompt 迁到父分类 /
        "General" 分类 / "general" 兜底值。
        """
        category = PromptCategoryService.get(category_id, include_inactive=purge)
        key = category.key
        if purge:
            fallback = category.parent_id
            target_key = str(fallback) if fallback else None
            if target_key is None:
                default = PromptCategoryRepository.find_live_default()
                target_key = default.key if default and default.id != category.id else FALLBACK_CATEGORY_ID
            PromptCategoryRepository.reparent_children(category.id, category.parent_id)
            moved = PromptRepository.move_category(key, target_key)
            PromptCategoryRepository.delete(category)
            PromptCategoryRepository.commit()
            PromptCategoryService.recount([target_key])
            logger.info("prompt category purged id=%s moved_prompts=%s target=%s", category_id, moved, target_key)
            ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.PROMPT_CATEGORY,
                                details=f"Purged prompt category {category.name}", resource_id=category_id)
            return {"purged": True, "movedPrompts": moved, "targetCategory": target_key}

        if PromptRepository.count_active_in_category(key) > 0:
            raise ValidationError("Cannot delete category with existing prompts")
        if PromptCategoryRepository.count_live_children(category.id) > 0:
            raise ValidationError("Cannot delete category with child categories")
        if delete_policy("prompt_category") is DeletePolicy.SOFT:
            category.soft_delete(user_id=actor.user_id)
        PromptCategoryRepository.commit()
        ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.PROMPT_CATEGORY,
                            details=f"Deleted prompt category {category.name}", resource_id=category_id)
        return {"purged": False}

    @staticmethod
    def recount(keys: Optional[Iterable[str]] = None) -> int:
        """
        重算 prompt_count。keys 为空时重算全部分类，返回更新的分类数
        """
        counts = PromptRepository.count_active_by_category()
        if keys is None:
            targets = PromptCategoryRepository.list(include_inactive=True)
        else:
            targets = []
            for key in set(keys):
                if key and str(key).isdigit():
                    cat = PromptCategoryRepository.get_by_id(int(key), include_inactive=True)
                    if cat:
                        targets.append(cat)
        for cat in targets:
            cat.prompt_count = counts.get(cat.key, 0)
        PromptCategoryRepository.commit()
        return len(targets)

    @staticmethod
    def stats() -> dict:
        categories = PromptCategoryRepository.list(include_inactive=True)
        active = [c for c in categories if c.is_active]
        active_ids = {c.id for c in active}
        counts = PromptRepository.count_active_by_category()
        top = sorted(active, key=lambda c: (-counts.get(c.key, 0), c.name))[:TOP_PROMPTS_LIMIT]
        recent = sorted(active, key=lambda c: (c.created_at is not None, c.created_at), reverse=True)
        return {
            "totalCategories": len(categories),
            "activeCategories": len(active),
            "rootCategories": sum(1 for c in active if c.parent_id not in active_ids),
            "categoriesWithPrompts": sum(1 for c in active if counts.get(c.key, 0) > 0),
            "topCategories": [dict(c.to_dict(), promptCount=counts.get(c.key, 0)) for c in top],
            "recentCategories": [c.to_dict() for c in recent[:TOP_PROMPTS_LIMIT]],
        }

    @staticmethod
    def is_valid_key(key: str) -> bool:
        if key == FALLBACK_CATEGORY_ID:
            return True
        return bool(key and str(key).isdigit() and PromptCategoryRepository.get_by_id(int(key)))

    @staticmethod
    def info_map() -> Dict[str, PromptCategory]:
        return {c.key: c for c in PromptCategoryRepository.list(include_inactive=False)}
