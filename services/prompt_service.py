# services/prompt_service.py
import logging
from collections import Counter
from typing import List, Optional

from constants.activity import ActivityAction, ActivityResource
from constants.lifecycle import DeletePolicy, delete_policy
from constants.prompt import (
    CONTENT_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TAG_STATS_LIMIT,
    TITLE_MAX_LENGTH,
    TOP_PROMPTS_LIMIT,
    UNKNOWN_CATEGORY_COLOR,
    DEFAULT_CATEGORY_ICON,
    USAGE_MONTHS_LIMIT,
    normalize_tags,
)
from models.prompt import Prompt
from repositories.prompt_repository import PromptRepository
from services.activity_service import ActivityService
from services.prompt_category_service import PromptCategoryService
from utils.exceptions import AuthorizationError, NotFoundError, ValidationError
from utils.filters import Page, PromptFilters
from utils.permissions import PermissionScope
from utils.validators import check_length

logger = logging.getLogger(__name__)

PROMPT_NOT_FOUND = "Prompt not found"
PERMISSION_DENIED = "Permission denied"

# 批量更新允许修改的字段：请求字段 -> 模型字段
BULK_UPDATABLE = {
    "category": "category",
    "tags": "tags",
    "isFavorite": "is_favorite",
    "description": "description",
}


def _parse_ids(raw) -> List[int]:
    if not raw or not isinstance(raw, list):
        raise ValidationError("Prompt IDs are required")
    ids = []
    for value in raw:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            raise ValidationError("Validation error", details=[f"Invalid prompt id: {value}"])
    return ids


def _round2(value: float) -> float:
    return round(value, 2)


class PromptService:

    # ---------- 校验 ----------
    @staticmethod
    def _resolve_category(raw) -> str:
        key = str(raw).strip() if raw not in (None, "") else ""
        if not key:
            raise ValidationError("Validation error", details=["Category is required"])
        if not PromptCategoryService.is_valid_key(key):
            raise ValidationError("Validation error", details=[f"Unknown category: {key}"])
        return key

    @staticmethod
    def _build_fields(data: dict, partial: bool) -> dict:
        fields = {}
        errors = []
        if not partial or "title" in data:
            fields["title"] = (data.get("title") or "").strip()
            errors.extend(check_length(fields["title"], "Title", TITLE_MAX_LENGTH, 1))
        if not partial or "content" in data:
            fields["content"] = data.get("content") or ""
            if not fields["content"].strip():
                errors.append("Content is required")
            errors.extend(check_length(fields["content"], "Content", CONTENT_MAX_LENGTH))
        if "description" in data:
            fields["description"] = (data.get("description") or "").strip() or None
            errors.extend(check_length(fields["description"], "Description", DESCRIPTION_MAX_LENGTH))
        if "tags" in data:
            fields["tags"] = normalize_tags(data.get("tags"))
        if "isFavorite" in data:
            fields["is_favorite"] = bool(data.get("isFavorite"))
        if errors:
            raise ValidationError("Validation error", details=errors)
        if not partial or "category" in data:
            fields["category"] = PromptService._resolve_category(data.get("category"))
        return fields

    # ---------- 查询 ----------
    @staticmethod
    def list(filters: PromptFilters, page: Page) -> dict:
        prompts, total = PromptRepository.list(filters, page)
        total_pages = page.total_pages(total)
        return {
            "prompts": [p.to_dict() for p in prompts],
            "pagination": {
                "page": page.page,
                "limit": page.limit,
                "total": total,
                "totalPages": total_pages,
                "hasNext": page.page < total_pages,
                "hasPrev": page.page > 1,
            },
        }

    @staticmethod
    def get(prompt_id: int) -> Prompt:
        prompt = PromptRepository.get_by_id(prompt_id)
        if not prompt:
            raise NotFoundError(PROMPT_NOT_FOUND)
        return prompt

    @staticmethod
    def _get_managed(actor: PermissionScope, prompt_id: int) -> Prompt:
        prompt = PromptService.get(prompt_id)
        if not actor.can_manage(prompt.created_by):
            raise AuthorizationError(PERMISSION_DENIED)
        return prompt

    # ---------- 写入 ----------
    @staticmethod
    def create(actor: PermissionScope, data: dict) -> Prompt:
        if not data.get("title") or not data.get("content") or not data.get("category"):
            raise ValidationError("Title, content, and category are required")
        fields = PromptService._build_fields(data, partial=False)
        fields.setdefault("tags", [])
        prompt = Prompt(
            created_by=actor.user_id,
            usage_count=0,
            is_favorite=fields.pop("is_favorite", False),
            is_active=True,
            **fields,
        )
        PromptRepository.add(prompt)
        PromptRepository.commit()
        PromptCategoryService.recount([prompt.category])
        ActivityService.log(actor, ActivityAction.PROMPT_CREATED, ActivityResource.PROMPT,
                            details=f"Created prompt {prompt.title}", resource_id=prompt.id)
        return prompt

    @staticmethod
    def update(actor: PermissionScope, prompt_id: int, data: dict) -> Prompt:
        prompt = PromptService._get_managed(actor, prompt_id)
        fields = PromptService._build_fields(data, partial=True)
        old_category = prompt.category
        for key, value in fields.items():
            setattr(prompt, key, value)
        PromptRepository.commit()
        if prompt.category != old_category:
            PromptCategoryService.recount([old_category, prompt.category])
        ActivityService.log(actor, ActivityAction.PROMPT_UPDATED, ActivityResource.PROMPT,
                            details=f"Updated prompt {prompt.title}", resource_id=prompt.id)
        return prompt

    @staticmethod
    def delete(actor: PermissionScope, prompt_id: int):
        prompt = PromptService._get_managed(actor, prompt_id)
        if delete_policy("prompt") is DeletePolicy.SOFT:
            prompt.soft_delete(user_id=actor.user_id)
        PromptRepository.commit()
        PromptCategoryService.recount([prompt.category])
        ActivityService.log(actor, ActivityAction.PROMPT_DELETED, ActivityResource.PROMPT,
                            details=f"Deleted prompt {prompt.title}", resource_id=prompt.id)

    @staticmethod
    def _bulk_targets(actor: PermissionScope, raw_ids) -> List[Prompt]:
        prompts = PromptRepository.find_active_by_ids(_parse_ids(raw_ids))
        # 非管理员只能批量操作自己的 prompt，其余静默跳过
        return [p for p in prompts if actor.can_manage(p.created_by)]

    @staticmethod
    def bulk_update(actor: PermissionScope, prompt_ids, updates) -> int:
        if not isinstance(updates, dict) or not updates:
            raise ValidationError("Updates are required")
        unknown = sorted(set(updates) - set(BULK_UPDATABLE))
        if unknown:
            raise ValidationError("Validation error", details=[f"Field cannot be bulk updated: {k}" for k in unknown])
        values = {}
        if "category" in updates:
            values["category"] = PromptService._resolve_category(updates["category"])
        if "tags" in updates:
            values["tags"] = normalize_tags(updates["tags"])
        if "isFavorite" in updates:
            values["is_favorite"] = bool(updates["isFavorite"])
        if "description" in updates:
            values["description"] = (updates["description"] or "").strip() or None
            errors = check_length(values["description"], "Description", DESCRIPTION_MAX_LENGTH)
            if errors:
                raise ValidationError("Validation error", details=errors)

        targets = PromptService._bulk_targets(actor, prompt_ids)
        touched = set()
        for prompt in targets:
            touched.add(prompt.category)
            for key, value in values.items():
                setattr(prompt, key, value)
            touched.add(prompt.category)
        PromptRepository.commit()
        if "category" in values and targets:
            PromptCategoryService.recount(touched)
        if targets:
            ActivityService.log(actor, ActivityAction.PROMPT_UPDATED, ActivityResource.PROMPT,
                                details=f"Bulk updated {len(targets)} prompts")
        return len(targets)

    @staticmethod
    def bulk_delete(actor: PermissionScope, prompt_ids) -> int:
        targets = PromptService._bulk_targets(actor, prompt_ids)
        for prompt in targets:
            prompt.soft_delete(user_id=actor.user_id)
        PromptRepository.commit()
        if targets:
            PromptCategoryService.recount({p.category for p in targets})
            ActivityService.log(actor, ActivityAction.PROMPT_DELETED, ActivityResource.PROMPT,
                                details=f"Bulk deleted {len(targets)} prompts")
        return len(targets)

    @staticmethod
    def toggle_favorite(actor: PermissionScope, prompt_id: int) -> Prompt:
        prompt = PromptService._get_managed(actor, prompt_id)
        prompt.is_favorite = not prompt.is_favorite
        PromptRepository.commit()
        return prompt

    @staticmethod
    def increment_usage(prompt_id: int) -> Prompt:
        prompt = PromptService.get(prompt_id)
        prompt.usage_count = (prompt.usage_count or 0) + 1
        PromptRepository.commit()
        return prompt

    @staticmethod
    def duplicate(actor: PermissionScope, prompt_id: int) -> Prompt:
        source = PromptService.get(prompt_id)
        copy = Prompt(
            title=f"{source.title} (Copy)"[:TITLE_MAX_LENGTH],
            content=source.content,
            description=source.description,
            category=source.category,
            tags=list(source.tags or []),
            is_favorite=False,
            usage_count=0,
            created_by=actor.user_id,
            is_active=True,
        )
        PromptRepository.add(copy)
        PromptRepository.commit()
        PromptCategoryService.recount([copy.category])
        ActivityService.log(actor, ActivityAction.PROMPT_CREATED, ActivityResource.PROMPT,
                            details=f"Duplicated prompt {source.title}", resource_id=copy.id)
        return copy

    # ---------- 统计 ----------
    @staticmethod
    def stats(user_id: Optional[int] = None) -> dict:
        """
        prompt 统计；user_id 不为空时只统计该用户创建的 prompt。
        均值、百分比保留两位小数。
        """
        prompts = PromptRepository.active_for_stats(user_id)
        total = len(prompts)
        favorites = sum(1 for p in prompts if p.is_favorite)
        total_usage = sum(p.usage_count or 0 for p in prompts)

        categories = PromptCategoryService.info_map()
        by_category = {}
        for p in prompts:
            entry = by_category.setdefault(p.category, {"category": p.category, "count": 0, "usage": 0})
            entry["count"] += 1
            entry["usage"] += p.usage_count or 0
        category_stats = []
        for key, entry in sorted(by_category.items(), key=lambda kv: (-kv[1]["count"], kv[0])):
            cat = categories.get(key)
            entry["categoryInfo"] = (
                {"name": cat.name, "color": cat.color, "icon": cat.icon}
                if cat else {"name": key, "color": UNKNOWN_CATEGORY_COLOR, "icon": DEFAULT_CATEGORY_ICON}
            )
            category_stats.append(entry)

        tag_counter = Counter(tag for p in prompts for tag in (p.tags or []))
        tag_stats = [{"tag": tag, "count": cnt} for tag, cnt in tag_counter.most_common(TAG_STATS_LIMIT)]

        months = {}
        for p in prompts:
            if not p.updated_at:
                continue
            month = p.updated_at.strftime("%Y-%m")
            entry = months.setdefault(month, {"month": month, "count": 0, "prompts": 0})
            entry["count"] += p.usage_count or 0
            entry["prompts"] += 1
        usage_by_month = [months[m] for m in sorted(months, reverse=True)[:USAGE_MONTHS_LIMIT]]

        top = sorted(prompts, key=lambda p: (-(p.usage_count or 0), p.id))[:TOP_PROMPTS_LIMIT]
        recent = sorted(prompts, key=lambda p: (p.updated_at is not None, p.updated_at, p.id),
                        reverse=True)[:TOP_PROMPTS_LIMIT]

        result = {
            "totalPrompts": total,
            "activePrompts": total,
            "favoritePrompts": favorites,
            "totalUsage": total_usage,
            "averageUsagePerPrompt": _round2(total_usage / total) if total else 0,
            "favoritePercentage": _round2(favorites * 100 / total) if total else 0,
            "categoryStats": category_stats,
            "tagStats": tag_stats,
            "usageByMonth": usage_by_month,
            "topPrompts": [p.to_dict() for p in top],
            "recentPrompts": [p.to_dict() for p in recent],
            "userStats": None,
        }
        if user_id is not None:
            result["userStats"] = {
                "userId": user_id,
                "totalPrompts": total,
                "favoritePrompts": favorites,
                "totalUsage": total_usage,
                "categoriesUsed": len(by_category),
            }
        return result
