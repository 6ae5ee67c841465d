# -*- coding: utf-8 -*-
"""列表查询的类型化过滤条件。

每个实体一个 dataclass，字段显式可选，由 ``from_args`` 从查询参数
解析；仓储层只接收这些对象，不再拼接无类型的查询字典。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from constants.activity import DEFAULT_LIST_LIMIT
from constants.prompt import DEFAULT_SORT_FIELD, SORTABLE_FIELDS, normalize_tags
from utils.datetime_helpers import parse_datetime
from utils.exceptions import ValidationError
from utils.validators import parse_bool


def _int_arg(args, name: str, default: int, minimum: int = 0, maximum: int | None = None) -> int:
    raw = args.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")
    value = max(value, minimum)
    if maximum is not None:
        value = min(value, maximum)
    return value


def _optional_int(args, name: str) -> Optional[int]:
    raw = args.get(name)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


@dataclass
class Page:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args, default_limit: int = 10, max_limit: int = 100) -> "Page":
        return cls(
            page=_int_arg(args, "page", 1, minimum=1),
            limit=_int_arg(args, "limit", default_limit, minimum=1, maximum=max_limit),
        )

    def total_pages(self, total: int) -> int:
        return (total + self.limit - 1) // self.limit if total else 0


@dataclass
class ReleaseFilters:
    status: Optional[str] = None
    type: Optional[str] = None
    application_name: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    release_date: Optional[datetime] = None
    published: Optional[bool] = None

    @classmethod
    def from_args(cls, args) -> "ReleaseFilters":
        return cls(
            status=args.get("status") or None,
            type=args.get("type") or None,
            application_name=args.get("applicationName") or None,
            search=(args.get("search") or "").strip() or None,
            date_from=parse_datetime(args.get("dateFrom"), "dateFrom"),
            date_to=parse_datetime(args.get("dateTo"), "dateTo"),
            release_date=parse_datetime(args.get("releaseDate"), "releaseDate"),
            published=parse_bool(args.get("published")),
        )


@dataclass
class UserFilters:
    search: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None

    @classmethod
    def from_args(cls, args) -> "UserFilters":
        return cls(
            search=(args.get("search") or "").strip() or None,
            role=args.get("role") or None,
            is_active=parse_bool(args.get("isActive")),
        )


@dataclass
class PromptFilters:
    category: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    search: Optional[str] = None
    is_favorite: Optional[bool] = None
    created_by: Optional[int] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    usage_min: Optional[int] = None
    usage_max: Optional[int] = None
    sort_by: str = SORTABLE_FIELDS[DEFAULT_SORT_FIELD]
    sort_desc: bool = True

    @classmethod
    def from_args(cls, args) -> "PromptFilters":
        sort_by = args.get("sortBy") or DEFAULT_SORT_FIELD
        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"sortBy must be one of {sorted(SORTABLE_FIELDS)}")
        return cls(
            category=args.get("category") or None,
            tags=normalize_tags(args.get("tags")),
            search=(args.get("search") or "").strip() or None,
            is_favorite=parse_bool(args.get("isFavorite")),
            created_by=_optional_int(args, "createdBy"),
            date_from=parse_datetime(args.get("dateFrom"), "dateFrom"),
            date_to=parse_datetime(args.get("dateTo"), "dateTo"),
            usage_min=_optional_int(args, "usageMin"),
            usage_max=_optional_int(args, "usageMax"),
            sort_by=SORTABLE_FIELDS[sort_by],
            sort_desc=(args.get("sortOrder") or "desc").lower() != "asc",
        )


@dataclass
class ActivityFilters:
    application: Optional[str] = None
    action: Optional[str] = None
    resource: Optional[str] = None
    user_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = DEFAULT_LIST_LIMIT
    skip: int = 0

    @classmethod
    def from_args(cls, args) -> "ActivityFilters":
        application = args.get("application")
        return cls(
            application=None if not application or application == "all" else application,
            action=args.get("action") or None,
            resource=args.get("resource") or None,
            user_id=_optional_int(args, "userId"),
            start_date=parse_datetime(args.get("startDate"), "startDate"),
            end_date=parse_datetime(args.get("endDate"), "endDate"),
            limit=_int_arg(args, "limit", DEFAULT_LIST_LIMIT, minimum=1, maximum=500),
            skip=_int_arg(args, "skip", 0, minimum=0),
        )

    def describe(self) -> dict:
        """写入审计详情用的精简条件"""
        return {
            k: (v.isoformat() if isinstance(v, datetime) else v)
            for k, v in {
                "application": self.application,
                "action": self.action,
                "resource": self.resource,
                "userId": self.user_id,
                "startDate": self.start_date,
                "endDate": self.end_date,
            }.items()
            if v is not None
        }


@dataclass
class ProjectFilters:
    status: Optional[str] = None
    active: Optional[bool] = None
    search: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "ProjectFilters":
        return cls(
            status=args.get("status") or None,
            active=parse_bool(args.get("active")),
            search=(args.get("search") or "").strip() or None,
        )


@dataclass
class ReleasePlanFilters:
    project_id: Optional[int] = None
    status: Optional[str] = None
    priority: Optional[str] = None

    @classmethod
    def from_args(cls, args) -> "ReleasePlanFilters":
        return cls(
            project_id=_optional_int(args, "projectId"),
            status=args.get("status") or None,
            priority=args.get("priority") or None,
        )
