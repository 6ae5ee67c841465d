# -*- coding: utf-8 -*-
"""constants/project.py
--------------------------------------------------------------------
项目与发布计划相关的枚举常量。
"""

from enum import Enum

from utils.exceptions import ValidationError

PROJECT_CODE_MAX_LENGTH = 20
ESTIMATED_EFFORT_MAX_HOURS = 10000


class ProjectStatus(Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


class ReleasePlanStatus(Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    TESTING = "testing"
    READY = "ready"
    RELEASED = "released"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


class ReleasePlanPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


DEFAULT_PROJECT_STATUS = ProjectStatus.PLANNING.value
DEFAULT_PLAN_STATUS = ReleasePlanStatus.PLANNED.value
DEFAULT_PLAN_PRIORITY = ReleasePlanPriority.MEDIUM.value


def validate_project_status(status: str):
    if status not in ProjectStatus.values():
        raise ValidationError(f"status must be one of {ProjectStatus.values()}")


def validate_plan_status(status: str):
    if status not in ReleasePlanStatus.values():
        raise ValidationError(f"status must be one of {ReleasePlanStatus.values()}")


def validate_plan_priority(priority: str):
    if priority not in ReleasePlanPriority.values():
        raise ValidationError(f"priority must be one of {ReleasePlanPriority.values()}")
