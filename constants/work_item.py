# -*- coding: utf-8 -*-
"""constants/work_item.py
--------------------------------------------------------------------
发布内嵌工作项的类型枚举。

排序优先级固定：Epic < Feature < User Story < Bug < Incident，
表格展示与导出共用同一套顺序。
"""

from enum import Enum


class WorkItemType(Enum):
    EPIC = "epic"
    FEATURE = "feature"
    USER_STORY = "user_story"
    BUG = "bug"
    INCIDENT = "incident"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


TYPE_PRIORITY: dict[str, int] = {
    WorkItemType.EPIC.value: 0,
    WorkItemType.FEATURE.value: 1,
    WorkItemType.USER_STORY.value: 2,
    WorkItemType.BUG.value: 3,
    WorkItemType.INCIDENT.value: 4,
}

TYPE_LABELS: dict[str, str] = {
    WorkItemType.EPIC.value: "Epic",
    WorkItemType.FEATURE.value: "Feature",
    WorkItemType.USER_STORY.value: "User Story",
    WorkItemType.BUG.value: "Bug",
    WorkItemType.INCIDENT.value: "Incident",
}

# 未知类型排在最后
UNKNOWN_TYPE_PRIORITY = len(TYPE_PRIORITY)

EXPORT_COLUMNS = [
    "Type",
    "ID",
    "Title",
    "Flag Name",
    "Remarks",
    "Parent",
    "Hyperlink",
    "Created Date",
    "Updated Date",
]


def normalize_type(raw: str | None) -> str | None:
    """接受 value 或展示名（"User Story"），返回 value；无法识别返回 None"""
    if not raw:
        return None
    value = raw.strip()
    if value in TYPE_PRIORITY:
        return value
    lowered = value.lower().replace(" ", "_")
    if lowered in TYPE_PRIORITY:
        return lowered
    return None
