# constants/prompt.py
import re

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 10000
DESCRIPTION_MAX_LENGTH = 500
CATEGORY_NAME_MAX_LENGTH = 100

COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
DEFAULT_CATEGORY_COLOR = "#3B82F6"
DEFAULT_CATEGORY_ICON = "Folder"

# 分类被清除后 prompt 的兜底归属
DEFAULT_CATEGORY_NAME = "General"
FALLBACK_CATEGORY_ID = "general"

# 统计中找不到分类时的展示信息
UNKNOWN_CATEGORY_COLOR = "#6B7280"

SORTABLE_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "usageCount": "usage_count",
}
DEFAULT_SORT_FIELD = "createdAt"

TAG_STATS_LIMIT = 20
USAGE_MONTHS_LIMIT = 12
TOP_PROMPTS_LIMIT = 10


def normalize_tags(raw) -> list[str]:
    """标签统一小写、去空白、去重（保持顺序）"""
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    seen = []
    for tag in raw:
        if not isinstance(tag, str):
            continue
        value = tag.strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen
