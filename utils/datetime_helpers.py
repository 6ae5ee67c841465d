# -*- coding: utf-8 -*-
"""Datetime helpers.

数据库中的 ``datetime`` 一律视为 UTC（无时区信息）。接口层输出
ISO 8601 字符串，输入接受 ISO 日期 / 日期时间（含 ``Z`` 后缀）。
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from utils.exceptions import ValidationError


def utcnow() -> datetime:
    """返回无时区信息的 UTC 当前时间，与数据库存储口径一致。"""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def _ensure_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """将 ``datetime`` 格式化为带 ``Z`` 的 UTC ISO 字符串。

    :param dt: 需要转换的时间; ``None`` 时直接返回 ``None``。
    """

    if dt is None:
        return None
    return _ensure_naive_utc(dt).isoformat() + "Z"


def parse_datetime(raw, field: str = "date") -> Optional[datetime]:
    """解析外部传入的日期。空值返回 ``None``，非法格式抛出 ValidationError。"""

    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return _ensure_naive_utc(raw)
    if isinstance(raw, date):
        return datetime.combine(raw, time.min)
    text = str(raw).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return _ensure_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        raise ValidationError(f"Invalid {field}: {raw}")


def format_date(value) -> str:
    """导出用的日期字符串 YYYY-MM-DD；接受 datetime 或 ISO 字符串。"""

    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = parse_datetime(value)
        except ValidationError:
            return value
    return value.strftime("%Y-%m-%d")


def day_range(dt: datetime) -> tuple[datetime, datetime]:
    """返回 dt 所在自然日的 [start, end) 区间。"""

    start = datetime.combine(dt.date(), time.min)
    return start, start + timedelta(days=1)
