# -*- coding: utf-8 -*-
"""工作项层级排序与导出行构造。

发布内的工作项是一个扁平数组，节点通过 ``parentId`` 指向同一数组内
另一节点的 ``_id``。页面表格与导出文件共用 :func:`order_work_items`
给出的顺序：

1. 根节点 = 无 ``parentId``，或 ``parentId`` 在集合内找不到（孤儿提升为根）；
2. 同级按 (类型优先级, 标题) 升序；
3. 深度优先输出：节点之后紧跟其子树；
4. 已输出的节点再次遇到时直接跳过，仅经由环可达的节点在最后按同样
   规则作为额外的根补齐，保证输出恰好是输入的一个排列。
"""

from __future__ import annotations

import csv
import io
from collections import Counter, defaultdict
from typing import Any, Dict, Iterator, List, Tuple

from constants.work_item import (
    EXPORT_COLUMNS,
    TYPE_LABELS,
    TYPE_PRIORITY,
    UNKNOWN_TYPE_PRIORITY,
    WorkItemType,
)
from utils.datetime_helpers import format_date

WorkItem = Dict[str, Any]


def type_priority(item_type: str | None) -> int:
    return TYPE_PRIORITY.get(item_type or "", UNKNOWN_TYPE_PRIORITY)


def type_label(item_type: str | None) -> str:
    return TYPE_LABELS.get(item_type or "", item_type or "")


def _node_key(item: WorkItem, index: int) -> str:
    # 没有 _id 的节点用下标占位，保证每个节点都有唯一键
    return item.get("_id") or f"#{index}"


def _sort_key(entry: Tuple[str, WorkItem]):
    key, item = entry
    title = item.get("title") or ""
    # 标题按折叠大小写比较，仅大小写不同时小写在前
    return (type_priority(item.get("type")), title.casefold(), title.swapcase(), key)


def iter_ordered(items: List[WorkItem]) -> Iterator[Tuple[WorkItem, int]]:
    """按展示顺序产出 (工作项, 层级深度)，根节点深度为 0。"""

    entries = [(_node_key(item, i), item) for i, item in enumerate(items or [])]
    known = {key for key, _ in entries}

    children: Dict[str, List[Tuple[str, WorkItem]]] = defaultdict(list)
    roots: List[Tuple[str, WorkItem]] = []
    for key, item in entries:
        parent_id = item.get("parentId")
        if parent_id and parent_id in known and parent_id != key:
            children[parent_id].append((key, item))
        else:
            roots.append((key, item))

    visited: set[str] = set()

    def walk(start: List[Tuple[str, WorkItem]]):
        stack = [(entry, 0) for entry in sorted(start, key=_sort_key, reverse=True)]
        while stack:
            (key, item), depth = stack.pop()
            if key in visited:
                continue
            visited.add(key)
            yield item, depth
            kids = sorted(children.get(key, []), key=_sort_key, reverse=True)
            stack.extend((kid, depth + 1) for kid in kids)

    yield from walk(roots)

    # 环上的节点从根不可达，按同样规则补齐
    if len(visited) < len(entries):
        for entry in sorted(entries, key=_sort_key):
            if entry[0] not in visited:
                yield from walk([entry])


def order_work_items(items: List[WorkItem]) -> List[WorkItem]:
    return [item for item, _depth in iter_ordered(items)]


def flatten_for_export(items: List[WorkItem]) -> List[Dict[str, str]]:
    """将工作项按展示顺序映射为导出行（列见 EXPORT_COLUMNS）。"""

    titles = {item["_id"]: item.get("title") or "" for item in items or [] if item.get("_id")}
    rows = []
    for item in order_work_items(items):
        values = [
            type_label(item.get("type")),
            item.get("id") or "",
            item.get("title") or "",
            item.get("flagName") or "",
            item.get("remarks") or "",
            titles.get(item.get("parentId"), "") if item.get("parentId") else "",
            item.get("hyperlink") or "",
            format_date(item.get("createdAt")),
            format_date(item.get("updatedAt")),
        ]
        rows.append(dict(zip(EXPORT_COLUMNS, values)))
    return rows


def rows_to_csv(rows: List[Dict[str, str]]) -> str:
    """含逗号、双引号或换行的字段加引号，内部双引号加倍。"""

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow([row.get(col, "") for col in EXPORT_COLUMNS])
    return buf.getvalue()


def export_stats(items: List[WorkItem]) -> Dict[str, int]:
    counts = Counter(item.get("type") for item in items or [])
    return {
        "total": len(items or []),
        "epics": counts.get(WorkItemType.EPIC.value, 0),
        "features": counts.get(WorkItemType.FEATURE.value, 0),
        "userStories": counts.get(WorkItemType.USER_STORY.value, 0),
        "bugs": counts.get(WorkItemType.BUG.value, 0),
        "incidents": counts.get(WorkItemType.INCIDENT.value, 0),
    }
