from __future__ import annotations

from enum import Enum


class DeletePolicy(str, Enum):
    """
    各实体的删除策略：
    - SOFT: 置 is_active = False，记录保留
    - HARD: 物理删除
    - APPEND_ONLY: 不允许删除 / 修改
    """

    SOFT = "soft"
    HARD = "hard"
    APPEND_ONLY = "append_only"


ENTITY_LIFECYCLE: dict[str, DeletePolicy] = {
    "user": DeletePolicy.HARD,
    "release": DeletePolicy.HARD,
    "application": DeletePolicy.HARD,
    "release_plan": DeletePolicy.HARD,
    "project": DeletePolicy.SOFT,
    "prompt": DeletePolicy.SOFT,
    "prompt_category": DeletePolicy.SOFT,
    "activity": DeletePolicy.APPEND_ONLY,
}


def delete_policy(entity: str) -> DeletePolicy:
    try:
        return ENTITY_LIFECYCLE[entity]
    except KeyError:
        raise ValueError(f"Unknown entity: {entity}")
