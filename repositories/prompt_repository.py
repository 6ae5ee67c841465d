import json
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import String, cast, func, or_, select, update

from extensions.database import db
from models.prompt import Prompt
from utils.filters import Page, PromptFilters


def _tag_condition(tag: str):
    # tags 以 JSON 文本存储，按带引号的序列化形式匹配单个元素
    return cast(Prompt.tags, String).contains(json.dumps(tag), autoescape=True)


class PromptRepository:
    @staticmethod
    def get_by_id(prompt_id: int, include_inactive: bool = False) -> Optional[Prompt]:
        prompt = db.session.get(Prompt, prompt_id)
        if prompt is None or (not include_inactive and not prompt.is_active):
            return None
        return prompt

    @staticmethod
    def find_active_by_ids(prompt_ids: Iterable[int]) -> List[Prompt]:
        ids = list(prompt_ids)
        if not ids:
            return []
        stmt = select(Prompt).where(Prompt.id.in_(ids), Prompt.is_active.is_(True))
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def list(filters: PromptFilters, page: Page) -> Tuple[List[Prompt], int]:
        conditions = [Prompt.is_active.is_(True)]
        if filters.category:
            conditions.append(Prompt.category == filters.category)
        if filters.tags:
            conditions.append(or_(*[_tag_condition(t) for t in filters.tags]))
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(
                Prompt.title.ilike(pattern),
                Prompt.content.ilike(pattern),
                Prompt.description.ilike(pattern),
                cast(Prompt.tags, String).ilike(pattern),
            ))
        if filters.is_favorite is not None:
            conditions.append(Prompt.is_favorite.is_(filters.is_favorite))
        if filters.created_by is not None:
            conditions.append(Prompt.created_by == filters.created_by)
        if filters.date_from:
            conditions.append(Prompt.created_at >= filters.date_from)
        if filters.date_to:
            conditions.append(Prompt.created_at <= filters.date_to)
        if filters.usage_min is not None:
            conditions.append(Prompt.usage_count >= filters.usage_min)
        if filters.usage_max is not None:
            conditions.append(Prompt.usage_count <= filters.usage_max)

        total = db.session.execute(select(func.count(Prompt.id)).where(*conditions)).scalar() or 0
        sort_col = getattr(Prompt, filters.sort_by)
        order = sort_col.desc() if filters.sort_desc else sort_col.asc()
        stmt = (
            select(Prompt)
            .where(*conditions)
            .order_by(order, Prompt.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        return list(db.session.execute(stmt).scalars()), total

    @staticmethod
    def active_for_stats(user_id: Optional[int] = None) -> List[Prompt]:
        stmt = select(Prompt).where(Prompt.is_active.is_(True))
        if user_id is not None:
            stmt = stmt.where(Prompt.created_by == user_id)
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def count_active_by_category() -> Dict[str, int]:
        stmt = (
            select(Prompt.category, func.count(Prompt.id))
            .where(Prompt.is_active.is_(True))
            .group_by(Prompt.category)
        )
        return {category: cnt for category, cnt in db.session.execute(stmt).all()}

    @staticmethod
    def count_active_in_category(category_key: str) -> int:
        stmt = select(func.count(Prompt.id)).where(
            Prompt.category == category_key, Prompt.is_active.is_(True)
        )
        return db.session.execute(stmt).scalar() or 0

    @staticmethod
    def move_category(from_key: str, to_key: str) -> int:
        """批量迁移分类（含已软删除的 prompt），返回影响行数"""
        result = db.session.execute(
            update(Prompt).where(Prompt.category == from_key).values(category=to_key)
        )
        return result.rowcount or 0

    @staticmethod
    def add(prompt: Prompt):
        db.session.add(prompt)

    @staticmethod
    def flush():
        db.session.flush()

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
