from typing import List, Optional

from sqlalchemy import func, select, update

from constants.prompt import DEFAULT_CATEGORY_NAME
from extensions.database import db
from models.prompt_category import PromptCategory


class PromptCategoryRepository:
    @staticmethod
    def get_by_id(category_id: int, include_inactive: bool = False) -> Optional[PromptCategory]:
        category = db.session.get(PromptCategory, category_id)
        if category is None or (not include_inactive and not category.is_active):
            return None
        return category

    @staticmethod
    def list(include_inactive: bool = False, parent_id: Optional[int] = None,
             roots_only: bool = False) -> List[PromptCategory]:
        stmt = select(PromptCategory)
        if not include_inactive:
            stmt = stmt.where(PromptCategory.is_active.is_(True))
        if parent_id is not None:
            stmt = stmt.where(PromptCategory.parent_id == parent_id)
        elif roots_only:
            stmt = stmt.where(PromptCategory.parent_id.is_(None))
        stmt = stmt.order_by(PromptCategory.order_no.asc(), PromptCategory.name.asc())
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def find_live_sibling_by_name(name: str, parent_id: Optional[int],
                                  exclude_id: Optional[int] = None) -> Optional[PromptCategory]:
        """同一父级下的有效分类名唯一（大小写不敏感）"""
        stmt = select(PromptCategory).where(
            func.lower(PromptCategory.name) == name.strip().lower(),
            PromptCategory.is_active.is_(True),
        )
        if parent_id is None:
            stmt = stmt.where(PromptCategory.parent_id.is_(None))
        else:
            stmt = stmt.where(PromptCategory.parent_id == parent_id)
        if exclude_id is not None:
            stmt = stmt.where(PromptCategory.id != exclude_id)
        return db.session.execute(stmt).scalars().first()

    @staticmethod
    def find_live_default() -> Optional[PromptCategory]:
        stmt = select(PromptCategory).where(
            PromptCategory.name == DEFAULT_CATEGORY_NAME,
            PromptCategory.is_active.is_(True),
        ).order_by(PromptCategory.id.asc())
        return db.session.execute(stmt).scalars().first()

    @staticmethod
    def count_live_children(category_id: int) -> int:
        stmt = select(func.count(PromptCategory.id)).where(
            PromptCategory.parent_id == category_id,
            PromptCategory.is_active.is_(True),
        )
        return db.session.execute(stmt).scalar() or 0

    @staticmethod
    def reparent_children(category_id: int, new_parent_id: Optional[int]) -> int:
        result = db.session.execute(
            update(PromptCategory)
            .where(PromptCategory.parent_id == category_id)
            .values(parent_id=new_parent_id)
        )
        return result.rowcount or 0

    @staticmethod
    def add(category: PromptCategory):
        db.session.add(category)

    @staticmethod
    def delete(category: PromptCategory):
        db.session.delete(category)

    @staticmethod
    def flush():
        db.session.flush()

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
