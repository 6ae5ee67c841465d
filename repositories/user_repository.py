# repositories/user_repository.py
from __future__ import annotations
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select

from models.user import User
from extensions.database import db
from utils.filters import Page, UserFilters


class UserRepository:
    """
    用户仓储（数据访问）层。
    说明：
    - 不做业务规则判断（如角色提升、自删保护），仅做纯粹的持久化读写。
    - 写操作不自动 commit，由上层显式调用 commit()。
    """

    @staticmethod
    def find_by_id(user_id: int) -> Optional[User]:
        return db.session.get(User, user_id)

    @staticmethod
    def find_by_email(email: str) -> Optional[User]:
        """邮箱已由调用方规整为小写"""
        if not email:
            return None
        return db.session.execute(select(User).where(User.email == email)).scalar_one_or_none()

    @staticmethod
    def find_by_reset_token(token: str) -> Optional[User]:
        if not token:
            return None
        stmt = select(User).where(User.reset_password_token == token, User.is_active.is_(True))
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def exists_email_except_user(email: str, exclude_user_id: int) -> bool:
        if not email:
            return False
        stmt = select(User.id).where(User.email == email, User.id != exclude_user_id)
        return db.session.execute(stmt).first() is not None

    @staticmethod
    def add(user: User):
        db.session.add(user)

    @staticmethod
    def delete(user: User):
        db.session.delete(user)

    @staticmethod
    def list(filters: UserFilters, page: Page) -> Tuple[List[User], int]:
        conditions = []
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        if filters.role:
            conditions.append(User.role == filters.role)
        if filters.is_active is not None:
            conditions.append(User.is_active.is_(filters.is_active))

        count_stmt = select(func.count(User.id))
        stmt = select(User)
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            stmt = stmt.where(*conditions)
        total = db.session.execute(count_stmt).scalar() or 0
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc()).offset(page.offset).limit(page.limit)
        return list(db.session.execute(stmt).scalars()), total

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
