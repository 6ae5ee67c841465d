from typing import List, Optional

from sqlalchemy import func, or_, select

from extensions.database import db
from models.application import Application


class ApplicationRepository:
    @staticmethod
    def get_by_id(application_id: int) -> Optional[Application]:
        return db.session.get(Application, application_id)

    @staticmethod
    def get_by_name_ci(name: str, exclude_id: Optional[int] = None) -> Optional[Application]:
        """名称大小写不敏感查找"""
        stmt = select(Application).where(func.lower(Application.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(Application.id != exclude_id)
        return db.session.execute(stmt).scalars().first()

    @staticmethod
    def list(search: Optional[str] = None, is_active: Optional[bool] = None) -> List[Application]:
        stmt = select(Application)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(
                Application.name.ilike(pattern),
                Application.display_name.ilike(pattern),
                Application.description.ilike(pattern),
            ))
        if is_active is not None:
            stmt = stmt.where(Application.is_active.is_(is_active))
        return list(db.session.execute(stmt.order_by(Application.name.asc())).scalars())

    @staticmethod
    def active_names() -> List[str]:
        stmt = select(Application.name).where(Application.is_active.is_(True))
        return [name for (name,) in db.session.execute(stmt).all()]

    @staticmethod
    def add(application: Application):
        db.session.add(application)

    @staticmethod
    def delete(application: Application):
        db.session.delete(application)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
