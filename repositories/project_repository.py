from typing import Optional, List
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from extensions.database import db
from models.project import Project
from utils.filters import ProjectFilters


class ProjectRepository:
    @staticmethod
    def create(**fields) -> Project:
        project = Project(**fields)
        db.session.add(project)
        db.session.flush()
        return project

    @staticmethod
    def get_by_id(project_id: int, include_inactive: bool = False) -> Optional[Project]:
        stmt = select(Project).where(Project.id == project_id)
        if not include_inactive:
            stmt = stmt.where(Project.is_active.is_(True))
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def get_by_code(code: str) -> Optional[Project]:
        """code 唯一约束覆盖已软删除的项目"""
        stmt = select(Project).where(Project.code == code)
        return db.session.execute(stmt).scalar_one_or_none()

    @staticmethod
    def list(filters: ProjectFilters) -> List[Project]:
        stmt = select(Project)
        conditions = []
        if filters.status:
            conditions.append(Project.status == filters.status)
        if filters.active is not None:
            conditions.append(Project.is_active.is_(filters.active))
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(
                Project.name.ilike(pattern),
                Project.description.ilike(pattern),
                Project.code.ilike(pattern),
            ))
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(Project.name.asc())
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def update(project: Project, **fields) -> Project:
        for key, value in fields.items():
            setattr(project, key, value)
        db.session.flush()
        return project

    @staticmethod
    def soft_delete(project: Project, user_id: Optional[int] = None):
        project.soft_delete(user_id=user_id)
        db.session.flush()

    @staticmethod
    def commit():
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise e

    @staticmethod
    def rollback():
        db.session.rollback()
