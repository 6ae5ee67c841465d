from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from extensions.database import db
from models.release_plan import ReleasePlan
from utils.filters import ReleasePlanFilters


class ReleasePlanRepository:
    @staticmethod
    def create(**fields) -> ReleasePlan:
        plan = ReleasePlan(**fields)
        db.session.add(plan)
        db.session.flush()
        return plan

    @staticmethod
    def get_by_id(plan_id: int) -> Optional[ReleasePlan]:
        return db.session.get(ReleasePlan, plan_id)

    @staticmethod
    def get_by_project_and_version(project_id: int, version: str,
                                   exclude_id: Optional[int] = None) -> Optional[ReleasePlan]:
        stmt = select(ReleasePlan).where(
            ReleasePlan.project_id == project_id,
            ReleasePlan.version == version,
        )
        if exclude_id is not None:
            stmt = stmt.where(ReleasePlan.id != exclude_id)
        return db.session.execute(stmt).scalars().first()

    @staticmethod
    def list(filters: ReleasePlanFilters) -> List[ReleasePlan]:
        conditions = []
        if filters.project_id:
            conditions.append(ReleasePlan.project_id == filters.project_id)
        if filters.status:
            conditions.append(ReleasePlan.status == filters.status)
        if filters.priority:
            conditions.append(ReleasePlan.priority == filters.priority)
        stmt = select(ReleasePlan)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(ReleasePlan.planned_date.asc(), ReleasePlan.id.asc())
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def update(plan: ReleasePlan, **fields) -> ReleasePlan:
        for key, value in fields.items():
            setattr(plan, key, value)
        db.session.flush()
        return plan

    @staticmethod
    def delete(plan: ReleasePlan):
        db.session.delete(plan)

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
