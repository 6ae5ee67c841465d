from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select

from constants.activity import DEFAULT_APPLICATION_LABEL
from extensions.database import db
from models.activity import Activity
from utils.filters import ActivityFilters


def _range_conditions(start: Optional[datetime], end: Optional[datetime]) -> list:
    conditions = []
    if start is not None:
        conditions.append(Activity.timestamp >= start)
    if end is not None:
        conditions.append(Activity.timestamp <= end)
    return conditions


class ActivityRepository:
    """审计日志只追加：仓储不提供更新与删除"""

    @staticmethod
    def add(activity: Activity):
        db.session.add(activity)

    @staticmethod
    def list(filters: ActivityFilters) -> Tuple[List[Activity], int]:
        conditions = []
        if filters.application:
            conditions.append(Activity.application == filters.application)
        if filters.action:
            conditions.append(Activity.action == filters.action)
        if filters.resource:
            conditions.append(Activity.resource == filters.resource)
        if filters.user_id is not None:
            conditions.append(Activity.user_id == filters.user_id)
        # 与列表页一致：起止时间需同时给出才生效
        if filters.start_date and filters.end_date:
            conditions.extend(_range_conditions(filters.start_date, filters.end_date))

        count_stmt = select(func.count(Activity.id))
        stmt = select(Activity)
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            stmt = stmt.where(*conditions)
        total = db.session.execute(count_stmt).scalar() or 0
        stmt = stmt.order_by(Activity.timestamp.desc(), Activity.id.desc()).offset(filters.skip).limit(filters.limit)
        return list(db.session.execute(stmt).scalars()), total

    @staticmethod
    def count(start=None, end=None) -> int:
        stmt = select(func.count(Activity.id))
        conditions = _range_conditions(start, end)
        if conditions:
            stmt = stmt.where(*conditions)
        return db.session.execute(stmt).scalar() or 0

    @staticmethod
    def count_unique_users(start=None, end=None) -> int:
        stmt = select(func.count(func.distinct(Activity.user_id)))
        conditions = _range_conditions(start, end)
        if conditions:
            stmt = stmt.where(*conditions)
        return db.session.execute(stmt).scalar() or 0

    @staticmethod
    def count_by(column, start=None, end=None) -> Dict[str, int]:
        stmt = select(column, func.count(Activity.id)).group_by(column)
        conditions = _range_conditions(start, end)
        if conditions:
            stmt = stmt.where(*conditions)
        return {key: cnt for key, cnt in db.session.execute(stmt).all()}

    @staticmethod
    def application_breakdown(start=None, end=None) -> List[dict]:
        app_col = func.coalesce(Activity.application, DEFAULT_APPLICATION_LABEL)
        total = func.count(Activity.id)
        stmt = (
            select(
                app_col.label("application"),
                total.label("count"),
                func.count(func.distinct(Activity.user_id)).label("unique_users"),
                func.max(Activity.timestamp).label("last_activity"),
            )
            .group_by(app_col)
            .order_by(total.desc())
        )
        conditions = _range_conditions(start, end)
        if conditions:
            stmt = stmt.where(*conditions)
        return [dict(row._mapping) for row in db.session.execute(stmt).all()]

    @staticmethod
    def top_users(limit: int, start=None, end=None) -> List[dict]:
        total = func.count(Activity.id)
        stmt = (
            select(
                Activity.user_id.label("user_id"),
                func.max(Activity.user_name).label("user_name"),
                func.max(Activity.user_email).label("user_email"),
                func.max(Activity.user_role).label("user_role"),
                total.label("activity_count"),
                func.max(Activity.timestamp).label("last_activity"),
            )
            .group_by(Activity.user_id)
            .order_by(total.desc())
            .limit(limit)
        )
        conditions = _range_conditions(start, end)
        if conditions:
            stmt = stmt.where(*conditions)
        return [dict(row._mapping) for row in db.session.execute(stmt).all()]

    @staticmethod
    def recent(limit: int, start=None, end=None, application: Optional[str] = None) -> List[Activity]:
        conditions = _range_conditions(start, end)
        if application:
            conditions.append(Activity.application == application)
        stmt = select(Activity)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(Activity.timestamp.desc(), Activity.id.desc()).limit(limit)
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def timestamps_since(since: datetime) -> List[datetime]:
        stmt = select(Activity.timestamp).where(Activity.timestamp >= since)
        return [ts for (ts,) in db.session.execute(stmt).all()]

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
