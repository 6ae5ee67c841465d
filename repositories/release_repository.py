from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select

from extensions.database import db
from models.release import Release
from utils.datetime_helpers import day_range
from utils.filters import Page, ReleaseFilters

SEARCH_SCAN_BATCH = 200


class ReleaseRepository:
    @staticmethod
    def get_by_id(release_id: int) -> Optional[Release]:
        return db.session.get(Release, release_id)

    @staticmethod
    def get_by_version(version: str, exclude_id: Optional[int] = None) -> Optional[Release]:
        stmt = select(Release).where(Release.version == version)
        if exclude_id is not None:
            stmt = stmt.where(Release.id != exclude_id)
        return db.session.execute(stmt).scalars().first()

    @staticmethod
    def _scope_conditions(applications: Optional[Sequence[str]], published_only: bool) -> list:
        conditions = []
        if applications is not None:
            conditions.append(Release.application_name.in_(list(applications)))
        if published_only:
            conditions.append(Release.is_published.is_(True))
        return conditions

    @staticmethod
    def list(
        filters: ReleaseFilters,
        page: Page,
        applications: Optional[Sequence[str]] = None,
        published_only: bool = False,
    ) -> Tuple[List[Release], int]:
        """
        applications 为 None 表示不限应用；空列表直接返回空结果
        """
        if applications is not None and not applications:
            return [], 0
        conditions = ReleaseRepository._scope_conditions(applications, published_only)
        if filters.status:
            conditions.append(Release.status == filters.status)
        if filters.type:
            conditions.append(Release.type == filters.type)
        if filters.application_name:
            conditions.append(Release.application_name == filters.application_name)
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(or_(
                Release.title.ilike(pattern),
                Release.description.ilike(pattern),
                Release.version.ilike(pattern),
            ))
        if filters.release_date:
            start, end = day_range(filters.release_date)
            conditions.append(Release.release_date >= start)
            conditions.append(Release.release_date < end)
        if filters.date_from:
            conditions.append(Release.release_date >= filters.date_from)
        if filters.date_to:
            conditions.append(Release.release_date <= filters.date_to)
        if filters.published is not None:
            conditions.append(Release.is_published.is_(filters.published))

        count_stmt = select(func.count(Release.id))
        stmt = select(Release)
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            stmt = stmt.where(*conditions)
        total = db.session.execute(count_stmt).scalar() or 0
        stmt = (
            stmt.order_by(Release.release_date.desc(), Release.id.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        return list(db.session.execute(stmt).scalars()), total

    @staticmethod
    def search_candidates(
        item_matches: Callable[[dict], bool],
        limit: int,
        applications: Optional[Sequence[str]] = None,
        published_only: bool = False,
    ) -> List[Release]:
        """
        按创建时间倒序分批扫描可见发布，返回前 limit 条至少有一个工作项
        满足 item_matches 的发布
        """
        if applications is not None and not applications:
            return []
        conditions = ReleaseRepository._scope_conditions(applications, published_only)
        stmt = select(Release)
        if conditions:
            stmt = stmt.where(*conditions)
        stmt = (
            stmt.order_by(Release.created_at.desc(), Release.id.desc())
            .execution_options(yield_per=SEARCH_SCAN_BATCH)
        )
        found: List[Release] = []
        result = db.session.execute(stmt).scalars()
        try:
            for release in result:
                if any(item_matches(item) for item in release.work_items or []):
                    found.append(release)
                    if len(found) >= limit:
                        break
        finally:
            result.close()
        return found

    @staticmethod
    def all_in_scope(applications: Optional[Sequence[str]] = None, published_only: bool = False) -> List[Release]:
        if applications is not None and not applications:
            return []
        conditions = ReleaseRepository._scope_conditions(applications, published_only)
        stmt = select(Release)
        if conditions:
            stmt = stmt.where(*conditions)
        return list(db.session.execute(stmt).scalars())

    @staticmethod
    def count_by(column, applications: Optional[Sequence[str]] = None,
                 published_only: bool = False) -> Dict[str, int]:
        if applications is not None and not applications:
            return {}
        conditions = ReleaseRepository._scope_conditions(applications, published_only)
        stmt = select(column, func.count(Release.id)).group_by(column).order_by(func.count(Release.id).desc())
        if conditions:
            stmt = stmt.where(*conditions)
        return {key: count for key, count in db.session.execute(stmt).all()}

    @staticmethod
    def add(release: Release):
        db.session.add(release)

    @staticmethod
    def delete(release: Release):
        db.session.delete(release)

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def rollback():
        db.session.rollback()
