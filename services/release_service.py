# services/release_service.py
import logging

from sqlalchemy.exc import IntegrityError

from constants.activity import ActivityAction, ActivityResource
from constants.release import (
    DESCRIPTION_MAX_LENGTH,
    FeatureCategory,
    ReleaseStatus,
    TITLE_MAX_LENGTH,
    validate_status,
    validate_type,
    validate_version,
)
from constants.roles import UserRole
from models.release import Release
from repositories.application_repository import ApplicationRepository
from repositories.release_repository import ReleaseRepository
from services.activity_service import ActivityService
from services.work_item_service import WorkItemService
from utils.datetime_helpers import parse_datetime, utcnow
from utils.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from utils.filters import Page, ReleaseFilters
from utils.permissions import PermissionScope, accessible_applications, can_access_application
from utils.validators import check_length, string_list, validate_url
from utils.work_items import export_stats, iter_ordered, type_label

logger = logging.getLogger(__name__)

DUPLICATE_VERSION_MSG = "Release version already exists"
RELEASE_NOT_FOUND = "Release not found"


def _is_basic(user) -> bool:
    return user.role == UserRole.BASIC.value


class ReleaseService:

    # ---------- 校验 ----------
    @staticmethod
    def _normalize_features(raw) -> list[dict]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ValidationError("Validation error", details=["features must be a list"])
        features, errors = [], []
        for entry in raw:
            if not isinstance(entry, dict) or not (entry.get("title") or "").strip():
                errors.append("Feature title is required")
                continue
            category = entry.get("category") or FeatureCategory.NEW.value
            if category not in FeatureCategory.values():
                errors.append(f"Feature category must be one of {FeatureCategory.values()}")
                continue
            features.append({
                "title": entry["title"].strip(),
                "description": (entry.get("description") or "").strip(),
                "category": category,
            })
        if errors:
            raise ValidationError("Validation error", details=errors)
        return features

    @staticmethod
    def _build_fields(data: dict, partial: bool) -> dict:
        """
        将请求体转换为模型字段；partial=True 时只处理出现的字段
        """
        fields = {}
        errors = []

        def present(key):
            return key in data if partial else True

        if present("title"):
            title = (data.get("title") or "").strip()
            if not title:
                errors.append("Title is required")
            errors.extend(check_length(title, "Title", TITLE_MAX_LENGTH))
            fields["title"] = title
        if present("description"):
            description = (data.get("description") or "").strip()
            if not description:
                errors.append("Description is required")
            errors.extend(check_length(description, "Description", DESCRIPTION_MAX_LENGTH))
            fields["description"] = description
        if present("applicationName"):
            fields["application_name"] = (data.get("applicationName") or "").strip()
        if "version" in data:
            version = (data.get("version") or "").strip() or None
            if version:
                validate_version(version)
            fields["version"] = version
        if present("type"):
            validate_type(data.get("type"))
            fields["type"] = data.get("type")
        if "status" in data and data.get("status"):
            validate_status(data.get("status"))
            fields["status"] = data.get("status")
        if "releaseDate" in data:
            fields["release_date"] = parse_datetime(data.get("releaseDate"), "releaseDate") or utcnow()
        if "downloadUrl" in data:
            url = (data.get("downloadUrl") or "").strip() or None
            if url and not validate_url(url):
                errors.append("Download URL must be a valid HTTP/HTTPS URL")
            fields["download_url"] = url
        if "features" in data:
            fields["features"] = ReleaseService._normalize_features(data.get("features"))
        if "bugFixes" in data:
            fields["bug_fixes"] = string_list(data.get("bugFixes"), "bugFixes")
        if "breakingChanges" in data:
            fields["breaking_changes"] = string_list(data.get("breakingChanges"), "breakingChanges")
        if "workItems" in data:
            fields["work_items"] = WorkItemService.normalize_list(data.get("workItems"))
        if "isPublished" in data:
            fields["is_published"] = bool(data.get("isPublished"))
        if errors:
            raise ValidationError("Validation error", details=errors)
        return fields

    @staticmethod
    def _check_application(user, application_name: str):
        if not application_name:
            raise ValidationError("Missing required fields: title, applicationName, description, type")
        if application_name not in ApplicationRepository.active_names():
            raise ValidationError("Validation error", details=[f"Unknown application: {application_name}"])
        if not can_access_application(user, application_name):
            raise AuthorizationError(
                "Access denied. You do not have permission to create releases for this application."
            )

    # ---------- 查询 ----------
    @staticmethod
    def list(user, filters: ReleaseFilters, page: Page):
        apps = accessible_applications(user)
        if filters.application_name:
            if apps is not None and filters.application_name not in apps:
                return [], 0
            apps = None if apps is None else [filters.application_name]
        published_only = _is_basic(user)
        if published_only:
            filters.published = None
        return ReleaseRepository.list(filters, page, applications=apps, published_only=published_only)

    @staticmethod
    def get(user, release_id: int) -> Release:
        release = ReleaseRepository.get_by_id(release_id)
        # basic 用户看不到未发布版本，统一按不存在处理
        if not release or (_is_basic(user) and not release.is_published):
            raise NotFoundError(RELEASE_NOT_FOUND)
        if not can_access_application(user, release.application_name):
            raise AuthorizationError("Access denied")
        return release

    @staticmethod
    def get_for_update(release_id: int) -> Release:
        release = ReleaseRepository.get_by_id(release_id)
        if not release:
            raise NotFoundError(RELEASE_NOT_FOUND)
        return release

    @staticmethod
    def detail(release: Release) -> dict:
        data = release.to_dict()
        data["orderedWorkItems"] = [
            dict(item, level=depth, typeLabel=type_label(item.get("type")))
            for item, depth in iter_ordered(release.work_items or [])
        ]
        return data

    # ---------- 写入 ----------
    @staticmethod
    def create(actor: PermissionScope, user, data: dict) -> Release:
        if not data.get("title") or not data.get("applicationName") or not data.get("description") \
                or not data.get("type"):
            raise ValidationError("Missing required fields: title, applicationName, description, type")
        fields = ReleaseService._build_fields(data, partial=False)
        ReleaseService._check_application(user, fields["application_name"])
        if fields.get("version") and ReleaseRepository.get_by_version(fields["version"]):
            raise ConflictError(DUPLICATE_VERSION_MSG)

        fields.setdefault("release_date", utcnow())
        fields.setdefault("status", ReleaseStatus.DRAFT.value)
        values = {"features": [], "bug_fixes": [], "breaking_changes": [], "work_items": []}
        values.update(fields)
        release = Release(
            author_id=actor.user_id,
            author_name=actor.name or user.name or "Unknown",
            author_email=actor.email or user.email,
            **values,
        )
        release.apply_publish_rule()
        ReleaseRepository.add(release)
        try:
            ReleaseRepository.commit()
        except IntegrityError:
            ReleaseRepository.rollback()
            raise ConflictError(DUPLICATE_VERSION_MSG)
        logger.info("release created id=%s version=%s", release.id, release.version)
        ActivityService.log(actor, ActivityAction.RELEASE_CREATED, ActivityResource.RELEASE,
                            details=f"Created release {release.title}", resource_id=release.id,
                            application=release.application_name)
        return release

    @staticmethod
    def update(actor: PermissionScope, user, release_id: int, data: dict) -> Release:
        release = ReleaseService.get_for_update(release_id)
        if not can_access_application(user, release.application_name):
            raise AuthorizationError("Access denied")
        fields = ReleaseService._build_fields(data, partial=True)
        if "application_name" in fields:
            ReleaseService._check_application(user, fields["application_name"])
        version = fields.get("version")
        if version and ReleaseRepository.get_by_version(version, exclude_id=release.id):
            raise ConflictError(DUPLICATE_VERSION_MSG)

        was_published = bool(release.is_published)
        for key, value in fields.items():
            setattr(release, key, value)
        release.apply_publish_rule()
        try:
            ReleaseRepository.commit()
        except IntegrityError:
            ReleaseRepository.rollback()
            raise ConflictError(DUPLICATE_VERSION_MSG)

        action = ActivityAction.RELEASE_UPDATED
        if release.is_published and not was_published:
            action = ActivityAction.RELEASE_PUBLISHED
        ActivityService.log(actor, action, ActivityResource.RELEASE,
                            details=f"Updated release {release.title}", resource_id=release.id,
                            application=release.application_name)
        return release

    @staticmethod
    def delete(actor: PermissionScope, release_id: int):
        release = ReleaseService.get_for_update(release_id)
        title, application = release.title, release.application_name
        ReleaseRepository.delete(release)
        ReleaseRepository.commit()
        ActivityService.log(actor, ActivityAction.RELEASE_DELETED, ActivityResource.RELEASE,
                            details=f"Deleted release {title}", resource_id=release_id,
                            application=application)

    # ---------- 统计 ----------
    @staticmethod
    def stats(user) -> dict:
        apps = accessible_applications(user)
        published_only = _is_basic(user)
        releases = ReleaseRepository.all_in_scope(apps, published_only)
        items = [item for r in releases for item in (r.work_items or [])]
        published = sum(1 for r in releases if r.is_published)
        return {
            "total": len(releases),
            "published": published,
            "drafts": len(releases) - published,
            "byApplication": ReleaseRepository.count_by(Release.application_name, apps, published_only),
            "byType": ReleaseRepository.count_by(Release.type, apps, published_only),
            "byStatus": ReleaseRepository.count_by(Release.status, apps, published_only),
            "workItems": export_stats(items),
        }
