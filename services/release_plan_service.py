from typing import List

from sqlalchemy.exc import IntegrityError

from constants.activity import ActivityAction, ActivityResource
from constants.project import (
    DEFAULT_PLAN_PRIORITY,
    ESTIMATED_EFFORT_MAX_HOURS,
    validate_plan_priority,
    validate_plan_status,
)
from models.release_plan import ReleasePlan
from repositories.project_repository import ProjectRepository
from repositories.release_plan_repository import ReleasePlanRepository
from repositories.user_repository import UserRepository
from services.activity_service import ActivityService
from utils.datetime_helpers import parse_datetime
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.filters import ReleasePlanFilters
from utils.permissions import PermissionScope
from utils.validators import check_length, string_list

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
VERSION_MAX_LENGTH = 64
DUPLICATE_VERSION_MSG = "Version already exists for this project"


class ReleasePlanService:

    @staticmethod
    def _assignee_fields(raw_id) -> dict:
        if raw_id in (None, ""):
            return {"assignee_id": None, "assignee_name": None, "assignee_email": None}
        try:
            user = UserRepository.find_by_id(int(raw_id))
        except (TypeError, ValueError):
            user = None
        if not user:
            raise ValidationError("Validation error", details=["Assignee not found"])
        return {"assignee_id": user.id, "assignee_name": user.name, "assignee_email": user.email}

    @staticmethod
    def _build_fields(data: dict, partial: bool) -> dict:
        fields = {}
        errors = []
        if not partial or "title" in data:
            fields["title"] = (data.get("title") or "").strip()
            errors.extend(check_length(fields["title"], "Title", TITLE_MAX_LENGTH, 1))
        if not partial or "version" in data:
            fields["version"] = (data.get("version") or "").strip()
            errors.extend(check_length(fields["version"], "Version", VERSION_MAX_LENGTH, 1))
        if not partial or "plannedDate" in data:
            fields["planned_date"] = parse_datetime(data.get("plannedDate"), "plannedDate")
            if fields["planned_date"] is None:
                errors.append("Planned date is required")
        if "description" in data:
            fields["description"] = (data.get("description") or "").strip() or None
            errors.extend(check_length(fields["description"], "Description", DESCRIPTION_MAX_LENGTH))
        if data.get("status"):
            validate_plan_status(data["status"])
            fields["status"] = data["status"]
        if data.get("priority"):
            validate_plan_priority(data["priority"])
            fields["priority"] = data["priority"]
        if "estimatedEffort" in data:
            effort = data.get("estimatedEffort")
            if effort in (None, ""):
                fields["estimated_effort"] = None
            else:
                try:
                    effort = int(effort)
                except (TypeError, ValueError):
                    effort = -1
                if not 0 <= effort <= ESTIMATED_EFFORT_MAX_HOURS:
                    errors.append(f"Estimated effort must be between 0 and {ESTIMATED_EFFORT_MAX_HOURS} hours")
                fields["estimated_effort"] = effort
        for key, column in (("features", "features"), ("dependencies", "dependencies"), ("risks", "risks")):
            if key in data:
                fields[column] = string_list(data.get(key), key)
        if "assigneeId" in data:
            fields.update(ReleasePlanService._assignee_fields(data.get("assigneeId")))
        if errors:
            raise ValidationError("Validation error", details=errors)
        return fields

    @staticmethod
    def list(filters: ReleasePlanFilters) -> List[ReleasePlan]:
        return ReleasePlanRepository.list(filters)

    @staticmethod
    def get(plan_id: int) -> ReleasePlan:
        plan = ReleasePlanRepository.get_by_id(plan_id)
        if not plan:
            raise NotFoundError("Release plan not found")
        return plan

    @staticmethod
    def create(actor: PermissionScope, data: dict) -> ReleasePlan:
        if not data.get("projectId") or not data.get("plannedDate") or not data.get("version") \
                or not data.get("title"):
            raise ValidationError("Missing required fields: projectId, plannedDate, version, title")
        try:
            project_id = int(data["projectId"])
        except (TypeError, ValueError):
            raise ValidationError("projectId must be an integer")
        project = ProjectRepository.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")

        fields = ReleasePlanService._build_fields(data, partial=False)
        if ReleasePlanRepository.get_by_project_and_version(project.id, fields["version"]):
            raise ConflictError(DUPLICATE_VERSION_MSG)
        fields.setdefault("priority", DEFAULT_PLAN_PRIORITY)
        fields.setdefault("features", [])
        fields.setdefault("dependencies", [])
        fields.setdefault("risks", [])
        plan = ReleasePlanRepository.create(
            project_id=project.id,
            project_name=project.name,
            project_code=project.code,
            created_by_id=actor.user_id,
            created_by_name=actor.name,
            created_by_email=actor.email,
            **fields,
        )
        try:
            ReleasePlanRepository.commit()
        except IntegrityError:
            raise ConflictError(DUPLICATE_VERSION_MSG)
        ActivityService.log(actor, ActivityAction.RELEASE_PLAN_CREATED, ActivityResource.RELEASE_PLAN,
                            details=f"Created release plan {plan.version} for {project.code}",
                            resource_id=plan.id)
        return plan

    @staticmethod
    def update(actor: PermissionScope, plan_id: int, data: dict) -> ReleasePlan:
        plan = ReleasePlanService.get(plan_id)
        fields = ReleasePlanService._build_fields(data, partial=True)
        version = fields.get("version")
        if version and ReleasePlanRepository.get_by_project_and_version(plan.project_id, version, exclude_id=plan.id):
            raise ConflictError(DUPLICATE_VERSION_MSG)
        ReleasePlanRepository.update(plan, **fields)
        try:
            ReleasePlanRepository.commit()
        except IntegrityError:
            raise ConflictError(DUPLICATE_VERSION_MSG)
        ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.RELEASE_PLAN,
                            details=f"Updated release plan {plan.version}", resource_id=plan.id)
        return plan

    @staticmethod
    def delete(actor: PermissionScope, plan_id: int):
        plan = ReleasePlanService.get(plan_id)
        version = plan.version
        ReleasePlanRepository.delete(plan)
        ReleasePlanRepository.commit()
        ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.RELEASE_PLAN,
                            details=f"Deleted release plan {version}", resource_id=plan_id)
