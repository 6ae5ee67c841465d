from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from constants.activity import ActivityAction, ActivityResource
from constants.lifecycle import DeletePolicy, delete_policy
from constants.project import PROJECT_CODE_MAX_LENGTH, validate_project_status
from models.project import Project
from repositories.project_repository import ProjectRepository
from services.activity_service import ActivityService
from utils.datetime_helpers import parse_datetime
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.filters import ProjectFilters
from utils.permissions import PermissionScope
from utils.validators import check_length, string_list, validate_url

NAME_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
DUPLICATE_CODE_MSG = "Project code already exists"


def _normalize_team(raw) -> list[dict]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError("Validation error", details=["team must be a list"])
    team = []
    for member in raw:
        if not isinstance(member, dict) or not (member.get("name") or member.get("email")):
            raise ValidationError("Validation error", details=["Team member requires name or email"])
        team.append({
            "userId": member.get("userId"),
            "name": (member.get("name") or "").strip(),
            "email": (member.get("email") or "").strip().lower(),
            "role": (member.get("role") or "").strip(),
        })
    return team


class ProjectService:

    @staticmethod
    def _build_fields(data: dict, partial: bool, current: Optional[Project] = None) -> dict:
        fields = {}
        errors = []
        if not partial or "name" in data:
            fields["name"] = (data.get("name") or "").strip()
            errors.extend(check_length(fields["name"], "Name", NAME_MAX_LENGTH, 1))
        if not partial or "description" in data:
            fields["description"] = (data.get("description") or "").strip()
            errors.extend(check_length(fields["description"], "Description", DESCRIPTION_MAX_LENGTH, 1))
        if not partial or "code" in data:
            fields["code"] = (data.get("code") or "").strip().upper()
            errors.extend(check_length(fields["code"], "Code", PROJECT_CODE_MAX_LENGTH, 1))
        if data.get("status"):
            validate_project_status(data["status"])
            fields["status"] = data["status"]
        if not partial or "startDate" in data:
            fields["start_date"] = parse_datetime(data.get("startDate"), "startDate")
            if fields["start_date"] is None:
                errors.append("Start date is required")
        if "endDate" in data:
            fields["end_date"] = parse_datetime(data.get("endDate"), "endDate")
        if "repository" in data:
            repo = (data.get("repository") or "").strip() or None
            if repo and not validate_url(repo):
                errors.append("Repository must be a valid HTTP/HTTPS URL")
            fields["repository"] = repo
        if "technologies" in data:
            fields["technologies"] = string_list(data.get("technologies"), "technologies")
        if "team" in data:
            fields["team"] = _normalize_team(data.get("team"))

        start = fields.get("start_date") or (current.start_date if current else None)
        end = fields.get("end_date", current.end_date if current else None)
        if start and end and end <= start:
            errors.append("End date must be after start date")
        if errors:
            raise ValidationError("Validation error", details=errors)
        return fields

    @staticmethod
    def list(filters: ProjectFilters) -> List[Project]:
        if filters.status:
            validate_project_status(filters.status)
        return ProjectRepository.list(filters)

    @staticmethod
    def get(project_id: int) -> Project:
        proj = ProjectRepository.get_by_id(project_id)
        if not proj:
            raise NotFoundError("Project not found")
        return proj

    @staticmethod
    def create(actor: PermissionScope, data: dict) -> Project:
        if not data.get("name") or not data.get("description") or not data.get("code") \
                or not data.get("startDate"):
            raise ValidationError("Missing required fields: name, description, code, startDate")
        fields = ProjectService._build_fields(data, partial=False)
        if ProjectRepository.get_by_code(fields["code"]):
            raise ConflictError(DUPLICATE_CODE_MSG)
        fields.setdefault("technologies", [])
        fields.setdefault("team", [])
        project = ProjectRepository.create(
            manager_id=actor.user_id,
            manager_name=actor.name,
            manager_email=actor.email,
            **fields,
        )
        try:
            ProjectRepository.commit()
        except IntegrityError:
            raise ConflictError(DUPLICATE_CODE_MSG)
        ActivityService.log(actor, ActivityAction.PROJECT_CREATED, ActivityResource.PROJECT,
                            details=f"Created project {project.code}", resource_id=project.id)
        return project

    @staticmethod
    def update(actor: PermissionScope, project_id: int, data: dict) -> Project:
        proj = ProjectService.get(project_id)
        fields = ProjectService._build_fields(data, partial=True, current=proj)
        code = fields.get("code")
        if code:
            existing = ProjectRepository.get_by_code(code)
            if existing and existing.id != proj.id:
                raise ConflictError(DUPLICATE_CODE_MSG)
        ProjectRepository.update(proj, **fields)
        try:
            ProjectRepository.commit()
        except IntegrityError:
            raise ConflictError(DUPLICATE_CODE_MSG)
        ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.PROJECT,
                            details=f"Updated project {proj.code}", resource_id=proj.id)
        return proj

    @staticmethod
    def delete(actor: PermissionScope, project_id: int):
        proj = ProjectService.get(project_id)
        if delete_policy("project") is DeletePolicy.SOFT:
            ProjectRepository.soft_delete(proj, user_id=actor.user_id)
        ProjectRepository.commit()
        ActivityService.log(actor, ActivityAction.SETTINGS_UPDATED, ActivityResource.PROJECT,
                            details=f"Deleted project {proj.code}", resource_id=proj.id)
