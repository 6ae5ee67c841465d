# services/application_service.py
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from constants.activity import ActivityAction, ActivityResource
from models.application import Application
from repositories.application_repository import ApplicationRepository
from services.activity_service import ActivityService
from utils.exceptions import ConflictError, NotFoundError, ValidationError
from utils.permissions import PermissionScope
from utils.validators import APPLICATION_NAME_RE, check_length

logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
DISPLAY_NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
DUPLICATE_NAME_MSG = "Application with this name already exists"


class ApplicationService:

    @staticmethod
    def _validate(name: Optional[str], display_name: Optional[str], description: Optional[str]):
        errors = []
        if name is not None:
            errors.extend(check_length(name, "Name", NAME_MAX_LENGTH, NAME_MIN_LENGTH))
            if not APPLICATION_NAME_RE.match(name):
                errors.append("Name can only contain letters, numbers, spaces, hyphens, underscores, and dots")
        if display_name is not None:
            errors.extend(check_length(display_name, "Display name", DISPLAY_NAME_MAX_LENGTH, 1))
        errors.extend(check_length(description, "Description", DESCRIPTION_MAX_LENGTH))
        if errors:
            raise ValidationError("Validation error", details=errors)

    @staticmethod
    def list(search: Optional[str] = None, is_active: Optional[bool] = None) -> List[Application]:
        return ApplicationRepository.list(search=search, is_active=is_active)

    @staticmethod
    def get(application_id: int) -> Application:
        app_ = ApplicationRepository.get_by_id(application_id)
        if not app_:
            raise NotFoundError("Application not found")
        return app_

    @staticmethod
    def create(actor: PermissionScope, data: dict) -> Application:
        name = (data.get("name") or "").strip()
        display_name = (data.get("displayName") or "").strip()
        if not name or not display_name:
            raise ValidationError("Name and display name are required")
        description = data.get("description")
        ApplicationService._validate(name, display_name, description)
        if ApplicationRepository.get_by_name_ci(name):
            raise ConflictError(DUPLICATE_NAME_MSG)

        application = Application(
            name=name,
            display_name=display_name,
            description=(description or "").strip() or None,
            is_active=data.get("isActive", True) is not False,
        )
        ApplicationRepository.add(application)
        try:
            ApplicationRepository.commit()
        except IntegrityError:
            ApplicationRepository.rollback()
            raise ConflictError(DUPLICATE_NAME_MSG)
        ActivityService.log(actor, ActivityAction.APPLICATION_CREATED, ActivityResource.APPLICATION,
                            details=f"Created application {name}", resource_id=application.id,
                            application=name)
        return application

    @staticmethod
    def update(actor: PermissionScope, application_id: int, data: dict) -> Application:
        application = ApplicationService.get(application_id)
        name = data.get("name")
        name = name.strip() if isinstance(name, str) else None
        display_name = data.get("displayName")
        display_name = display_name.strip() if isinstance(display_name, str) else None
        ApplicationService._validate(name, display_name, data.get("description"))
        if name and ApplicationRepository.get_by_name_ci(name, exclude_id=application.id):
            raise ConflictError(DUPLICATE_NAME_MSG)

        if name:
            application.name = name
        if display_name:
            application.display_name = display_name
        if "description" in data:
            application.description = (data.get("description") or "").strip() or None
        if "isActive" in data:
            application.is_active = bool(data.get("isActive"))
        try:
            ApplicationRepository.commit()
        except IntegrityError:
            ApplicationRepository.rollback()
            raise ConflictError(DUPLICATE_NAME_MSG)
        ActivityService.log(actor, ActivityAction.APPLICATION_UPDATED, ActivityResource.APPLICATION,
                            details=f"Updated application {application.name}", resource_id=application.id,
                            application=application.name)
        return application

    @staticmethod
    def delete(actor: PermissionScope, application_id: int):
        application = ApplicationService.get(application_id)
        name = application.name
        ApplicationRepository.delete(application)
        ApplicationRepository.commit()
        ActivityService.log(actor, ActivityAction.APPLICATION_DELETED, ActivityResource.APPLICATION,
                            details=f"Deleted application {name}", resource_id=application_id,
                            application=name)

    @staticmethod
    def active_names() -> List[str]:
        return ApplicationRepository.active_names()

    @staticmethod
    def ensure_default_applications(app):
        created = []
        for name in app.config.get("DEFAULT_APPLICATIONS") or []:
            if ApplicationRepository.get_by_name_ci(name):
                continue
            ApplicationRepository.add(Application(name=name, display_name=name, is_active=True))
            created.append(name)
        if created:
            ApplicationRepository.commit()
            app.logger.info("默认应用已创建: %s", ", ".join(created))
