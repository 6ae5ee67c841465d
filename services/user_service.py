# services/user_service.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from constants.activity import ActivityAction, ActivityResource
from constants.roles import UserRole, normalize_role
from models.user import User
from repositories.application_repository import ApplicationRepository
from repositories.user_repository import UserRepository
from services.activity_service import ActivityService
from utils.datetime_helpers import utcnow
from utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BizError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from utils.filters import Page, UserFilters
from utils.password import hash_password, validate_password_policy, verify_password
from utils.permissions import PermissionScope
from utils.validators import check_length, normalize_email, string_list, validate_email

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
DUPLICATE_EMAIL_MSG = "User with this email already exists"


class UserService:

    @staticmethod
    def _validate_profile(email: Optional[str], name: Optional[str]) -> list[str]:
        errors = []
        if email is not None and not validate_email(email):
            errors.append("Please enter a valid email")
        if name is not None:
            if not name.strip():
                errors.append("Name is required")
            errors.extend(check_length(name.strip(), "Name", NAME_MAX_LENGTH))
        return errors

    @staticmethod
    def _parse_role(role_raw) -> str:
        try:
            return normalize_role(role_raw)
        except ValueError:
            raise ValidationError("Validation error", details=[f"role must be one of {UserRole.values()}"])

    @staticmethod
    def _validate_applications(raw) -> list[str]:
        names = string_list(raw, "applications")
        known = set(ApplicationRepository.active_names())
        invalid = [n for n in names if n not in known]
        if invalid:
            raise ValidationError(
                f"Invalid application names: {', '.join(invalid)}",
                details=[f"Valid applications are: {', '.join(sorted(known))}"],
            )
        return names

    @staticmethod
    def _persist_new(user: User) -> User:
        UserRepository.add(user)
        try:
            UserRepository.commit()
        except IntegrityError:
            UserRepository.rollback()
            raise ConflictError(DUPLICATE_EMAIL_MSG)
        except SQLAlchemyError:
            UserRepository.rollback()
            raise BizError("Database error", code=500)
        return user

    @staticmethod
    def register(email, name, password, role_raw=None, actor: PermissionScope | None = None) -> User:
        """
        自助注册：默认 basic，只有携带超级管理员 token 时才接受指定角色
        """
        if not email or not name or not password:
            raise ValidationError("Email, name, and password are required")
        password_errors = validate_password_policy(password)
        if password_errors:
            raise ValidationError(password_errors[0])
        email = normalize_email(email)
        errors = UserService._validate_profile(email, name)
        if errors:
            raise ValidationError("Validation failed", details=errors)
        if UserRepository.find_by_email(email):
            raise ConflictError(DUPLICATE_EMAIL_MSG)

        role = UserRole.BASIC.value
        if actor is not None and actor.is_super_admin() and role_raw:
            role = UserService._parse_role(role_raw)

        user = UserService._persist_new(User(
            email=email,
            name=name.strip(),
            password_hash=hash_password(password),
            role=role,
            is_active=True,
            applications=[],
        ))
        logger.info("user registered id=%s email=%s", user.id, user.email)
        ActivityService.log(user, ActivityAction.REGISTER, ActivityResource.USER,
                            details="User registered", resource_id=user.id)
        return user

    @staticmethod
    def authenticate(email, password) -> User:
        if not email or not password:
            raise ValidationError("Email and password are required")
        user = UserRepository.find_by_email(normalize_email(email))
        if not user or not user.is_active or not verify_password(user.password_hash, password):
            raise AuthenticationError("Invalid email or password")
        user.last_login_at = utcnow()
        UserRepository.commit()
        ActivityService.log(user, ActivityAction.LOGIN, ActivityResource.USER,
                            details="User logged in successfully", resource_id=user.id)
        return user

    @staticmethod
    def create_user(actor: PermissionScope, data: dict) -> User:
        email = data.get("email")
        name = data.get("name")
        password = data.get("password")
        if not email or not name or not password:
            raise ValidationError("Email, name, and password are required")

        role = UserService._parse_role(data.get("role"))
        if role == UserRole.SUPER_ADMIN.value and not actor.is_super_admin():
            raise AuthorizationError("Only Super Admin can create Super Admin users")
        applications = data.get("applications") or []
        if applications and not actor.is_super_admin():
            raise AuthorizationError("Only Super Admin can assign applications to users")

        errors = UserService._validate_profile(normalize_email(email), name)
        errors.extend(validate_password_policy(password))
        if errors:
            raise ValidationError("Validation failed", details=errors)
        email = normalize_email(email)
        if UserRepository.find_by_email(email):
            raise ConflictError(DUPLICATE_EMAIL_MSG)

        user = UserService._persist_new(User(
            email=email,
            name=name.strip(),
            password_hash=hash_password(password),
            role=role,
            is_active=True,
            # 超级管理员不受应用白名单限制
            applications=[] if role == UserRole.SUPER_ADMIN.value else UserService._validate_applications(applications),
        ))
        ActivityService.log(actor, ActivityAction.USER_CREATED, ActivityResource.USER,
                            details=f"Created user {user.email}", resource_id=user.id)
        return user

    @staticmethod
    def list_users(filters: UserFilters, page: Page) -> Tuple[List[User], int]:
        if filters.role and not UserRole.has_value(filters.role):
            filters.role = None
        return UserRepository.list(filters, page)

    @staticmethod
    def get_user(actor: PermissionScope, user_id: int) -> User:
        if not actor.is_admin() and actor.user_id != user_id:
            raise AuthorizationError("Insufficient permissions")
        user = UserRepository.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def update_user(actor: PermissionScope, user_id: int, data: dict) -> User:
        """
        规则：
          - 超级管理员账号或授予超级管理员角色：仅超级管理员可操作
          - basic 只能改自己，且不能改角色 / 启用状态
          - 应用白名单只能由超级管理员分配
        """
        target = UserRepository.find_by_id(user_id)
        if not target:
            raise NotFoundError("User not found")

        role_raw = data.get("role")
        requested_role = role_raw.strip().lower() if isinstance(role_raw, str) else None
        is_active = data.get("isActive")
        if (target.is_super_admin or requested_role == UserRole.SUPER_ADMIN.value) and not actor.is_super_admin():
            raise AuthorizationError("Only Super Admin can modify Super Admin users")
        if not actor.is_admin():
            if actor.user_id != target.id:
                raise AuthorizationError("You can only edit your own profile")
            if role_raw or is_active is not None:
                raise AuthorizationError("You cannot change role or active status")
        if "applications" in data and not actor.is_super_admin():
            raise AuthorizationError("Only Super Admin can assign applications to users")

        name = data.get("name")
        email = normalize_email(data["email"]) if data.get("email") else None
        errors = UserService._validate_profile(email, name)
        if errors:
            raise ValidationError("Validation failed", details=errors)
        if email and UserRepository.exists_email_except_user(email, target.id):
            raise ConflictError(DUPLICATE_EMAIL_MSG)

        if name is not None:
            target.name = name.strip()
        if email:
            target.email = email
        if role_raw:
            target.role = UserService._parse_role(role_raw)
        if is_active is not None:
            if actor.user_id == target.id and not is_active:
                raise ValidationError("You cannot deactivate your own account")
            target.is_active = bool(is_active)
        if "applications" in data:
            target.applications = UserService._validate_applications(data.get("applications"))

        try:
            UserRepository.commit()
        except IntegrityError:
            UserRepository.rollback()
            raise ConflictError(DUPLICATE_EMAIL_MSG)
        ActivityService.log(actor, ActivityAction.USER_UPDATED, ActivityResource.USER,
                            details=f"Updated user {target.email}", resource_id=target.id)
        return target

    @staticmethod
    def delete_user(actor: PermissionScope, user_id: int):
        target = UserRepository.find_by_id(user_id)
        if not target:
            raise NotFoundError("User not found")
        if target.id == actor.user_id:
            raise AuthorizationError("You cannot delete your own account")
        if target.is_super_admin:
            raise AuthorizationError("Super Admin users cannot be deleted")
        email = target.email
        UserRepository.delete(target)
        UserRepository.commit()
        logger.info("user deleted id=%s by=%s", user_id, actor.user_id)
        ActivityService.log(actor, ActivityAction.USER_DELETED, ActivityResource.USER,
                            details=f"Deleted user {email}", resource_id=user_id)

    @staticmethod
    def ensure_default_admin(app):
        email = normalize_email(app.config.get("ADMIN_INIT_EMAIL"))
        if not email or UserRepository.find_by_email(email):
            return
        user = User(
            email=email,
            name=app.config.get("ADMIN_INIT_NAME") or "Super Admin",
            password_hash=hash_password(app.config["ADMIN_INIT_PASSWORD"]),
            role=UserRole.SUPER_ADMIN.value,
            is_active=True,
            applications=[],
        )
        UserRepository.add(user)
        UserRepository.commit()
        app.logger.info("默认超级管理员已创建: %s", email)
