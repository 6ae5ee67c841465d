# services/password_service.py
import logging
import secrets
from datetime import timedelta

from flask import current_app

from constants.activity import ActivityAction, ActivityResource
from repositories.user_repository import UserRepository
from services.activity_service import ActivityService
from services.email_service import EmailService
from services.rate_limit_service import ForgotPasswordRateLimiter
from utils.datetime_helpers import utcnow
from utils.exceptions import ValidationError
from utils.password import hash_password, validate_password_policy
from utils.validators import mask_email, normalize_email, validate_email

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."
INVALID_RESET_TOKEN = "Invalid or expired reset token"


class PasswordService:

    @staticmethod
    def forgot_password(email) -> str:
        """
        无论账号是否存在都返回同一提示，防止枚举邮箱。
        """
        if not email:
            raise ValidationError("Email is required")
        email = normalize_email(email)
        if not validate_email(email):
            raise ValidationError("Invalid email format")

        cfg = current_app.config
        limiter = ForgotPasswordRateLimiter(
            email, cfg["FORGOT_PASSWORD_LIMIT"], cfg["FORGOT_PASSWORD_WINDOW_SECONDS"]
        )
        if not limiter.allow():
            return FORGOT_PASSWORD_MESSAGE

        user = UserRepository.find_by_email(email)
        if not user or not user.is_active:
            return FORGOT_PASSWORD_MESSAGE

        # 32 字节 => 64 位十六进制；新 token 覆盖旧 token
        token = secrets.token_hex(32)
        user.reset_password_token = token
        user.reset_password_expires = utcnow() + timedelta(seconds=cfg["RESET_TOKEN_TTL_SECONDS"])
        UserRepository.commit()

        if not EmailService.send_password_reset(user, token):
            logger.error("failed to send password reset email user_id=%s", user.id)
        return FORGOT_PASSWORD_MESSAGE

    @staticmethod
    def _find_valid_user(token):
        user = UserRepository.find_by_reset_token(token)
        if not user or not user.has_valid_reset_token(token):
            raise ValidationError(INVALID_RESET_TOKEN)
        return user

    @staticmethod
    def reset_password(token, new_password):
        if not token or not new_password:
            raise ValidationError("Reset token and new password are required")
        errors = validate_password_policy(new_password)
        if errors:
            raise ValidationError(errors[0])
        user = PasswordService._find_valid_user(token)
        user.password_hash = hash_password(new_password)
        user.clear_reset_token()
        UserRepository.commit()
        ForgotPasswordRateLimiter(user.email, 0, 0).clear()
        logger.info("password reset completed user_id=%s", user.id)
        ActivityService.log(user, ActivityAction.PASSWORD_RESET, ActivityResource.USER,
                            details="Password reset via email token", resource_id=user.id)
        return user

    @staticmethod
    def validate_reset_token(token) -> dict:
        if not token:
            raise ValidationError("Reset token is required")
        user = PasswordService._find_valid_user(token)
        return {"valid": True, "email": mask_email(user.email), "name": user.name}
