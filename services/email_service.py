# services/email_service.py
import logging

from flask import current_app

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Password Reset Request - Tracker"


class EmailService:
    """
    邮件发送（当前仅写日志，不接入真实 SMTP）。
    发送失败返回 False，由调用方决定是否记录，不向外抛出。
    """

    @staticmethod
    def send_email(to: str, subject: str, text: str) -> bool:
        try:
            sender = current_app.config.get("MAIL_SENDER")
            logger.info("email dispatched from=%s to=%s subject=%s", sender, to, subject)
            logger.debug("email body to=%s:\n%s", to, text)
            return True
        except Exception:
            logger.exception("email dispatch failed to=%s", to)
            return False

    @staticmethod
    def build_reset_url(token: str) -> str:
        base = (current_app.config.get("FRONTEND_URL") or "").rstrip("/")
        return f"{base}/reset-password?token={token}"

    @staticmethod
    def password_reset_text(name: str, reset_url: str) -> str:
        return (
            f"Hello {name},\n\n"
            "We received a request to reset your password for your Tracker account.\n"
            f"Reset your password here: {reset_url}\n\n"
            "This link will expire in 1 hour. If you didn't request this reset, please ignore this email.\n"
        )

    @staticmethod
    def send_password_reset(user, token: str) -> bool:
        reset_url = EmailService.build_reset_url(token)
        return EmailService.send_email(
            to=user.email,
            subject=RESET_SUBJECT,
            text=EmailService.password_reset_text(user.name, reset_url),
        )
