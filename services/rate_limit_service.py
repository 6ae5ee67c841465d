# services/rate_limit_service.py
import logging

from repositories.rate_limit_repository import RateLimitRepository

logger = logging.getLogger(__name__)


class ForgotPasswordRateLimiter:
    """
    同一邮箱的找回密码请求限频。
    超限时只跳过发信，不改变对外响应，避免泄露账号是否存在。
    """

    def __init__(self, email: str, limit: int, window_seconds: int):
        self.key = f"pwdreset:req:{email}"
        self.limit = limit
        self.window_seconds = window_seconds

    def allow(self) -> bool:
        try:
            count = RateLimitRepository.hit(self.key, self.window_seconds)
        except Exception:
            # Redis 不可用时放行
            logger.warning("forgot-password rate limit unavailable key=%s", self.key, exc_info=True)
            return True
        if count > self.limit:
            logger.info("forgot-password rate limited key=%s count=%s", self.key, count)
            return False
        return True

    def clear(self):
        try:
            RateLimitRepository.clear(self.key)
        except Exception:
            logger.warning("forgot-password rate limit clear failed key=%s", self.key, exc_info=True)
