# repositories/rate_limit_repository.py
from extensions.redis_client import get_redis


class RateLimitRepository:
    """固定窗口计数器：首次命中时设置过期时间"""

    @staticmethod
    def hit(key: str, window_seconds: int) -> int:
        r = get_redis()
        v = r.incr(key)
        if v == 1:
            r.expire(key, window_seconds)
        return v

    @staticmethod
    def clear(key: str):
        get_redis().delete(key)
