# extensions/redis_client.py
import os
import redis
from flask import current_app, has_app_context

_redis_client = None


def _redis_url() -> str:
    if has_app_context():
        return current_app.config.get("REDIS_URL") or os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")
    return os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")


def get_redis():
    global _redis_client
    if _redis_client is not None:
        return _redis_client
    _redis_client = redis.from_url(_redis_url(), decode_responses=True)
    return _redis_client

