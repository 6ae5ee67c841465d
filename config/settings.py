# config/settings.py
import os
from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
load_dotenv(os.path.join(BASE_DIR, ".env"))  # 自动加载环境变量


def _as_bool(val, default=False):
    if val is None:
        return default
    return str(val).lower() in ("1", "true", "yes", "on")


def _as_list(val, default=None):
    if not val:
        return list(default or [])
    return [v.strip() for v in val.split(",") if v.strip()]


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")

    # JWT：缺少密钥时应用拒绝启动
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_EXPIRES_SECONDS = int(os.getenv("JWT_EXPIRES_SECONDS", 7 * 24 * 3600))
    JWT_REVOCATION_ENABLED = _as_bool(os.getenv("JWT_REVOCATION_ENABLED", "1"), True)

    # 登录态 cookie
    AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "auth_token")
    AUTH_COOKIE_SECURE = _as_bool(os.getenv("AUTH_COOKIE_SECURE"), False)

    # 日志相关
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR = os.getenv("LOG_DIR", "./logs")
    LOG_JSON = os.getenv("LOG_JSON", "1") == "1"  # 是否 JSON 格式
    LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", 5 * 1024 * 1024))
    LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", 5))
    APP_NAME = os.getenv("APP_NAME", "tracker")

    # 默认超级管理员（首次启动自动创建）
    ADMIN_INIT_EMAIL = os.getenv("ADMIN_INIT_EMAIL", "admin@example.com")
    ADMIN_INIT_NAME = os.getenv("ADMIN_INIT_NAME", "Super Admin")
    ADMIN_INIT_PASSWORD = os.getenv("ADMIN_INIT_PASSWORD", "Admin123!")

    # 默认应用目录
    DEFAULT_APPLICATIONS = _as_list(
        os.getenv("DEFAULT_APPLICATIONS"),
        ["NRE", "NVE", "E-Vite", "Portal Plus", "Fast 2.0", "FMS"],
    )

    # ========= 密码 & 找回密码 =========
    PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", 6))
    # 重置 token 有效期（秒）
    RESET_TOKEN_TTL_SECONDS = int(os.getenv("RESET_TOKEN_TTL_SECONDS", 3600))
    # 同一邮箱找回密码的频率限制
    FORGOT_PASSWORD_LIMIT = int(os.getenv("FORGOT_PASSWORD_LIMIT", 5))
    FORGOT_PASSWORD_WINDOW_SECONDS = int(os.getenv("FORGOT_PASSWORD_WINDOW_SECONDS", 900))
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
    MAIL_SENDER = os.getenv("MAIL_SENDER", "noreply@tracker.local")

    # =========================================


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///" + os.path.join(BASE_DIR, "tracker.db"))


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")
    AUTH_COOKIE_SECURE = _as_bool(os.getenv("AUTH_COOKIE_SECURE", "1"), True)


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite:///:memory:")
    JWT_SECRET_KEY = os.getenv("TEST_JWT_SECRET_KEY", "test-jwt-secret")
    LOG_DIR = os.getenv("TEST_LOG_DIR", os.path.join(BASE_DIR, "logs", "test"))


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def get_config(config_name):
    return config_map.get(config_name, DevelopmentConfig)
