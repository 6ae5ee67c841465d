import time
import uuid

import pytest

from app import create_app
from extensions import redis_client
from extensions.database import db
from extensions.jwt import create_token
from models.user import User
from repositories.user_repository import UserRepository
from services.application_service import ApplicationService
from utils.password import hash_password

DEFAULT_PASSWORD = "secret123"


class FakeRedis:
    """进程内 Redis 替身，覆盖令牌注销与限频用到的命令"""

    def __init__(self):
        self.store = {}
        self.expires = {}

    def _alive(self, key):
        exp = self.expires.get(key)
        if exp is not None and exp <= time.time():
            self.store.pop(key, None)
            self.expires.pop(key, None)
        return key in self.store

    def get(self, key):
        return self.store.get(key) if self._alive(key) else None

    def setex(self, key, ttl, value):
        self.store[key] = str(value)
        self.expires[key] = time.time() + int(ttl)
        return True

    def incr(self, key):
        value = int(self.get(key) or 0) + 1
        self.store[key] = str(value)
        return value

    def expire(self, key, seconds):
        if not self._alive(key):
            return False
        self.expires[key] = time.time() + int(seconds)
        return True

    def ttl(self, key):
        if not self._alive(key):
            return -2
        exp = self.expires.get(key)
        return -1 if exp is None else int(exp - time.time())

    def delete(self, *keys):
        removed = 0
        for key in keys:
            removed += 1 if self.store.pop(key, None) is not None else 0
            self.expires.pop(key, None)
        return removed


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_client, "_redis_client", fake)
    return fake


@pytest.fixture
def app(fake_redis):
    application = create_app("testing", seed=False)
    with application.app_context():
        db.create_all()
        ApplicationService.ensure_default_applications(application)
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """
    直接落库创建用户，返回 {"id", "email", "role", "token", "headers"}
    """
    def _create(role="basic", applications=None, email=None, name="Test User",
                password=DEFAULT_PASSWORD, is_active=True):
        email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
        with app.app_context():
            user = User(
                email=email,
                name=name,
                password_hash=hash_password(password),
                role=role,
                is_active=is_active,
                applications=list(applications or []),
            )
            UserRepository.add(user)
            UserRepository.commit()
            token = create_token(user)
            return {
                "id": user.id,
                "email": email,
                "role": role,
                "token": token,
                "headers": {"Authorization": f"Bearer {token}"},
            }
    return _create


@pytest.fixture
def super_admin(make_user):
    return make_user(role="super_admin", name="Root")


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", applications=["NRE", "FMS"], name="Ada Admin")


@pytest.fixture
def basic_user(make_user):
    return make_user(role="basic", applications=["NRE"], name="Basil Basic")


@pytest.fixture
def make_release(client, super_admin):
    def _create(**overrides):
        payload = {
            "title": "Spring drop",
            "applicationName": "NRE",
            "description": "Quarterly release",
            "type": "minor",
        }
        payload.update(overrides)
        resp = client.post("/api/releases", json=payload, headers=super_admin["headers"])
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]["release"]
    return _create
