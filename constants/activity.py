# -*- coding: utf-8 -*-
"""constants/activity.py
--------------------------------------------------------------------
审计日志的动作与资源枚举。未指定应用的记录在统计中归入 System。
"""

from enum import Enum


class ActivityAction(Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    REGISTER = "register"
    PASSWORD_RESET = "password_reset"
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    RELEASE_CREATED = "release_created"
    RELEASE_UPDATED = "release_updated"
    RELEASE_DELETED = "release_deleted"
    RELEASE_PUBLISHED = "release_published"
    RELEASE_EXPORTED = "release_exported"
    REPORT_GENERATED = "report_generated"
    SETTINGS_UPDATED = "settings_updated"
    APPLICATION_CREATED = "application_created"
    APPLICATION_UPDATED = "application_updated"
    APPLICATION_DELETED = "application_deleted"
    PROJECT_CREATED = "project_created"
    RELEASE_PLAN_CREATED = "release_plan_created"
    PROMPT_CREATED = "prompt_created"
    PROMPT_UPDATED = "prompt_updated"
    PROMPT_DELETED = "prompt_deleted"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


class ActivityResource(Enum):
    USER = "user"
    RELEASE = "release"
    REPORT = "report"
    SYSTEM = "system"
    APPLICATION = "application"
    PROJECT = "project"
    RELEASE_PLAN = "release_plan"
    PROMPT = "prompt"
    PROMPT_CATEGORY = "prompt_category"

    @classmethod
    def values(cls) -> list[str]:
        return [m.value for m in cls]


DEFAULT_APPLICATION_LABEL = "System"
DEFAULT_LIST_LIMIT = 50
TOP_USERS_LIMIT = 10
RECENT_ACTIVITIES_LIMIT = 20
TIMELINE_DAYS = 7
