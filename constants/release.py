# constants/release.py
"""
发布相关的枚举与常量集合
统一管理：
  - 状态 Status: draft / beta / stable / deprecated
  - 类型 Type: major / minor / patch / hotfix
  - 特性分类 FeatureCategory: new / improved / security / performance
提供:
  - values() 方法：返回所有 value 列表
  - 校验辅助函数
"""

import re
from enum import Enum

from utils.exceptions import ValidationError

# 语义化版本：1.2.3 或 1.2.3-beta.1
VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.-]+)?$")
URL_RE = re.compile(r"^https?://.+", re.IGNORECASE)

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 2000


class ReleaseStatus(Enum):
    DRAFT = "draft"
    BETA = "beta"
    STABLE = "stable"
    DEPRECATED = "deprecated"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class ReleaseType(Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    HOTFIX = "hotfix"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


class FeatureCategory(Enum):
    NEW = "new"
    IMPROVED = "improved"
    SECURITY = "security"
    PERFORMANCE = "performance"

    @classmethod
    def values(cls):
        return [m.value for m in cls]


DEFAULT_RELEASE_STATUS = ReleaseStatus.DRAFT.value


# -------- 校验辅助函数 --------
def validate_status(status: str):
    if status not in ReleaseStatus.values():
        raise ValidationError(f"status must be one of {ReleaseStatus.values()}")


def validate_type(release_type: str):
    if release_type not in ReleaseType.values():
        raise ValidationError(f"type must be one of {ReleaseType.values()}")


def validate_version(version: str):
    if not VERSION_RE.match(version):
        raise ValidationError(
            "Validation error",
            details=["Version must follow semantic versioning (e.g., 1.0.0)"],
        )
