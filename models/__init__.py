# -*- coding: utf-8 -*-
"""
__init__.py
--------------------------------------------------------------------
汇总导入所有模型，使得：
- Flask-Migrate/Alembic 自动检测模型。
- 外部模块可简化引用：from models import Release, Prompt
注意：
- 避免循环导入：各模型仅在这里集中 import。
"""

from .mixins import TimestampMixin, SoftDeleteMixin
from .user import User
from .application import Application
from .release import Release
from .project import Project
from .release_plan import ReleasePlan
from .prompt import Prompt
from .prompt_category import PromptCategory
from .activity import Activity

__all__ = [
    "TimestampMixin", "SoftDeleteMixin",
    "User", "Application", "Release", "Project", "ReleasePlan",
    "Prompt", "PromptCategory", "Activity",
]
