"""
DevKit Backend - Models Module

This module exports all SQLAlchemy models for the application.
Import Base for Alembic migrations.
"""

from app.core.database import Base

# Enums
from app.models.enums import (
    BookmarkPriority,
    BookmarkStatus,
    NotificationType,
    OptionType,
    OTPFlow,
    Platform,
    TemplateActivity,
    TemplateStatus,
)

# Models
from app.models.user import User
from app.models.category import Category
from app.models.package_manager import PackageManager
from app.models.project_option import ProjectOption
from app.models.generated_command import GeneratedCommand
from app.models.template import Template
from app.models.template_like import TemplateLike
from app.models.comment import Comment
from app.models.bookmark import Bookmark
from app.models.notification import Notification

__all__ = [
    # Base
    "Base",
    # Enums
    "BookmarkPriority",
    "BookmarkStatus",
    "NotificationType",
    "OptionType",
    "OTPFlow",
    "Platform",
    "TemplateActivity",
    "TemplateStatus",
    # Models
    "User",
    "Category",
    "PackageManager",
    "ProjectOption",
    "GeneratedCommand",
    "Template",
    "TemplateLike",
    "Comment",
    "Bookmark",
    "Notification",
]
