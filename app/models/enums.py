"""
Database Enums

Python Enums that map to database ENUM types and request selectors.
"""

import enum


class OTPFlow(str, enum.Enum):
    """Which email a one-time code is issued for."""
    VERIFY_EMAIL = "verify-email"
    RESET_PASSWORD = "reset-password"


class TemplateStatus(str, enum.Enum):
    """Template publication status."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class OptionType(str, enum.Enum):
    """Project option kind; controls the section it lands in."""
    FOLDER = "folder"
    PACKAGE = "package"
    CONFIG = "config"
    FILE = "file"
    SETUP = "setup"


class Platform(str, enum.Enum):
    """Operating systems a package manager supports."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    ALL = "all"


class BookmarkPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BookmarkStatus(str, enum.Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class TemplateActivity(str, enum.Enum):
    """Interactions counted on a template."""
    LIKE = "like"
    COPY = "copy"
    VIEW = "view"


class NotificationType(str, enum.Enum):
    """Notification kinds."""
    COMMENT = "comment"
    TEMPLATE_LIKED = "template_liked"
    TEMPLATE_COPIED = "template_copied"
    SYSTEM = "system"
