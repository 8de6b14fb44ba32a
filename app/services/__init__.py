"""
DevKit Backend - Services Module

Business logic layer.
"""

from app.services import email_service
from app.services import otp_service
from app.services import username_service
from app.services import command_generator
from app.services import command_service
from app.services import catalogue_service
from app.services import template_service
from app.services import comment_service
from app.services import bookmark_service
from app.services import notification_service

__all__ = [
    "email_service",
    "otp_service",
    "username_service",
    "command_generator",
    "command_service",
    "catalogue_service",
    "template_service",
    "comment_service",
    "bookmark_service",
    "notification_service",
]
