"""
API v1 Router

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    admin,
    auth,
    bookmarks,
    catalogue,
    commands,
    comments,
    notifications,
    templates,
    users,
)

router = APIRouter()

# Accounts
router.include_router(auth.router)
router.include_router(users.router)

# Catalogue and command generation
router.include_router(catalogue.router)
router.include_router(admin.router)
router.include_router(commands.router)

# Community
router.include_router(templates.router)
router.include_router(comments.router)
router.include_router(bookmarks.router)
router.include_router(notifications.router)
