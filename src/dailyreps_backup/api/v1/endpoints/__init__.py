# src/dailyreps_backup/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .backup import router as backup_router
from .register import router as register_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "backup_router",
    "register_router",
    "system_router",
    "users_router",
]
