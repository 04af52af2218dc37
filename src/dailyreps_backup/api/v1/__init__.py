# src/dailyreps_backup/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import admin_router, backup_router, register_router, system_router, users_router

__all__ = [
    "admin_router",
    "backup_router",
    "register_router",
    "system_router",
    "users_router",
]
