# src/dailyreps_backup/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

Field names are snake_case in Python and camelCase on the wire.
"""

from .backup import (
    DeleteUserRequest,
    DeleteUserResponse,
    RegisterRequest,
    RegisterResponse,
    RetrieveBackupResponse,
    StoreBackupRequest,
    StoreBackupResponse,
)
from .system import AdminStatsResponse, HealthResponse

__all__ = [
    "AdminStatsResponse",
    "DeleteUserRequest", "DeleteUserResponse",
    "HealthResponse",
    "RegisterRequest", "RegisterResponse",
    "RetrieveBackupResponse",
    "StoreBackupRequest", "StoreBackupResponse",
]
