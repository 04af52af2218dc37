# src/dailyreps_backup/api/v1/endpoints/register.py
"""Account registration endpoint."""

from __future__ import annotations

from fastapi import APIRouter, status

from dailyreps_backup.api.v1.dependencies import BackupServiceDep
from dailyreps_backup.schemas.backup import RegisterRequest, RegisterResponse

router = APIRouter(tags=["accounts"])


@router.post(
    "/register",
    summary="Register a hashed username",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
)
async def register_user(payload: RegisterRequest, service: BackupServiceDep) -> RegisterResponse:
    """Create an identity record; 409 if the user ID is already registered."""
    await service.register(payload.user_id)
    return RegisterResponse(success=True)
