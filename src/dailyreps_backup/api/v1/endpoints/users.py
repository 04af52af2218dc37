# src/dailyreps_backup/api/v1/endpoints/users.py
"""Account deletion endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from dailyreps_backup.api.v1.dependencies import BackupServiceDep
from dailyreps_backup.schemas.backup import DeleteUserRequest, DeleteUserResponse

router = APIRouter(prefix="/user", tags=["accounts"])


@router.delete("", summary="Delete a user and all associated data", response_model=DeleteUserResponse)
async def delete_user(payload: DeleteUserRequest, service: BackupServiceDep) -> DeleteUserResponse:
    """Permanently remove the identity, its backups, its rate counter and its index.

    Requires a valid signature, a recent timestamp and a storage key that
    belongs to the user.
    """
    await service.delete_user(
        payload.user_id,
        payload.storage_key,
        payload.signature,
        payload.timestamp,
    )
    return DeleteUserResponse()
