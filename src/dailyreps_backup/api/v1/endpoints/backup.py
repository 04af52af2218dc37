# src/dailyreps_backup/api/v1/endpoints/backup.py
"""Encrypted backup upload and retrieval endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from dailyreps_backup.api.v1.dependencies import BackupServiceDep
from dailyreps_backup.db.time import to_rfc3339
from dailyreps_backup.schemas.backup import (
    RetrieveBackupResponse,
    StoreBackupRequest,
    StoreBackupResponse,
)

router = APIRouter(prefix="/backup", tags=["backups"])


@router.post("", summary="Store or update an encrypted backup", response_model=StoreBackupResponse)
async def store_backup(payload: StoreBackupRequest, service: BackupServiceDep) -> StoreBackupResponse:
    """Accept a signed, recent, well-formed envelope within the user's quota."""
    updated_at = await service.store_backup(
        payload.user_id,
        payload.storage_key,
        payload.data,
        payload.signature,
        payload.timestamp,
    )
    return StoreBackupResponse(success=True, updated_at=to_rfc3339(updated_at))


@router.get("", summary="Retrieve an encrypted backup", response_model=RetrieveBackupResponse)
async def retrieve_backup(
    service: BackupServiceDep,
    user_id: str = Query(..., alias="userId"),
    storage_key: str = Query(..., alias="storageKey"),
) -> RetrieveBackupResponse:
    """Return the stored envelope for the caller's storage key."""
    blob = await service.retrieve_backup(user_id, storage_key)
    return RetrieveBackupResponse(data=blob.data, updated_at=to_rfc3339(blob.updated_at))
