# src/dailyreps_backup/api/v1/endpoints/admin.py
"""Administrative statistics endpoint."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Query

from dailyreps_backup.api.v1.dependencies import BackupServiceDep, SettingsDep
from dailyreps_backup.core.errors import UnauthorizedError
from dailyreps_backup.schemas.system import AdminStatsResponse

logger = logging.getLogger(__name__)

KB = 1024
MB = KB * 1024
GB = MB * 1024

router = APIRouter(prefix="/admin", tags=["admin"])


def format_bytes(size: int) -> str:
    """Render a byte count with a binary unit and two decimals."""
    if size >= GB:
        return f"{size / GB:.2f} GB"
    if size >= MB:
        return f"{size / MB:.2f} MB"
    if size >= KB:
        return f"{size / KB:.2f} KB"
    return f"{size} bytes"


@router.get("/stats", summary="Database statistics", response_model=AdminStatsResponse)
async def get_stats(
    service: BackupServiceDep,
    settings: SettingsDep,
    key: str = Query(default=""),
) -> AdminStatsResponse:
    """Return user and backup counts; requires the admin secret as `?key=`."""
    expected = settings.admin_secret_key
    if not expected or not hmac.compare_digest(key.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Unauthorized admin stats request")
        raise UnauthorizedError("admin key mismatch")

    stats = await service.stats()
    size = await service.database_size()
    return AdminStatsResponse(
        user_count=stats.identity_count,
        backup_count=stats.blob_count,
        database_size_bytes=size,
        database_size_human=format_bytes(size),
    )
