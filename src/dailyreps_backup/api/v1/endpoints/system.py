# src/dailyreps_backup/api/v1/endpoints/system.py
"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from dailyreps_backup.api.v1.dependencies import BackupServiceDep, SettingsDep
from dailyreps_backup.schemas.system import HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", summary="Health check", response_model=HealthResponse)
async def health_check(service: BackupServiceDep, settings: SettingsDep) -> JSONResponse:
    """Report whether the service and its database are reachable.

    Returns 503 with the same body shape when the database does not answer.
    """
    connected = await service.healthy()
    body = HealthResponse(
        status="healthy" if connected else "unhealthy",
        database="connected" if connected else "disconnected",
        version=settings.app_version,
    )
    code = status.HTTP_200_OK if connected else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body.model_dump())
