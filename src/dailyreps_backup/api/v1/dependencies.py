"""Shared API dependencies resolving the per-application service objects."""

from typing import Annotated

from fastapi import Depends, Request

from dailyreps_backup.core.settings import Settings
from dailyreps_backup.services.backup_service import BackupService


def get_backup_service(request: Request) -> BackupService:
    """Return the pipeline service created during application startup."""
    service: BackupService = request.app.state.backup_service
    return service


def get_app_settings(request: Request) -> Settings:
    """Return the immutable settings the application was built with."""
    settings: Settings = request.app.state.settings
    return settings


BackupServiceDep = Annotated[BackupService, Depends(get_backup_service)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
