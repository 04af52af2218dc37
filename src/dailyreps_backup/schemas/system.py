"""Health and admin statistics schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(..., description="'healthy' or 'unhealthy'")
    database: str = Field(..., description="'connected' or 'disconnected'")
    version: str


class AdminStatsResponse(BaseModel):
    """Database statistics for monitoring."""

    user_count: int
    backup_count: int
    database_size_bytes: int
    database_size_human: str
