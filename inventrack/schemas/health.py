from datetime import datetime

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "ok",
                "version": "1.0.0",
                "environment": "development",
                "uptime_seconds": 3600,
                "timestamp": "2026-01-15T10:30:00Z",
            }
        }
    )

    status: str
    version: str
    environment: str
    uptime_seconds: int
    timestamp: datetime


class ReadinessResponse(BaseModel):
    status: str  # "ok" | "degraded"
    database: str  # "connected" | "disconnected"
