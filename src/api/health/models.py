"""Pydantic models for health check endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness report, including the clock reminders are compared against."""

    status: str = Field(..., description="Service health status")
    version: str = Field(..., description="Application version")
    server_timezone: str = Field(..., description="Timezone due reminders are evaluated in")
    server_time: datetime = Field(..., description="Current time in the server timezone")
