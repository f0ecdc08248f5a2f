"""Health check endpoints."""

import logging
from datetime import datetime

from fastapi import APIRouter

from src.api.health.models import HealthResponse
from src.api.models import API_VERSION
from src.reminders.config import get_reminder_settings
from src.reminders.timezones import get_server_timezone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Check service health",
    description="Returns the service status and the server clock used for due checks.",
)
def health_check() -> HealthResponse:
    """Report liveness and the server's view of the current time.

    :returns: Health status response.
    """
    logger.debug("Health check requested")
    server_tz = get_server_timezone(get_reminder_settings().server_timezone)
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        server_timezone=str(server_tz),
        server_time=datetime.now(server_tz),
    )
