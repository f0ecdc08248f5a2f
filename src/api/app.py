"""FastAPI application configuration."""

import logging

from fastapi import Depends, FastAPI

from src.api.health import router as health_router
from src.api.models import API_VERSION, ErrorResponse
from src.api.reminders import router as reminders_router
from src.api.security import verify_token
from src.api.users import router as users_router
from src.api.webhooks import router as webhooks_router
from src.observability.sentry import init_sentry
from src.utils.logging import configure_logging

configure_logging()
init_sentry()

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Webhooks authenticate with their own shared secret, so they are mounted
    without the bearer token dependency.

    :returns: Configured FastAPI application instance.
    """
    application = FastAPI(
        title="WhatsApp Reminders API",
        version=API_VERSION,
        responses={
            401: {"model": ErrorResponse, "description": "Unauthorised"},
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )

    # Register routers
    application.include_router(health_router)
    application.include_router(users_router, dependencies=[Depends(verify_token)])
    application.include_router(reminders_router, dependencies=[Depends(verify_token)])
    application.include_router(webhooks_router)

    logger.info("FastAPI application created")

    return application


# Application instance for uvicorn
app = create_app()
