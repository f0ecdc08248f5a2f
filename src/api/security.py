"""Shared-secret authentication for API clients and gateway webhooks.

Service endpoints take a Bearer token (API_AUTH_TOKEN). The WhatsApp gateway
cannot send headers, so its webhooks pass a ``token`` query parameter that is
checked against WHATSAPP_WEBHOOK_SECRET.
"""

import logging
import os
import secrets

from fastapi import HTTPException, Query, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

API_TOKEN_ENV_VAR = "API_AUTH_TOKEN"
WEBHOOK_SECRET_ENV_VAR = "WHATSAPP_WEBHOOK_SECRET"

security = HTTPBearer()


def get_secret(env_var: str) -> str:
    """Read a required secret from the environment.

    :param env_var: Name of the environment variable.
    :returns: The secret value.
    :raises ValueError: If the variable is unset or empty.
    """
    value = os.environ.get(env_var)
    if not value:
        raise ValueError(f"Secret not configured. Set {env_var} environment variable.")
    return value


def get_api_token() -> str:
    """Retrieve the API authentication token from environment.

    :returns: The configured API token.
    :raises ValueError: If API_AUTH_TOKEN is not set.
    """
    return get_secret(API_TOKEN_ENV_VAR)


def check_secret(
    provided: str | None,
    env_var: str,
    *,
    challenge: dict[str, str] | None = None,
) -> None:
    """Compare a caller-supplied secret with the configured one.

    :param provided: Secret sent by the caller, if any.
    :param env_var: Environment variable holding the expected secret.
    :param challenge: Headers to attach to 401 responses.
    :raises HTTPException: 401 if missing or wrong, 500 if not configured.
    """
    if not provided:
        logger.warning(f"Request without credentials for {env_var}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers=challenge,
        )

    try:
        expected = get_secret(env_var)
    except ValueError as e:
        logger.error(f"Authentication configuration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication not configured",
        ) from e

    if not secrets.compare_digest(provided, expected):
        logger.warning(f"Invalid credentials provided for {env_var}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers=challenge,
        )


def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> str:
    """Verify the Bearer token on user and reminder endpoints.

    :param credentials: The HTTP Authorisation credentials.
    :returns: The validated token.
    :raises HTTPException: If token is invalid or missing.
    """
    check_secret(
        credentials.credentials,
        API_TOKEN_ENV_VAR,
        challenge={"WWW-Authenticate": "Bearer"},
    )
    return credentials.credentials


def verify_webhook_token(
    token: str | None = Query(None, description="Webhook secret"),
) -> None:
    """Verify the ``token`` query parameter on gateway webhooks.

    :param token: Secret passed by the gateway.
    :raises HTTPException: If token is invalid or missing.
    """
    check_secret(token, WEBHOOK_SECRET_ENV_VAR)
