"""API endpoints for user profiles and WhatsApp verification."""

import logging
import time
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.api.users.models import UpdateUserRequest, UserResponse, VerificationResponse
from src.database.connection import get_session
from src.database.users import User, get_user_by_id, update_user
from src.messaging.whatsapp import (
    WhatsAppGatewayClient,
    WhatsAppGatewayError,
    get_whatsapp_settings,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def _get_gateway_client() -> WhatsAppGatewayClient:
    """Build a gateway client from environment configuration.

    :returns: Configured WhatsAppGatewayClient.
    """
    return WhatsAppGatewayClient.from_settings(get_whatsapp_settings())


def _user_to_response(user: User) -> UserResponse:
    """Convert a user model to response.

    :param user: The database model.
    :returns: API response model.
    """
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        whatsapp_number=user.whatsapp_number,
        is_whatsapp_verified=user.is_whatsapp_verified,
        preferred_timezone=user.preferred_timezone,
        created_at=user.created_at,
    )


def _get_user_or_404(session: Session, user_id: UUID) -> User:
    """Fetch a user by ID.

    :param session: Database session.
    :param user_id: User ID from the path.
    :returns: The user.
    :raises HTTPException: If the user is not found.
    """
    user = get_user_by_id(session, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found: {user_id}",
        )
    return user


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
)
def get_user(user_id: UUID) -> UserResponse:
    """Get a user profile."""
    logger.info(f"Get user: id={user_id}")

    with get_session() as session:
        return _user_to_response(_get_user_or_404(session, user_id))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user",
)
def patch_user(user_id: UUID, request: UpdateUserRequest) -> UserResponse:
    """Update a user profile.

    Changing the WhatsApp number clears its verified flag.
    """
    start = time.perf_counter()
    logger.info(f"Update user: id={user_id}, fields={sorted(request.model_fields_set)}")

    try:
        with get_session() as session:
            user = _get_user_or_404(session, user_id)
            update_user(
                session,
                user,
                name=request.name,
                email=request.email,
                preferred_timezone=request.preferred_timezone,
                whatsapp_number=request.whatsapp_number,
            )
            response = _user_to_response(user)
    except IntegrityError as e:
        logger.warning(f"Update user conflict: id={user_id}: {e.orig}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email or WhatsApp number is already in use",
        ) from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Update user complete: id={user_id}, elapsed={elapsed_ms:.0f}ms")

    return response


@router.post(
    "/{user_id}/whatsapp/verification",
    response_model=VerificationResponse,
    summary="Request WhatsApp verification",
)
def request_whatsapp_verification(user_id: UUID) -> VerificationResponse:
    """Ask the gateway to send a verification poll to the user's number.

    The user answers the poll in WhatsApp and the gateway reports back through
    the verification webhook.
    """
    logger.info(f"WhatsApp verification requested: user_id={user_id}")

    with get_session() as session:
        user = _get_user_or_404(session, user_id)
        whatsapp_number = user.whatsapp_number
        already_verified = user.is_whatsapp_verified

    if not whatsapp_number:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User has no WhatsApp number",
        )

    if already_verified:
        return VerificationResponse(
            poll_sent=False,
            is_whatsapp_verified=True,
            message="WhatsApp number is already verified",
        )

    try:
        accepted = _get_gateway_client().send_login_poll(whatsapp_number)
    except WhatsAppGatewayError as e:
        logger.error(f"Failed to send verification poll: user_id={user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="WhatsApp gateway unavailable",
        ) from e

    if not accepted:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="WhatsApp gateway refused the verification poll",
        )

    return VerificationResponse(
        poll_sent=True,
        is_whatsapp_verified=False,
        message="Verification poll sent",
    )
