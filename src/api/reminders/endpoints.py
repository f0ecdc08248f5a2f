"""API endpoints for managing a user's reminders."""

import logging
import time
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.api.reminders.models import (
    CreateReminderRequest,
    ReminderListResponse,
    ReminderResponse,
    UpdateReminderRequest,
)
from src.database.connection import get_session
from src.database.reminders import (
    DEFAULT_LIST_LIMIT,
    Reminder,
    ReminderStatus,
    create_reminder,
    delete_reminder,
    get_reminder_by_id,
    list_reminders_for_user,
    update_reminder,
)
from src.database.users import get_user_by_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/reminders", tags=["Reminders"])


def _reminder_to_response(reminder: Reminder) -> ReminderResponse:
    """Convert a reminder model to response.

    :param reminder: The database model.
    :returns: API response model.
    """
    return ReminderResponse(
        id=reminder.id,
        user_id=reminder.user_id,
        title=reminder.title,
        description=reminder.description,
        date_time=reminder.date_time,
        timezone=reminder.timezone,
        status=ReminderStatus(reminder.status),
        status_message=reminder.status_message,
        created_at=reminder.created_at,
        updated_at=reminder.updated_at,
    )


def _require_user(session: Session, user_id: UUID) -> None:
    """Raise 404 if the user does not exist.

    :param session: Database session.
    :param user_id: User ID from the path.
    :raises HTTPException: If the user is not found.
    """
    if get_user_by_id(session, user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User not found: {user_id}",
        )


def _get_reminder_or_404(session: Session, user_id: UUID, reminder_id: UUID) -> Reminder:
    """Fetch a reminder owned by the user.

    :param session: Database session.
    :param user_id: Owner ID from the path.
    :param reminder_id: Reminder ID from the path.
    :returns: The reminder.
    :raises HTTPException: If the reminder is not found for this user.
    """
    reminder = get_reminder_by_id(session, reminder_id, user_id=user_id)
    if reminder is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Reminder not found: {reminder_id}",
        )
    return reminder


@router.get(
    "",
    response_model=ReminderListResponse,
    summary="List reminders",
)
def list_reminders(
    user_id: UUID,
    status_filter: ReminderStatus | None = Query(None, alias="status"),
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=500),
) -> ReminderListResponse:
    """List a user's reminders, newest first."""
    start = time.perf_counter()
    logger.info(f"List reminders: user_id={user_id}, status={status_filter}, limit={limit}")

    with get_session() as session:
        _require_user(session, user_id)
        reminders = list_reminders_for_user(session, user_id, status=status_filter, limit=limit)
        results = [_reminder_to_response(r) for r in reminders]

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"List reminders complete: found={len(results)}, elapsed={elapsed_ms:.0f}ms")

    return ReminderListResponse(results=results, total=len(results))


@router.post(
    "",
    response_model=ReminderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create reminder",
)
def create_user_reminder(user_id: UUID, request: CreateReminderRequest) -> ReminderResponse:
    """Create a pending reminder for a user."""
    start = time.perf_counter()
    logger.info(
        f"Create reminder: user_id={user_id}, title={request.title[:50]!r}, "
        f"at={request.date_time} {request.timezone}"
    )

    with get_session() as session:
        _require_user(session, user_id)
        reminder = create_reminder(
            session=session,
            user_id=user_id,
            title=request.title,
            date_time=request.date_time,
            timezone=request.timezone,
            description=request.description,
        )
        response = _reminder_to_response(reminder)

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Create reminder complete: id={response.id}, elapsed={elapsed_ms:.0f}ms")

    return response


@router.get(
    "/{reminder_id}",
    response_model=ReminderResponse,
    summary="Get reminder",
)
def get_user_reminder(user_id: UUID, reminder_id: UUID) -> ReminderResponse:
    """Get a single reminder."""
    logger.info(f"Get reminder: user_id={user_id}, id={reminder_id}")

    with get_session() as session:
        reminder = _get_reminder_or_404(session, user_id, reminder_id)
        return _reminder_to_response(reminder)


@router.put(
    "/{reminder_id}",
    response_model=ReminderResponse,
    summary="Update reminder",
)
def update_user_reminder(
    user_id: UUID,
    reminder_id: UUID,
    request: UpdateReminderRequest,
) -> ReminderResponse:
    """Replace the fields of a pending reminder.

    Reminders that are being sent or have already been resolved cannot be
    edited.
    """
    start = time.perf_counter()
    logger.info(f"Update reminder: user_id={user_id}, id={reminder_id}")

    with get_session() as session:
        reminder = _get_reminder_or_404(session, user_id, reminder_id)
        if reminder.status != ReminderStatus.PENDING:
            logger.warning(f"Rejected update of reminder {reminder_id}: status={reminder.status}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Reminder is {reminder.status} and can no longer be edited",
            )

        update_reminder(
            session,
            reminder,
            title=request.title,
            date_time=request.date_time,
            timezone=request.timezone,
            description=request.description,
        )
        response = _reminder_to_response(reminder)

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Update reminder complete: id={reminder_id}, elapsed={elapsed_ms:.0f}ms")

    return response


@router.delete(
    "/{reminder_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete reminder",
)
def delete_user_reminder(user_id: UUID, reminder_id: UUID) -> None:
    """Delete a reminder that is not currently being sent."""
    logger.info(f"Delete reminder: user_id={user_id}, id={reminder_id}")

    with get_session() as session:
        reminder = _get_reminder_or_404(session, user_id, reminder_id)
        if reminder.status == ReminderStatus.IN_FLIGHT:
            logger.warning(f"Rejected delete of in-flight reminder {reminder_id}")
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Reminder is being sent and cannot be deleted right now",
            )
        delete_reminder(session, reminder)
