"""Timezone normalisation for reminder date-times.

A reminder stores its date-time as wall-clock text in the reminder's own
IANA timezone. To decide whether it is due, the wall time is first resolved
to an absolute instant, then expressed in the server's timezone so it can be
compared directly with the server's current time.

DST handling follows the zoneinfo ``fold=0`` rule:

- An ambiguous wall time (repeated hour when clocks go back) resolves to its
  first occurrence, i.e. the pre-transition offset.
- A non-existent wall time (skipped hour when clocks go forward) is read with
  the pre-transition offset, which places it just after the gap. The reminder
  still fires once rather than being skipped.
"""

import logging
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


class ReminderTimeError(ValueError):
    """Raised when a reminder's date-time or timezone cannot be interpreted."""


def resolve_timezone(name: str) -> ZoneInfo:
    """Look up an IANA timezone by name.

    :param name: IANA timezone name, e.g. "Asia/Kolkata".
    :returns: The timezone.
    :raises ReminderTimeError: If the name is empty or unknown.
    """
    if not name or not name.strip():
        raise ReminderTimeError("Timezone is empty")

    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ReminderTimeError(f"Unknown timezone: {name!r}") from e


def parse_wall_time(value: str) -> datetime:
    """Parse an ISO 8601 date-time string.

    Accepts minute or second precision ("2024-06-01T09:00") and an optional
    UTC offset or "Z" suffix.

    :param value: The stored date-time text.
    :returns: The parsed datetime, naive unless the text carried an offset.
    :raises ReminderTimeError: If the value does not parse.
    """
    if not value or not value.strip():
        raise ReminderTimeError("Date-time is empty")

    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise ReminderTimeError(f"Invalid date-time: {value!r}") from e


def to_instant(date_time: str, timezone_name: str) -> datetime:
    """Resolve a reminder's wall-clock date-time to an absolute UTC instant.

    A value that already carries an offset is an absolute instant and is only
    converted; the timezone is still validated.

    :param date_time: Wall-clock date-time text.
    :param timezone_name: IANA timezone the wall time belongs to.
    :returns: Timezone-aware datetime in UTC.
    :raises ReminderTimeError: If either input is invalid.
    """
    zone = resolve_timezone(timezone_name)
    parsed = parse_wall_time(date_time)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone, fold=0)

    return parsed.astimezone(UTC)


def to_server_time(date_time: str, timezone_name: str, server_timezone: tzinfo) -> datetime:
    """Express a reminder's date-time in the server's timezone.

    :param date_time: Wall-clock date-time text.
    :param timezone_name: IANA timezone the wall time belongs to.
    :param server_timezone: The server's timezone.
    :returns: Timezone-aware datetime in the server's timezone.
    :raises ReminderTimeError: If either input is invalid.
    """
    return to_instant(date_time, timezone_name).astimezone(server_timezone)


def is_due(
    date_time: str,
    timezone_name: str,
    now: datetime,
    server_timezone: tzinfo,
) -> bool:
    """Check whether a reminder's time has been reached.

    The comparison is inclusive: a reminder whose instant equals ``now`` is
    due on this tick.

    :param date_time: Wall-clock date-time text.
    :param timezone_name: IANA timezone the wall time belongs to.
    :param now: Current time; naive values are read as server time.
    :param server_timezone: The server's timezone.
    :returns: True if the reminder is due.
    :raises ReminderTimeError: If either input is invalid.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=server_timezone)

    return to_server_time(date_time, timezone_name, server_timezone) <= now


def get_server_timezone(name: str | None = None) -> tzinfo:
    """Get the timezone the server renders instants in.

    :param name: Optional IANA name overriding the host timezone.
    :returns: The configured zone, or the host's local timezone.
    :raises ReminderTimeError: If ``name`` is given but unknown.
    """
    if name:
        return resolve_timezone(name)

    local = datetime.now().astimezone().tzinfo
    if local is None:
        logger.warning("Could not determine host timezone, using UTC")
        return UTC
    return local
