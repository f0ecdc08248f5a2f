"""Tests for reminder timezone normalisation."""

import unittest
from datetime import UTC, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from src.reminders.timezones import (
    ReminderTimeError,
    get_server_timezone,
    is_due,
    parse_wall_time,
    resolve_timezone,
    to_instant,
    to_server_time,
)


class TestResolveTimezone(unittest.TestCase):
    """Tests for resolve_timezone function."""

    def test_known_zone(self) -> None:
        """Test that a valid IANA name resolves."""
        self.assertEqual(resolve_timezone("Asia/Kolkata"), ZoneInfo("Asia/Kolkata"))

    def test_unknown_zone_raises(self) -> None:
        """Test that an unknown name raises ReminderTimeError."""
        with self.assertRaises(ReminderTimeError):
            resolve_timezone("Mars/Olympus_Mons")

    def test_empty_zone_raises(self) -> None:
        """Test that an empty name raises ReminderTimeError."""
        with self.assertRaises(ReminderTimeError):
            resolve_timezone("")

    def test_error_is_value_error(self) -> None:
        """Test that ReminderTimeError can be caught as ValueError."""
        with self.assertRaises(ValueError):
            resolve_timezone("   ")


class TestParseWallTime(unittest.TestCase):
    """Tests for parse_wall_time function."""

    def test_minute_precision(self) -> None:
        """Test parsing a value without seconds."""
        self.assertEqual(parse_wall_time("2024-06-01T09:30"), datetime(2024, 6, 1, 9, 30))

    def test_second_precision(self) -> None:
        """Test parsing a value with seconds."""
        self.assertEqual(
            parse_wall_time("2024-06-01T09:30:15"),
            datetime(2024, 6, 1, 9, 30, 15),
        )

    def test_offset_is_kept(self) -> None:
        """Test that a trailing Z yields an aware UTC datetime."""
        parsed = parse_wall_time("2024-06-01T09:30:00Z")
        self.assertEqual(parsed.utcoffset(), timedelta(0))

    def test_garbage_raises(self) -> None:
        """Test that an unparseable value raises ReminderTimeError."""
        with self.assertRaises(ReminderTimeError):
            parse_wall_time("next tuesday")

    def test_empty_raises(self) -> None:
        """Test that an empty value raises ReminderTimeError."""
        with self.assertRaises(ReminderTimeError):
            parse_wall_time("")


class TestToInstant(unittest.TestCase):
    """Tests for to_instant function."""

    def test_kolkata_wall_time(self) -> None:
        """Test that 09:30 in Kolkata is 04:00 UTC."""
        result = to_instant("2024-06-01T09:30:00", "Asia/Kolkata")
        self.assertEqual(result, datetime(2024, 6, 1, 4, 0, tzinfo=UTC))

    def test_result_is_utc(self) -> None:
        """Test that the instant is expressed in UTC."""
        result = to_instant("2024-06-01T09:30:00", "America/New_York")
        self.assertEqual(result.tzinfo, UTC)

    def test_ambiguous_time_uses_first_occurrence(self) -> None:
        """Test that a repeated wall time resolves to the pre-transition offset."""
        result = to_instant("2024-11-03T01:30:00", "America/New_York")
        self.assertEqual(result, datetime(2024, 11, 3, 5, 30, tzinfo=UTC))

    def test_skipped_time_lands_after_gap(self) -> None:
        """Test that a non-existent wall time is read with the pre-transition offset."""
        result = to_instant("2024-03-10T02:30:00", "America/New_York")
        self.assertEqual(result, datetime(2024, 3, 10, 7, 30, tzinfo=UTC))

    def test_aware_input_is_only_converted(self) -> None:
        """Test that a value carrying an offset keeps its instant."""
        result = to_instant("2024-06-01T09:30:00+02:00", "Asia/Kolkata")
        self.assertEqual(result, datetime(2024, 6, 1, 7, 30, tzinfo=UTC))

    def test_aware_input_still_validates_timezone(self) -> None:
        """Test that an unknown timezone is rejected even for aware values."""
        with self.assertRaises(ReminderTimeError):
            to_instant("2024-06-01T09:30:00Z", "Nowhere/Special")


class TestToServerTime(unittest.TestCase):
    """Tests for to_server_time function."""

    def test_renders_in_server_zone(self) -> None:
        """Test that the instant is expressed in the server's timezone."""
        result = to_server_time("2024-06-01T09:30:00", "Asia/Kolkata", ZoneInfo("Europe/London"))

        self.assertEqual(result.tzinfo, ZoneInfo("Europe/London"))
        self.assertEqual((result.hour, result.minute), (5, 0))

    def test_same_instant_whatever_server_zone(self) -> None:
        """Test that the server timezone changes rendering, not the instant."""
        london = to_server_time("2024-06-01T09:30:00", "Asia/Kolkata", ZoneInfo("Europe/London"))
        tokyo = to_server_time("2024-06-01T09:30:00", "Asia/Kolkata", ZoneInfo("Asia/Tokyo"))
        self.assertEqual(london, tokyo)


class TestIsDue(unittest.TestCase):
    """Tests for is_due function."""

    def test_due_one_second_after(self) -> None:
        """Test a Kolkata reminder is due just after its instant."""
        now = datetime(2024, 6, 1, 4, 0, 1, tzinfo=UTC)
        self.assertTrue(is_due("2024-06-01T09:30:00", "Asia/Kolkata", now, UTC))

    def test_not_due_one_second_before(self) -> None:
        """Test a Kolkata reminder is not due just before its instant."""
        now = datetime(2024, 6, 1, 3, 59, 59, tzinfo=UTC)
        self.assertFalse(is_due("2024-06-01T09:30:00", "Asia/Kolkata", now, UTC))

    def test_due_at_exact_instant(self) -> None:
        """Test the comparison is inclusive."""
        now = datetime(2024, 6, 1, 4, 0, 0, tzinfo=UTC)
        self.assertTrue(is_due("2024-06-01T09:30:00", "Asia/Kolkata", now, UTC))

    def test_naive_now_is_server_time(self) -> None:
        """Test that a naive now is read in the server timezone."""
        server = ZoneInfo("Asia/Kolkata")
        self.assertTrue(
            is_due("2024-06-01T09:30:00", "Asia/Kolkata", datetime(2024, 6, 1, 9, 30), server)
        )
        self.assertFalse(
            is_due("2024-06-01T09:30:00", "Asia/Kolkata", datetime(2024, 6, 1, 9, 29), server)
        )

    def test_now_in_other_zone(self) -> None:
        """Test that now may carry any offset."""
        now = datetime(2024, 6, 1, 0, 0, 1, tzinfo=timezone(timedelta(hours=-4)))
        self.assertTrue(is_due("2024-06-01T09:30:00", "Asia/Kolkata", now, UTC))

    def test_invalid_timezone_raises(self) -> None:
        """Test that an unknown timezone raises instead of guessing."""
        with self.assertRaises(ReminderTimeError):
            is_due("2024-06-01T09:30:00", "Not/AZone", datetime.now(UTC), UTC)


class TestGetServerTimezone(unittest.TestCase):
    """Tests for get_server_timezone function."""

    def test_named_zone(self) -> None:
        """Test that an explicit name wins over the host zone."""
        self.assertEqual(get_server_timezone("Asia/Tokyo"), ZoneInfo("Asia/Tokyo"))

    def test_host_zone_when_unset(self) -> None:
        """Test that the host's zone is returned when no name is given."""
        self.assertIsNotNone(get_server_timezone(None))

    def test_unknown_name_raises(self) -> None:
        """Test that an unknown name raises ReminderTimeError."""
        with self.assertRaises(ReminderTimeError):
            get_server_timezone("Bogus/Zone")


if __name__ == "__main__":
    unittest.main()
