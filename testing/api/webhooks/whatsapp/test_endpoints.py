"""Tests for WhatsApp gateway webhook endpoints."""

import os

# Set required environment variables before importing API modules
os.environ.setdefault("API_AUTH_TOKEN", "test-auth-token")

import unittest
from unittest.mock import MagicMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient

from src.api.app import app
from src.api.webhooks.whatsapp.models import (
    DEFAULT_BOT_REMINDER_TIMEZONE,
    DEFAULT_BOT_REMINDER_TITLE,
)

WEBHOOK_ENV = {"WHATSAPP_WEBHOOK_SECRET": "hook-secret"}


def _mock_session(mock_get_session: MagicMock) -> MagicMock:
    mock_session = MagicMock()
    mock_get_session.return_value.__enter__ = MagicMock(return_value=mock_session)
    mock_get_session.return_value.__exit__ = MagicMock(return_value=False)
    return mock_session


@patch.dict(os.environ, WEBHOOK_ENV)
class TestVerificationWebhook(unittest.TestCase):
    """Tests for POST /webhooks/whatsapp/verification endpoint."""

    def setUp(self) -> None:
        """Set up test client."""
        self.client = TestClient(app)
        self.body = {"userPhoneNumber": "+919876543210", "messageBody": "Yes, it's me"}

    @patch("src.api.webhooks.whatsapp.endpoints.mark_whatsapp_verified")
    @patch("src.api.webhooks.whatsapp.endpoints.get_session")
    def test_verifies_number(self, mock_get_session: MagicMock, mock_mark: MagicMock) -> None:
        """Test that a valid callback verifies the number."""
        _mock_session(mock_get_session)
        mock_mark.return_value = MagicMock(id=uuid4())

        response = self.client.post(
            "/webhooks/whatsapp/verification?token=hook-secret", json=self.body
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.assertEqual(mock_mark.call_args.args[1], "+919876543210")

    @patch("src.api.webhooks.whatsapp.endpoints.mark_whatsapp_verified")
    @patch("src.api.webhooks.whatsapp.endpoints.get_session")
    def test_unknown_number(self, mock_get_session: MagicMock, mock_mark: MagicMock) -> None:
        """Test that an unknown number returns 404."""
        _mock_session(mock_get_session)
        mock_mark.return_value = None

        response = self.client.post(
            "/webhooks/whatsapp/verification?token=hook-secret", json=self.body
        )

        self.assertEqual(response.status_code, 404)

    def test_missing_token(self) -> None:
        """Test that a call without token returns 401."""
        response = self.client.post("/webhooks/whatsapp/verification", json=self.body)

        self.assertEqual(response.status_code, 401)

    def test_wrong_token(self) -> None:
        """Test that a call with the wrong token returns 401."""
        response = self.client.post(
            "/webhooks/whatsapp/verification?token=nope", json=self.body
        )

        self.assertEqual(response.status_code, 401)

    def test_does_not_need_bearer_token(self) -> None:
        """Test that the webhook is reachable without the API bearer token."""
        with patch("src.api.webhooks.whatsapp.endpoints.get_session") as mock_get_session:
            _mock_session(mock_get_session)
            with patch(
                "src.api.webhooks.whatsapp.endpoints.mark_whatsapp_verified"
            ) as mock_mark:
                mock_mark.return_value = MagicMock(id=uuid4())
                response = self.client.post(
                    "/webhooks/whatsapp/verification?token=hook-secret", json=self.body
                )

        self.assertEqual(response.status_code, 200)


class TestWebhookSecretNotConfigured(unittest.TestCase):
    """Tests for webhook behaviour without a configured secret."""

    @patch.dict(os.environ, {}, clear=True)
    def test_returns_500(self) -> None:
        """Test that a missing secret is a server error, not an open door."""
        client = TestClient(app)

        response = client.post(
            "/webhooks/whatsapp/verification?token=anything",
            json={"userPhoneNumber": "+919876543210"},
        )

        self.assertEqual(response.status_code, 500)


@patch.dict(os.environ, WEBHOOK_ENV)
class TestBotReminderWebhook(unittest.TestCase):
    """Tests for POST /webhooks/whatsapp/reminders endpoint."""

    def setUp(self) -> None:
        """Set up test client."""
        self.client = TestClient(app)
        self.url = "/webhooks/whatsapp/reminders?token=hook-secret"

    @patch("src.api.webhooks.whatsapp.endpoints.create_reminder")
    @patch("src.api.webhooks.whatsapp.endpoints.get_user_by_whatsapp_number")
    @patch("src.api.webhooks.whatsapp.endpoints.get_session")
    def test_defaults_applied(
        self,
        mock_get_session: MagicMock,
        mock_get_user: MagicMock,
        mock_create: MagicMock,
    ) -> None:
        """Test that title and timezone fall back to the defaults."""
        _mock_session(mock_get_session)
        mock_get_user.return_value = MagicMock(id=uuid4(), preferred_timezone=None)
        reminder_id = uuid4()
        mock_create.return_value = MagicMock(id=reminder_id)

        response = self.client.post(
            self.url,
            json={
                "isReminder": True,
                "whatsappNumber": "+919876543210",
                "reminderDateTime": "2024-06-01T09:30:00",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["reminder_id"], str(reminder_id))
        kwargs = mock_create.call_args.kwargs
        self.assertEqual(kwargs["title"], DEFAULT_BOT_REMINDER_TITLE)
        self.assertEqual(kwargs["timezone"], DEFAULT_BOT_REMINDER_TIMEZONE)

    @patch("src.api.webhooks.whatsapp.endpoints.create_reminder")
    @patch("src.api.webhooks.whatsapp.endpoints.get_user_by_whatsapp_number")
    @patch("src.api.webhooks.whatsapp.endpoints.get_session")
    def test_user_timezone_preferred(
        self,
        mock_get_session: MagicMock,
        mock_get_user: MagicMock,
        mock_create: MagicMock,
    ) -> None:
        """Test that the user's preferred timezone beats the default."""
        _mock_session(mock_get_session)
        mock_get_user.return_value = MagicMock(id=uuid4(), preferred_timezone="Europe/London")
        mock_create.return_value = MagicMock(id=uuid4())

        self.client.post(
            self.url,
            json={
                "isReminder": True,
                "whatsappNumber": "+447700900000",
                "reminderTitle": "Bins",
                "reminderDateTime": "2024-06-01T19:00:00",
            },
        )

        kwargs = mock_create.call_args.kwargs
        self.assertEqual(kwargs["timezone"], "Europe/London")
        self.assertEqual(kwargs["title"], "Bins")

    @patch("src.api.webhooks.whatsapp.endpoints.create_reminder")
    def test_not_a_reminder(self, mock_create: MagicMock) -> None:
        """Test that non-reminder messages create nothing."""
        response = self.client.post(
            self.url,
            json={"isReminder": False, "whatsappNumber": "+919876543210"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["success"])
        mock_create.assert_not_called()

    def test_missing_date_time(self) -> None:
        """Test that a reminder without a date-time is rejected."""
        response = self.client.post(
            self.url,
            json={"isReminder": True, "whatsappNumber": "+919876543210"},
        )

        self.assertEqual(response.status_code, 422)

    @patch("src.api.webhooks.whatsapp.endpoints.get_user_by_whatsapp_number")
    @patch("src.api.webhooks.whatsapp.endpoints.get_session")
    def test_unknown_user(self, mock_get_session: MagicMock, mock_get_user: MagicMock) -> None:
        """Test that a reminder from an unknown number returns 404."""
        _mock_session(mock_get_session)
        mock_get_user.return_value = None

        response = self.client.post(
            self.url,
            json={
                "isReminder": True,
                "whatsappNumber": "+10000000000",
                "reminderDateTime": "2024-06-01T09:30:00",
            },
        )

        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
