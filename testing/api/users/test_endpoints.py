"""Tests for user API endpoints."""

import os

# Set required environment variables before importing API modules
os.environ.setdefault("API_AUTH_TOKEN", "test-auth-token")

import unittest
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from src.api.app import app
from src.database.users.models import User
from src.messaging.whatsapp.client import WhatsAppGatewayError


def _mock_session(mock_get_session: MagicMock) -> MagicMock:
    mock_session = MagicMock()
    mock_get_session.return_value.__enter__ = MagicMock(return_value=mock_session)
    mock_get_session.return_value.__exit__ = MagicMock(return_value=False)
    return mock_session


def _user(*, number: str | None = "+919876543210", verified: bool = False) -> User:
    return User(
        id=uuid4(),
        name="Asha",
        email="asha@example.com",
        whatsapp_number=number,
        is_whatsapp_verified=verified,
        preferred_timezone="Asia/Kolkata",
        created_at=datetime.now(UTC),
    )


class UserEndpointTestCase(unittest.TestCase):
    """Shared setup for user endpoint tests."""

    def setUp(self) -> None:
        """Set up test client."""
        self.client = TestClient(app)
        self.auth_headers = {"Authorization": "Bearer test-auth-token"}


class TestGetUserEndpoint(UserEndpointTestCase):
    """Tests for GET /users/{user_id} endpoint."""

    @patch("src.api.users.endpoints.get_user_by_id")
    @patch("src.api.users.endpoints.get_session")
    def test_get_user(self, mock_get_session: MagicMock, mock_get_user: MagicMock) -> None:
        """Test fetching a profile."""
        _mock_session(mock_get_session)
        user = _user(verified=True)
        mock_get_user.return_value = user

        response = self.client.get(f"/users/{user.id}", headers=self.auth_headers)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["is_whatsapp_verified"])

    @patch("src.api.users.endpoints.get_user_by_id")
    @patch("src.api.users.endpoints.get_session")
    def test_get_unknown_user(self, mock_get_session: MagicMock, mock_get_user: MagicMock) -> None:
        """Test that an unknown user returns 404."""
        _mock_session(mock_get_session)
        mock_get_user.return_value = None

        response = self.client.get(f"/users/{uuid4()}", headers=self.auth_headers)

        self.assertEqual(response.status_code, 404)


class TestPatchUserEndpoint(UserEndpointTestCase):
    """Tests for PATCH /users/{user_id} endpoint."""

    @patch("src.api.users.endpoints.update_user")
    @patch("src.api.users.endpoints.get_user_by_id")
    @patch("src.api.users.endpoints.get_session")
    def test_patch_user(
        self,
        mock_get_session: MagicMock,
        mock_get_user: MagicMock,
        mock_update: MagicMock,
    ) -> None:
        """Test that only supplied fields are passed through."""
        _mock_session(mock_get_session)
        user = _user()
        mock_get_user.return_value = user

        response = self.client.patch(
            f"/users/{user.id}",
            headers=self.auth_headers,
            json={"preferred_timezone": "Europe/London"},
        )

        self.assertEqual(response.status_code, 200)
        kwargs = mock_update.call_args.kwargs
        self.assertEqual(kwargs["preferred_timezone"], "Europe/London")
        self.assertIsNone(kwargs["whatsapp_number"])

    def test_patch_rejects_unknown_timezone(self) -> None:
        """Test that an unknown preferred timezone is a validation error."""
        response = self.client.patch(
            f"/users/{uuid4()}",
            headers=self.auth_headers,
            json={"preferred_timezone": "Nowhere/Land"},
        )

        self.assertEqual(response.status_code, 422)

    def test_patch_rejects_bad_number(self) -> None:
        """Test that a malformed WhatsApp number is a validation error."""
        response = self.client.patch(
            f"/users/{uuid4()}",
            headers=self.auth_headers,
            json={"whatsapp_number": "call me"},
        )

        self.assertEqual(response.status_code, 422)

    @patch("src.api.users.endpoints.get_session")
    def test_patch_duplicate_number_conflicts(self, mock_get_session: MagicMock) -> None:
        """Test that a number already in use returns 409."""
        mock_get_session.return_value.__enter__ = MagicMock(
            side_effect=IntegrityError("UPDATE users", {}, Exception("duplicate key"))
        )
        mock_get_session.return_value.__exit__ = MagicMock(return_value=False)

        response = self.client.patch(
            f"/users/{uuid4()}",
            headers=self.auth_headers,
            json={"whatsapp_number": "+15550001111"},
        )

        self.assertEqual(response.status_code, 409)


class TestWhatsAppVerificationEndpoint(UserEndpointTestCase):
    """Tests for POST /users/{user_id}/whatsapp/verification endpoint."""

    @patch("src.api.users.endpoints._get_gateway_client")
    @patch("src.api.users.endpoints.get_user_by_id")
    @patch("src.api.users.endpoints.get_session")
    def test_sends_poll(
        self,
        mock_get_session: MagicMock,
        mock_get_user: MagicMock,
        mock_client: MagicMock,
    ) -> None:
        """Test that a poll is sent to an unverified number."""
        _mock_session(mock_get_session)
        user = _user()
        mock_get_user.return_value = user
        mock_client.return_value.send_login_poll.return_value = True

        response = self.client.post(
            f"/users/{user.id}/whatsapp/verification", headers=self.auth_headers
        )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["poll_sent"])
        mock_client.return_value.send_login_poll.assert_called_once_with("+919876543210")

    @patch("src.api.users.endpoints._get_gateway_client")
    @patch("src.api.users.endpoints.get_user_by_id")
    @patch("src.api.users.endpoints.get_session")
    def test_already_verified_is_noop(
        self,
        mock_get_session: MagicMock,
        mock_get_user: MagicMock,
        mock_client: MagicMock,
    ) -> None:
        """Test that a verified user gets no new poll."""
        _mock_session(mock_get_session)
        user = _user(verified=True)
        mock_get_user.return_value = user

        response = self.client.post(
            f"/users/{user.id}/whatsapp/verification", headers=self.auth_headers
        )

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["poll_sent"])
        mock_client.assert_not_called()

    @patch("src.api.users.endpoints.get_user_by_id")
    @patch("src.api.users.endpoints.get_session")
    def test_no_number(self, mock_get_session: MagicMock, mock_get_user: MagicMock) -> None:
        """Test that a user without a number gets 400."""
        _mock_session(mock_get_session)
        user = _user(number=None)
        mock_get_user.return_value = user

        response = self.client.post(
            f"/users/{user.id}/whatsapp/verification", headers=self.auth_headers
        )

        self.assertEqual(response.status_code, 400)

    @patch("src.api.users.endpoints._get_gateway_client")
    @patch("src.api.users.endpoints.get_user_by_id")
    @patch("src.api.users.endpoints.get_session")
    def test_gateway_failure(
        self,
        mock_get_session: MagicMock,
        mock_get_user: MagicMock,
        mock_client: MagicMock,
    ) -> None:
        """Test that a gateway error surfaces as 502."""
        _mock_session(mock_get_session)
        user = _user()
        mock_get_user.return_value = user
        mock_client.return_value.send_login_poll.side_effect = WhatsAppGatewayError("down")

        response = self.client.post(
            f"/users/{user.id}/whatsapp/verification", headers=self.auth_headers
        )

        self.assertEqual(response.status_code, 502)


if __name__ == "__main__":
    unittest.main()
