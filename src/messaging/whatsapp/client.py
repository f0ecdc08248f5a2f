"""HTTP client for the WhatsApp delivery gateway."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import requests
from pydantic import TypeAdapter, ValidationError

from src.messaging.whatsapp.config import WhatsAppGatewayConfig
from src.messaging.whatsapp.models import (
    DeliveryResult,
    LoginPollResult,
    ReminderInput,
    SendRemindersRequest,
)

logger = logging.getLogger(__name__)

# Default API timeout in seconds
DEFAULT_REQUEST_TIMEOUT = 30

_DELIVERY_RESULTS = TypeAdapter(list[DeliveryResult])


class WhatsAppGatewayError(Exception):
    """Raised when a call to the WhatsApp gateway fails."""


class WhatsAppGatewayClient:
    """Client for the external service that delivers WhatsApp messages.

    The gateway accepts a whole batch of reminders in one request and answers
    with one delivery result per reminder.
    """

    def __init__(
        self,
        *,
        base_url: str,
        send_reminders_path: str = "/send-reminder",
        login_poll_path: str = "/send-login-poll",
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
        api_token: str | None = None,
    ) -> None:
        """Initialise the gateway client.

        :param base_url: Base URL of the gateway.
        :param send_reminders_path: Path of the batched reminder endpoint.
        :param login_poll_path: Path of the verification poll endpoint.
        :param timeout: Request timeout in seconds.
        :param api_token: Optional bearer token sent with every request.
        """
        self._base_url = base_url.rstrip("/")
        self._send_reminders_url = f"{self._base_url}{send_reminders_path}"
        self._login_poll_url = f"{self._base_url}{login_poll_path}"
        self._timeout = timeout
        self._api_token = api_token
        logger.debug(f"WhatsAppGatewayClient initialised: base_url={self._base_url}")

    @classmethod
    def from_settings(cls, settings: WhatsAppGatewayConfig) -> WhatsAppGatewayClient:
        """Build a client from gateway settings.

        :param settings: Loaded gateway configuration.
        :returns: A configured client.
        """
        return cls(
            base_url=settings.base_url,
            send_reminders_path=settings.send_reminders_path,
            login_poll_path=settings.login_poll_path,
            timeout=settings.request_timeout,
            api_token=settings.api_token,
        )

    def send_reminders(self, reminders: Sequence[ReminderInput]) -> list[DeliveryResult]:
        """Submit a batch of reminders for delivery.

        :param reminders: Reminders to deliver.
        :returns: One delivery result per reminder the gateway processed.
        :raises WhatsAppGatewayError: If the request fails or the response is malformed.
        """
        if not reminders:
            return []

        body = SendRemindersRequest(reminder_input=list(reminders)).model_dump(by_alias=True)
        logger.info(f"Sending {len(reminders)} reminders to gateway")

        payload = self._post(self._send_reminders_url, body)

        try:
            results = _DELIVERY_RESULTS.validate_python(payload)
        except ValidationError as e:
            raise WhatsAppGatewayError(f"Malformed gateway response: {e}") from e

        logger.info(
            f"Gateway answered for {len(results)} reminders: "
            f"{sum(1 for r in results if r.success)} delivered"
        )
        return results

    def send_login_poll(self, whatsapp_number: str) -> bool:
        """Ask the gateway to send a verification poll to a WhatsApp number.

        :param whatsapp_number: The number to verify.
        :returns: True if the gateway accepted the request.
        :raises WhatsAppGatewayError: If the request fails or the response is malformed.
        """
        logger.info("Requesting WhatsApp verification poll")
        payload = self._post(self._login_poll_url, {"whatsappNumber": whatsapp_number})

        try:
            result = LoginPollResult.model_validate(payload)
        except ValidationError as e:
            raise WhatsAppGatewayError(f"Malformed gateway response: {e}") from e

        if not result.success:
            logger.warning(f"Gateway refused verification poll: {result.message}")
        return result.success

    def _post(self, url: str, body: dict[str, Any]) -> Any:
        """POST a JSON body to the gateway and decode the JSON response.

        :param url: Target URL.
        :param body: JSON-serialisable request body.
        :returns: The decoded response body.
        :raises WhatsAppGatewayError: On timeout, transport error, non-2xx or non-JSON body.
        """
        headers = {"Content-Type": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"

        try:
            response = requests.post(url, json=body, headers=headers, timeout=self._timeout)
            response.raise_for_status()
            return response.json()

        except requests.exceptions.Timeout as e:
            raise WhatsAppGatewayError(
                f"Gateway request timed out after {self._timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            raise WhatsAppGatewayError(f"Gateway request failed: {e}") from e
        except ValueError as e:
            raise WhatsAppGatewayError(f"Gateway returned a non-JSON body: {e}") from e
