"""Resources for Dagster pipelines."""

from typing import Optional

from pydantic import Field

from dagster import ConfigurableResource
from src.messaging.whatsapp.client import WhatsAppGatewayClient
from src.messaging.whatsapp.config import WhatsAppGatewayConfig


class WhatsAppGatewayResource(ConfigurableResource):
    """Dagster resource providing a WhatsApp gateway client.

    Settings come from the same WHATSAPP_GATEWAY_ environment variables as the
    standalone scheduler. Any field set on the resource overrides its variable.
    """

    base_url: Optional[str] = Field(None, description="Gateway base URL")  # noqa: UP045
    send_reminders_path: Optional[str] = Field(None, description="Reminder path")  # noqa: UP045
    login_poll_path: Optional[str] = Field(None, description="Login poll path")  # noqa: UP045
    request_timeout: Optional[int] = Field(None, description="Timeout in seconds")  # noqa: UP045
    api_token: Optional[str] = Field(None, description="Gateway bearer token")  # noqa: UP045

    def get_settings(self) -> WhatsAppGatewayConfig:
        """Load gateway settings from the environment, applying resource overrides.

        :returns: Validated gateway settings.
        :raises pydantic.ValidationError: If the merged settings are invalid.
        """
        overrides = {
            name: value
            for name, value in (
                ("base_url", self.base_url),
                ("send_reminders_path", self.send_reminders_path),
                ("login_poll_path", self.login_poll_path),
                ("request_timeout", self.request_timeout),
                ("api_token", self.api_token),
            )
            if value is not None
        }
        return WhatsAppGatewayConfig(**overrides)

    def get_client(self) -> WhatsAppGatewayClient:
        """Get a gateway client instance."""
        return WhatsAppGatewayClient.from_settings(self.get_settings())
