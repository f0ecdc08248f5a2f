"""Configuration for the WhatsApp gateway using pydantic-settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class WhatsAppGatewayConfig(BaseSettings):
    """Configuration for the WhatsApp delivery gateway.

    All settings are loaded from environment variables with the
    WHATSAPP_GATEWAY_ prefix.

    :param base_url: Base URL of the gateway service.
    :param send_reminders_path: Path of the batched reminder endpoint.
    :param login_poll_path: Path of the verification poll endpoint.
    :param request_timeout: Timeout in seconds for gateway requests.
    :param api_token: Optional bearer token sent with every request.
    """

    model_config = SettingsConfigDict(
        env_prefix="WHATSAPP_GATEWAY_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(..., description="Gateway base URL")
    send_reminders_path: str = Field(
        default="/send-reminder",
        description="Path of the batched reminder endpoint",
    )
    login_poll_path: str = Field(
        default="/send-login-poll",
        description="Path of the verification poll endpoint",
    )
    request_timeout: int = Field(
        default=30,
        ge=1,
        le=300,
        description="Request timeout in seconds",
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token for the gateway",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash.

        :param v: Raw URL from the environment.
        :returns: The normalised URL.
        :raises ValueError: If the URL is not http or https.
        """
        url = v.strip().rstrip("/")
        if not url.startswith(("http://", "https://")):
            raise ValueError("WHATSAPP_GATEWAY_BASE_URL must start with http:// or https://")
        return url


@lru_cache
def get_whatsapp_settings() -> WhatsAppGatewayConfig:
    """Get cached WhatsApp gateway settings.

    :returns: Configured WhatsAppGatewayConfig instance.
    """
    return WhatsAppGatewayConfig()  # type: ignore[call-arg]
