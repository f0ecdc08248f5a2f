"""WhatsApp delivery gateway integration."""

from src.messaging.whatsapp.client import (
    DEFAULT_REQUEST_TIMEOUT,
    WhatsAppGatewayClient,
    WhatsAppGatewayError,
)
from src.messaging.whatsapp.config import WhatsAppGatewayConfig, get_whatsapp_settings
from src.messaging.whatsapp.models import (
    DeliveryResult,
    LoginPollResult,
    ReminderInput,
    SendRemindersRequest,
)

__all__ = [
    "DEFAULT_REQUEST_TIMEOUT",
    "DeliveryResult",
    "LoginPollResult",
    "ReminderInput",
    "SendRemindersRequest",
    "WhatsAppGatewayClient",
    "WhatsAppGatewayConfig",
    "WhatsAppGatewayError",
    "get_whatsapp_settings",
]
