"""
WhatsApp Channel (Twilio)
==========================
REST: POST {TWILIO_API_URL}/Accounts/{sid}/Messages.json, form-encoded,
HTTP basic auth (sid:token). The invoice URL travels as MediaUrl, so it must
be publicly reachable.
"""

import logging
from typing import Optional

import httpx

from config import settings
from common.helpers import format_cents
from modules.delivery.channels import (
    BaseChannel, DeliveryRequest, DeliveryResult, DeliveryErrorKind, greeting_name,
)

logger = logging.getLogger("neonmarket.delivery.whatsapp")

WHATSAPP_PREFIX = "whatsapp:"


def normalize_number(value: str) -> str:
    """'+52 55 1234 5678' -> 'whatsapp:+525512345678'."""
    cleaned = "".join(value.split())
    return cleaned if cleaned.startswith(WHATSAPP_PREFIX) else f"{WHATSAPP_PREFIX}{cleaned}"


class WhatsAppChannel(BaseChannel):
    name = "whatsapp"
    label = "WhatsApp"

    def __init__(self, account_sid: str, auth_token: str, sender: str,
                 api_url: str = "https://api.twilio.com/2010-04-01",
                 timeout: float = 10, client: Optional[httpx.Client] = None):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.sender = sender
        self.api_url = api_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls) -> "WhatsAppChannel":
        return cls(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            sender=settings.TWILIO_WHATSAPP_FROM,
            api_url=settings.TWILIO_API_URL,
            timeout=settings.CHANNEL_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.sender)

    @property
    def messages_url(self) -> str:
        return f"{self.api_url}/Accounts/{self.account_sid}/Messages.json"

    def send(self, req: DeliveryRequest) -> DeliveryResult:
        if not self.is_configured:
            return DeliveryResult.failed(
                DeliveryErrorKind.NOT_CONFIGURED,
                "WhatsApp no está configurado. Define TWILIO_ACCOUNT_SID, "
                "TWILIO_AUTH_TOKEN y TWILIO_WHATSAPP_FROM.",
            )

        body = (
            f"Hola {greeting_name(req)}! Tu factura {req.order_id} por "
            f"{format_cents(req.total_cents)} está lista. Descarga el PDF desde este mensaje."
        )
        try:
            resp = self.client.post(
                self.messages_url,
                data={
                    "From": normalize_number(self.sender),
                    "To": normalize_number(req.destination),
                    "Body": body,
                    "MediaUrl": req.invoice_url,
                },
                auth=(self.account_sid, self.auth_token),
            )
        except httpx.TimeoutException:
            return DeliveryResult.failed(DeliveryErrorKind.TIMEOUT, "Twilio no respondió a tiempo.")
        except httpx.HTTPError as e:
            logger.error(f"Twilio request failed: {e}")
            return DeliveryResult.failed(DeliveryErrorKind.REJECTED, f"Error de conexión con Twilio: {e}")

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if resp.status_code >= 400:
            msg = data.get("message") or resp.text
            logger.error(f"Twilio rejected message [{resp.status_code}] code={data.get('code')}: {msg}")
            return DeliveryResult.failed(DeliveryErrorKind.REJECTED, f"Twilio [{resp.status_code}]: {msg}")

        logger.info(f"Twilio message created sid={data.get('sid')}")
        return DeliveryResult.sent()

    def close(self):
        self.client.close()
