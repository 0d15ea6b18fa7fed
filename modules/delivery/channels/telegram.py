"""
Telegram Channel
=================
Bot API sendDocument. Uploads the local PDF when it exists,
otherwise lets Telegram fetch the public invoice URL.
"""

import os
import logging
from typing import Optional

import httpx

from config import settings
from common.helpers import format_cents
from modules.delivery.channels import (
    BaseChannel, DeliveryRequest, DeliveryResult, DeliveryErrorKind, greeting_name,
)

logger = logging.getLogger("neonmarket.delivery.telegram")


class TelegramChannel(BaseChannel):
    name = "telegram"
    label = "Telegram"

    def __init__(self, bot_token: str, api_url: str = "https://api.telegram.org",
                 timeout: float = 10, client: Optional[httpx.Client] = None):
        self.bot_token = bot_token
        self.api_url = api_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls) -> "TelegramChannel":
        return cls(
            bot_token=settings.TELEGRAM_BOT_TOKEN,
            api_url=settings.TELEGRAM_API_URL,
            timeout=settings.CHANNEL_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token)

    @property
    def send_document_url(self) -> str:
        return f"{self.api_url}/bot{self.bot_token}/sendDocument"

    def send(self, req: DeliveryRequest) -> DeliveryResult:
        if not self.is_configured:
            return DeliveryResult.failed(
                DeliveryErrorKind.NOT_CONFIGURED,
                "Telegram no está configurado. Define TELEGRAM_BOT_TOKEN.",
            )

        caption = (
            f"Hola {greeting_name(req)}! Tu factura {req.order_id} por "
            f"{format_cents(req.total_cents)} está lista. Puedes abrir o descargar el PDF desde este chat."
        )
        data = {"chat_id": req.destination, "caption": caption}

        try:
            if req.invoice_path and os.path.exists(req.invoice_path):
                with open(req.invoice_path, "rb") as f:
                    files = {"document": (os.path.basename(req.invoice_path), f, "application/pdf")}
                    resp = self.client.post(self.send_document_url, data=data, files=files)
            else:
                resp = self.client.post(self.send_document_url, data={**data, "document": req.invoice_url})
        except httpx.TimeoutException:
            return DeliveryResult.failed(DeliveryErrorKind.TIMEOUT, "Telegram no respondió a tiempo.")
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Telegram request failed: {e}")
            return DeliveryResult.failed(DeliveryErrorKind.REJECTED, f"Error de conexión con Telegram: {e}")

        try:
            payload = resp.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if resp.status_code >= 400 or not payload.get("ok"):
            msg = payload.get("description") or resp.text
            logger.error(f"Telegram rejected document [{resp.status_code}]: {msg}")
            return DeliveryResult.failed(DeliveryErrorKind.REJECTED, f"Telegram [{resp.status_code}]: {msg}")

        return DeliveryResult.sent()

    def close(self):
        self.client.close()
