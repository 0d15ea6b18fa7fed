"""
Delivery Channel Abstraction
==============================
Each channel implements send() and never raises for delivery problems:
the outcome is a DeliveryResult tagged with an error kind.
Channels are built once at start-up and handed out through ChannelRegistry.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

logger = logging.getLogger("neonmarket.delivery")


class DeliveryMethod(str, enum.Enum):
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    TELEGRAM = "telegram"


class DeliveryErrorKind(str, enum.Enum):
    NOT_CONFIGURED = "not_configured"
    REJECTED = "rejected"
    TIMEOUT = "timeout"


@dataclass
class DeliveryRequest:
    """Input for sending one invoice to one destination."""
    destination: str        # email address, phone number or chat id
    invoice_url: str
    order_id: str
    total_cents: int
    customer_name: str = ""
    invoice_path: Optional[str] = None


@dataclass
class DeliveryResult:
    """Result of send()."""
    success: bool
    error_kind: Optional[DeliveryErrorKind] = None
    error_message: Optional[str] = None

    @classmethod
    def sent(cls) -> "DeliveryResult":
        return cls(success=True)

    @classmethod
    def failed(cls, kind: DeliveryErrorKind, message: str) -> "DeliveryResult":
        return cls(success=False, error_kind=kind, error_message=message)


class BaseChannel:
    """Abstract channel interface."""
    name: str = ""
    label: str = ""

    @property
    def is_configured(self) -> bool:
        raise NotImplementedError

    def send(self, req: DeliveryRequest) -> DeliveryResult:
        raise NotImplementedError

    def close(self):
        pass


def greeting_name(req: DeliveryRequest) -> str:
    return req.customer_name or "cliente"


# ── Registry ──

class ChannelRegistry:
    """Channels by method name; one instance per process."""

    def __init__(self, channels: List[BaseChannel]):
        self._channels: Dict[str, BaseChannel] = {ch.name: ch for ch in channels}

    def get(self, name: str) -> BaseChannel:
        channel = self._channels.get(str(getattr(name, "value", name)))
        if channel is None:
            raise KeyError(f"Unknown delivery channel: {name}")
        return channel

    def names(self) -> List[str]:
        return list(self._channels.keys())

    def close(self):
        for channel in self._channels.values():
            channel.close()


def dispatch(channel: BaseChannel, req: DeliveryRequest) -> DeliveryResult:
    """Send through one channel and log the attempt."""
    result = channel.send(req)
    if result.success:
        logger.info(f"Invoice {req.order_id} sent via {channel.name} to {req.destination}")
    else:
        logger.warning(
            f"Invoice {req.order_id} via {channel.name} to {req.destination} failed "
            f"[{result.error_kind.value}]: {result.error_message}"
        )
    return result


def build_channels() -> ChannelRegistry:
    """Construct every channel client once, from validated settings."""
    from modules.delivery.channels.email import EmailChannel
    from modules.delivery.channels.whatsapp import WhatsAppChannel
    from modules.delivery.channels.telegram import TelegramChannel

    registry = ChannelRegistry([
        EmailChannel.from_settings(),
        WhatsAppChannel.from_settings(),
        TelegramChannel.from_settings(),
    ])
    for name in registry.names():
        channel = registry.get(name)
        if not channel.is_configured:
            logger.warning(f"Delivery channel '{name}' is not configured; sends will fail fast")
    return registry
