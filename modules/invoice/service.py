"""
Invoice Module - Share Service
================================
Send an existing order's invoice through one chosen channel.

Unlike the checkout email, a share request always reports failure: a channel
error rolls back and surfaces as an upstream failure. Destinations are checked
before any render or network call.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from common.helpers import now_utc, strip_whitespace
from common.exceptions import (
    ValidationError, UpstreamError, InvoiceRenderError, field_error,
)
from modules.delivery.channels import (
    ChannelRegistry, DeliveryMethod, DeliveryRequest, dispatch,
)
from modules.invoice.models import Invoice
from modules.invoice.renderer import (
    render_invoice, invoice_exists, invoice_path, invoice_url,
)
from modules.order.service import order_service
from modules.user.models import User

logger = logging.getLogger("neonmarket.invoice")


class InvoiceShareService:

    def __init__(self, channels: ChannelRegistry, renderer: Callable = render_invoice):
        self.channels = channels
        self.renderer = renderer

    def share(self, db: Session, user: User, order_id: str, method: str,
              email: Optional[str] = None, phone: Optional[str] = None,
              telegram_chat_id: Optional[str] = None) -> dict:
        order = order_service.get_user_order(db, user.id, order_id)
        method = self.parse_method(method)
        destination = self.resolve_destination(user, method, email, phone, telegram_chat_id)

        if invoice_exists(order.id):
            url = order.invoice_url or invoice_url(order.id)
        else:
            try:
                url = self.renderer(order, user)
            except Exception as e:
                logger.exception(f"Invoice render failed for order {order.id}: {e}")
                raise InvoiceRenderError(
                    "No pudimos generar la factura. Intenta de nuevo.",
                    extra={"orderId": order.id, "retryable": True},
                )

        channel = self.channels.get(method.value)
        result = dispatch(channel, DeliveryRequest(
            destination=destination,
            invoice_url=url,
            order_id=order.id,
            total_cents=order.total_cents,
            customer_name=user.display_name,
            invoice_path=invoice_path(order.id),
        ))

        if not result.success:
            db.rollback()
            raise UpstreamError(f"No se pudo enviar la factura por {channel.label}. Intenta de nuevo más tarde.")

        invoice = order.invoice
        if invoice is None:
            invoice = Invoice(order_id=order.id, pdf_url=url)
            db.add(invoice)
        invoice.sent_at = now_utc()
        if not order.invoice_url:
            order.invoice_url = url
        db.commit()

        return {
            "message": f"Factura enviada por {channel.label}.",
            "invoiceUrl": url,
        }

    @staticmethod
    def parse_method(method) -> DeliveryMethod:
        try:
            return DeliveryMethod(getattr(method, "value", method))
        except ValueError:
            raise ValidationError(errors=[field_error(
                "method", "Método no soportado. Usa email, whatsapp o telegram.",
            )])

    @staticmethod
    def resolve_destination(user: User, method: DeliveryMethod, email: Optional[str],
                            phone: Optional[str], telegram_chat_id: Optional[str]) -> str:
        if method == DeliveryMethod.EMAIL:
            destination = (email or "").strip() or user.email
            if not destination:
                raise ValidationError(errors=[field_error("email", "Indica un correo electrónico.")])
            return destination

        if method == DeliveryMethod.WHATSAPP:
            destination = strip_whitespace(phone)
            if not destination:
                raise ValidationError(errors=[field_error(
                    "phone", "Indica un número de WhatsApp para enviar la factura.",
                )])
            return destination

        destination = (telegram_chat_id or "").strip()
        if not destination:
            raise ValidationError(errors=[field_error(
                "telegramChatId", "Indica el chat ID de Telegram para enviar la factura.",
            )])
        return destination
