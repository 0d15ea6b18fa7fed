"""
Order Module - Service Layer
===============================
Checkout pipeline and the caller's order queries.

Checkout stages:
    validating -> authorizing -> persisting -> rendering -> delivering -> done

Persisting is one transaction (cart row lock + compare-and-clear of its items),
so a concurrent second checkout of the same cart sees it empty and never
double-bills. Rendering and email delivery run after the commit: a render
failure leaves the order in place and is reported as retryable; an email
failure is only logged.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from common.helpers import now_utc
from common.exceptions import (
    StorefrontError, EmptyCartError, AuthenticationError,
    InternalError, InvoiceRenderError, NotFoundError,
)
from modules.auth.deps import RequestContext
from modules.cart.models import Cart, CartItem
from modules.cart.service import cart_service
from modules.delivery.channels import BaseChannel, DeliveryRequest, dispatch
from modules.invoice.models import Invoice
from modules.invoice.renderer import render_invoice, invoice_path
from modules.order.models import Order, OrderItem, OrderStatus
from modules.user.models import User

logger = logging.getLogger("neonmarket.order")

ORDER_NOT_FOUND = "Pedido no encontrado."


class CheckoutStage(str, enum.Enum):
    VALIDATING = "validating"
    AUTHORIZING = "authorizing"
    PERSISTING = "persisting"
    RENDERING = "rendering"
    DELIVERING = "delivering"
    DONE = "done"


@dataclass
class CheckoutResult:
    order_id: str
    invoice_url: str
    total_cents: int
    email_sent: bool

    @property
    def message(self) -> str:
        if self.email_sent:
            return "Pago realizado con éxito. Te enviamos la factura por correo."
        return (
            "Pago realizado con éxito. No pudimos enviar la factura por correo; "
            "puedes compartirla desde tu pedido."
        )

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "orderId": self.order_id,
            "invoiceUrl": self.invoice_url,
            "totalCents": self.total_cents,
            "emailSent": self.email_sent,
        }


class CheckoutService:

    def __init__(self, email_channel: BaseChannel, renderer: Callable = render_invoice):
        self.email_channel = email_channel
        self.renderer = renderer

    def checkout(self, db: Session, ctx: RequestContext) -> CheckoutResult:
        self._stage(CheckoutStage.VALIDATING, ctx)
        cart = cart_service.resolve_cart(db, ctx)
        if not cart.items:
            raise EmptyCartError()

        self._stage(CheckoutStage.AUTHORIZING, ctx)
        if not ctx.is_authenticated:
            raise AuthenticationError("Debes iniciar sesión para proceder con el pago.")

        self._stage(CheckoutStage.PERSISTING, ctx)
        order = self._persist(db, cart.id, ctx.user_id)
        purchaser = order.user

        self._stage(CheckoutStage.RENDERING, ctx, order.id)
        try:
            url = self.renderer(order, purchaser)
        except Exception as e:
            logger.exception(f"Invoice render failed for order {order.id}: {e}")
            raise InvoiceRenderError(extra={"orderId": order.id, "retryable": True})

        self._stage(CheckoutStage.DELIVERING, ctx, order.id)
        email_sent = self._send_email(order, purchaser, url)

        db.add(Invoice(
            order_id=order.id,
            pdf_url=url,
            sent_at=now_utc() if email_sent else None,
        ))
        order.invoice_url = url
        db.commit()

        self._stage(CheckoutStage.DONE, ctx, order.id)
        return CheckoutResult(
            order_id=order.id,
            invoice_url=url,
            total_cents=order.total_cents,
            email_sent=email_sent,
        )

    # ==========================================
    # Private helpers
    # ==========================================

    def _persist(self, db: Session, cart_id: int, user_id: int) -> Order:
        """Cart -> Order in one transaction. Rolls back everything on failure."""
        try:
            cart = db.query(Cart).filter(Cart.id == cart_id).with_for_update().one()
            items = (
                db.query(CartItem)
                .filter(CartItem.cart_id == cart.id)
                .order_by(CartItem.id)
                .populate_existing()
                .all()
            )
            if not items:
                raise EmptyCartError()

            user = db.query(User).filter(User.id == user_id, User.is_active == True).first()  # noqa: E712
            if not user:
                raise AuthenticationError()

            cart.user_id = user.id
            order = Order(
                user_id=user.id,
                cart_id=cart.id,
                total_cents=sum(it.price_cents * it.quantity for it in items),
                status=OrderStatus.PAID.value,
            )
            db.add(order)
            db.flush()

            for it in items:
                db.add(OrderItem(
                    order_id=order.id,
                    product_id=it.product_id,
                    product_name=it.product.name,
                    quantity=it.quantity,
                    price_cents=it.price_cents,
                ))

            # Compare-and-clear: a concurrent checkout already took these lines
            deleted = (
                db.query(CartItem)
                .filter(CartItem.cart_id == cart.id, CartItem.id.in_([it.id for it in items]))
                .delete(synchronize_session=False)
            )
            if deleted != len(items):
                raise EmptyCartError()

            db.commit()
        except StorefrontError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Checkout persistence failed for cart #{cart_id}: {e}")
            raise InternalError("No se pudo procesar el pago.")

        logger.info(f"Order {order.id} created from cart #{cart_id}: {order.total_cents} cents")
        return order

    def _send_email(self, order: Order, purchaser: User, url: str) -> bool:
        req = DeliveryRequest(
            destination=purchaser.email,
            invoice_url=url,
            order_id=order.id,
            total_cents=order.total_cents,
            customer_name=purchaser.display_name,
            invoice_path=invoice_path(order.id),
        )
        try:
            return dispatch(self.email_channel, req).success
        except Exception as e:
            logger.error(f"Checkout email for order {order.id} crashed: {e}")
            return False

    def _stage(self, stage: CheckoutStage, ctx: RequestContext, order_id: str = None):
        suffix = f" order={order_id}" if order_id else ""
        logger.debug(f"Checkout [{stage.value}] user={ctx.user_id}{suffix}")


class OrderService:

    def list_orders(self, db: Session, user_id: int) -> List[Order]:
        return (
            db.query(Order)
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id)
            .all()
        )

    def get_user_order(self, db: Session, user_id: int, order_id: str) -> Order:
        """Ownership check: someone else's order is reported as missing."""
        order = db.query(Order).filter(Order.id == order_id, Order.user_id == user_id).first()
        if not order:
            raise NotFoundError(ORDER_NOT_FOUND)
        return order


def order_out(order: Order, with_items: bool = True) -> dict:
    data = {
        "id": order.id,
        "status": order.status,
        "totalCents": order.total_cents,
        "invoiceUrl": order.invoice_url,
        "invoiceSentAt": order.invoice.sent_at.isoformat() if order.invoice and order.invoice.sent_at else None,
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "itemCount": order.item_count,
    }
    if with_items:
        data["items"] = [
            {
                "productId": it.product_id,
                "name": it.product_name,
                "quantity": it.quantity,
                "priceCents": it.price_cents,
                "lineTotalCents": it.line_total,
            }
            for it in order.items
        ]
    return data


# Singleton
order_service = OrderService()
