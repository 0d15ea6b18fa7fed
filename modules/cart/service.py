"""
Cart Module - Service Layer
==============================
Cart resolution per browser session, add/update/remove items, read with totals.
Every item mutation is scoped to a resolved cart id (ownership check).
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from common.exceptions import NotFoundError, ValidationError, field_error
from modules.auth.deps import RequestContext
from modules.cart.models import Cart, CartItem
from modules.catalog.service import catalog_service

logger = logging.getLogger("neonmarket.cart")

ITEM_NOT_FOUND = "Elemento no encontrado en tu carrito."


class CartService:

    def resolve_cart(self, db: Session, ctx: RequestContext) -> Cart:
        """
        Find the cart for this request:
        1. the cart bound to the browser session
        2. else, for a logged-in user, their latest cart (re-bound to this session)
        3. else a new empty cart bound to the session (and user)
        """
        cart = db.query(Cart).filter(Cart.session_id == ctx.session_id).first()
        if cart:
            return cart

        if ctx.user_id:
            cart = (
                db.query(Cart)
                .filter(Cart.user_id == ctx.user_id)
                .order_by(Cart.id.desc())
                .first()
            )
            if cart:
                cart.session_id = ctx.session_id
                db.flush()
                logger.info(f"Cart #{cart.id} of user #{ctx.user_id} bound to a new session")
                return cart

        cart = Cart(session_id=ctx.session_id, user_id=ctx.user_id)
        db.add(cart)
        try:
            db.flush()
        except IntegrityError:
            # A parallel request for the same session created it first
            db.rollback()
            return db.query(Cart).filter(Cart.session_id == ctx.session_id).one()

        logger.info(f"Cart #{cart.id} created")
        return cart

    def add_item(self, db: Session, cart_id: int, product_id: int, quantity: int) -> Tuple[CartItem, bool]:
        """
        Add `quantity` units of a product.
        Returns: (line, created); created is False when an existing line grew.
        """
        if quantity <= 0:
            raise ValidationError(errors=[field_error("quantity", "Debe ser un entero positivo.")])

        product = catalog_service.get_product(db, product_id)

        item = db.query(CartItem).filter(
            CartItem.cart_id == cart_id,
            CartItem.product_id == product_id,
        ).first()

        if item:
            item.quantity += quantity
            db.flush()
            return item, False

        item = CartItem(
            cart_id=cart_id,
            product_id=product.id,
            quantity=quantity,
            price_cents=product.price_cents,
        )
        db.add(item)
        db.flush()
        return item, True

    def set_item_quantity(self, db: Session, cart_id: int, item_id: int, quantity: int) -> Optional[CartItem]:
        """Set a line's quantity. 0 deletes the line and returns None."""
        if quantity < 0:
            raise ValidationError(errors=[field_error("quantity", "Debe ser mayor o igual a 0.")])

        item = self._owned_item(db, cart_id, item_id)
        if quantity == 0:
            db.delete(item)
            db.flush()
            return None

        item.quantity = quantity
        db.flush()
        return item

    def remove_item(self, db: Session, cart_id: int, item_id: int) -> None:
        item = self._owned_item(db, cart_id, item_id)
        db.delete(item)
        db.flush()

    def read_cart(self, db: Session, cart_id: int) -> dict:
        cart = db.query(Cart).filter(Cart.id == cart_id).first()
        if not cart:
            raise NotFoundError("Carrito no encontrado.")

        items = [
            {
                "id": item.id,
                "productId": item.product_id,
                "name": item.product.name,
                "imageUrl": item.product.image_url,
                "quantity": item.quantity,
                "priceCents": item.price_cents,
                "lineTotalCents": item.line_total,
            }
            for item in cart.items
        ]
        return {
            "id": cart.id,
            "userId": cart.user_id,
            "items": items,
            "itemCount": sum(it["quantity"] for it in items),
            "subtotalCents": sum(it["lineTotalCents"] for it in items),
        }

    # ==========================================
    # Private helpers
    # ==========================================

    def _owned_item(self, db: Session, cart_id: int, item_id: int) -> CartItem:
        item = db.query(CartItem).filter(
            CartItem.id == item_id,
            CartItem.cart_id == cart_id,
        ).first()
        if not item:
            raise NotFoundError(ITEM_NOT_FOUND)
        return item


def item_out(item: CartItem) -> dict:
    return {
        "id": item.id,
        "cartId": item.cart_id,
        "productId": item.product_id,
        "quantity": item.quantity,
        "priceCents": item.price_cents,
    }


# Singleton
cart_service = CartService()
