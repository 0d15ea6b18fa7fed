"""
Order Module - Models
======================
Immutable order with a price snapshot per item.
"""

import enum
from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from config.database import Base
from common.helpers import new_public_id


class OrderStatus(str, enum.Enum):
    # Checkout marks orders paid directly; there is no pending state
    PAID = "paid"


class Order(Base):
    __tablename__ = "orders"

    # Unguessable: the public invoice URL is derived from it
    id = Column(String(32), primary_key=True, default=new_public_id)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="SET NULL"), nullable=True)
    total_cents = Column(Integer, nullable=False)
    status = Column(String, default=OrderStatus.PAID.value, nullable=False)
    invoice_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    items = relationship(
        "OrderItem", back_populates="order",
        cascade="all, delete-orphan", order_by="OrderItem.id",
    )
    invoice = relationship("Invoice", back_populates="order", uselist=False)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def unit_count(self) -> int:
        return sum(item.quantity for item in self.items)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)

    # Snapshot at time of purchase
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_item_qty"),
    )

    @property
    def line_total(self) -> int:
        return self.price_cents * self.quantity
