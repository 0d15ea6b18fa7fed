"""
Catalog Module - Models
========================
Products offered in the store. Prices are integer cents.
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, Text, DateTime, JSON, CheckConstraint,
)
from sqlalchemy.sql import func
from config.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price_cents = Column(Integer, nullable=False)
    image_url = Column(String, nullable=True)
    tags = Column(JSON, default=list, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_product_price"),
    )

    def __repr__(self):
        return f"<Product {self.name}>"
