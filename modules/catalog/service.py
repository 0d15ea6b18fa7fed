"""
Catalog Module - Service Layer
================================
Product lookup, search and creation.

Search policy: case-insensitive substring on name/description; when a tag is
given, the product must carry it (case-insensitive exact match).
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from common.exceptions import NotFoundError
from modules.catalog.models import Product


class CatalogService:

    def get_product(self, db: Session, product_id: int) -> Product:
        product = db.query(Product).filter(
            Product.id == product_id,
            Product.is_active == True,  # noqa: E712
        ).first()
        if not product:
            raise NotFoundError("Producto no encontrado.")
        return product

    def list_products(self, db: Session, q: Optional[str] = None,
                      tag: Optional[str] = None) -> List[Product]:
        query = db.query(Product).filter(Product.is_active == True)  # noqa: E712
        if q and q.strip():
            pattern = f"%{q.strip()}%"
            query = query.filter(or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
            ))
        products = query.order_by(Product.id).all()

        if tag and tag.strip():
            wanted = tag.strip().lower()
            products = [
                p for p in products
                if any(str(t).lower() == wanted for t in (p.tags or []))
            ]
        return products

    def create_product(self, db: Session, name: str, price_cents: int,
                       description: str = None, image_url: str = None,
                       tags: List[str] = None) -> Product:
        product = Product(
            name=name.strip(),
            description=description,
            price_cents=price_cents,
            image_url=image_url,
            tags=[t.strip() for t in (tags or []) if t.strip()],
        )
        db.add(product)
        db.flush()
        return product


def product_out(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "priceCents": product.price_cents,
        "imageUrl": product.image_url,
        "tags": product.tags or [],
    }


# Singleton
catalog_service = CatalogService()
