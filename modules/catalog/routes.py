"""
Catalog Routes
================
Public product listing/detail and admin product creation.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_admin
from modules.catalog.service import catalog_service, product_out

router = APIRouter(prefix="/products", tags=["catalog"])


class ProductIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    price_cents: int = Field(..., ge=0, alias="priceCents")
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    tags: List[str] = Field(default_factory=list)


@router.get("")
def list_products(q: Optional[str] = None, tag: Optional[str] = None,
                  db: Session = Depends(get_db)):
    return [product_out(p) for p in catalog_service.list_products(db, q=q, tag=tag)]


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_out(catalog_service.get_product(db, product_id))


@router.post("", status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db),
                   admin=Depends(require_admin)):
    product = catalog_service.create_product(
        db, payload.name, payload.price_cents,
        description=payload.description,
        image_url=payload.image_url,
        tags=payload.tags,
    )
    db.commit()
    return product_out(product)
