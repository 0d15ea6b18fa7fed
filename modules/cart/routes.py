"""
Cart Routes
=============
Cart view and item add/update/remove, scoped to the calling session.
"""

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import RequestContext, get_request_context
from modules.cart.service import cart_service, item_out

router = APIRouter(prefix="/cart", tags=["cart"])


class AddItemIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., gt=0, alias="productId")
    quantity: int = Field(..., gt=0)


class UpdateItemIn(BaseModel):
    quantity: int = Field(..., ge=0)


@router.get("")
def view_cart(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    cart = cart_service.resolve_cart(db, ctx)
    db.commit()
    return cart_service.read_cart(db, cart.id)


@router.post("/items", status_code=201)
def add_item(
    payload: AddItemIn,
    response: Response,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    cart = cart_service.resolve_cart(db, ctx)
    item, created = cart_service.add_item(db, cart.id, payload.product_id, payload.quantity)
    db.commit()
    if not created:
        response.status_code = 200
    return item_out(item)


@router.patch("/items/{item_id}")
def update_item(
    item_id: int,
    payload: UpdateItemIn,
    response: Response,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    cart = cart_service.resolve_cart(db, ctx)
    item = cart_service.set_item_quantity(db, cart.id, item_id, payload.quantity)
    db.commit()
    if item is None:
        response.status_code = 204
        return None
    return item_out(item)


@router.delete("/items/{item_id}", status_code=204)
def remove_item(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    cart = cart_service.resolve_cart(db, ctx)
    cart_service.remove_item(db, cart.id, item_id)
    db.commit()
