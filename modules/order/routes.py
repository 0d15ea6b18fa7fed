"""
Order Routes
=============
Checkout and the caller's order history.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import RequestContext, get_request_context, require_login
from modules.delivery.channels import ChannelRegistry
from modules.delivery.deps import get_channels
from modules.order.service import CheckoutService, order_service, order_out

router = APIRouter(tags=["orders"])


def get_checkout_service(channels: ChannelRegistry = Depends(get_channels)) -> CheckoutService:
    return CheckoutService(email_channel=channels.get("email"))


@router.post("/checkout", status_code=201)
def checkout(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
    service: CheckoutService = Depends(get_checkout_service),
):
    return service.checkout(db, ctx).to_dict()


@router.get("/orders")
def list_orders(db: Session = Depends(get_db), user=Depends(require_login)):
    return [order_out(o, with_items=False) for o in order_service.list_orders(db, user.id)]


@router.get("/orders/{order_id}")
def get_order(order_id: str, db: Session = Depends(get_db), user=Depends(require_login)):
    return order_out(order_service.get_user_order(db, user.id, order_id))
