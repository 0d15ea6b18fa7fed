"""
Invoice Routes
===============
Share an order's invoice through email, WhatsApp or Telegram.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from config.database import get_db
from modules.auth.deps import require_login
from modules.auth.schemas import EMAIL_PATTERN
from modules.delivery.channels import ChannelRegistry
from modules.delivery.deps import get_channels
from modules.invoice.service import InvoiceShareService

router = APIRouter(prefix="/orders", tags=["invoices"])


class ShareInvoiceIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    method: Literal["email", "whatsapp", "telegram"]
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    telegram_chat_id: Optional[str] = Field(None, alias="telegramChatId", max_length=64)


def get_share_service(channels: ChannelRegistry = Depends(get_channels)) -> InvoiceShareService:
    return InvoiceShareService(channels)


@router.post("/{order_id}/share")
def share_invoice(
    order_id: str,
    payload: ShareInvoiceIn,
    db: Session = Depends(get_db),
    user=Depends(require_login),
    service: InvoiceShareService = Depends(get_share_service),
):
    return service.share(
        db, user, order_id, payload.method,
        email=payload.email,
        phone=payload.phone,
        telegram_chat_id=payload.telegram_chat_id,
    )
