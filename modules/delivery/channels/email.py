"""
Email Channel
==============
SMTP delivery with the invoice PDF attached.
SMTP_SECURE=true opens an implicit TLS connection; otherwise STARTTLS is
used when the server offers it.
"""

import os
import socket
import smtplib
import logging
from email.message import EmailMessage

from config import settings
from common.helpers import format_cents
from modules.delivery.channels import (
    BaseChannel, DeliveryRequest, DeliveryResult, DeliveryErrorKind, greeting_name,
)

logger = logging.getLogger("neonmarket.delivery.email")

SUBJECT = "Tu factura futurista ha llegado"


class EmailChannel(BaseChannel):
    name = "email"
    label = "Correo electrónico"

    def __init__(self, host: str, port: int, user: str = "", password: str = "",
                 secure: bool = False, sender: str = "", timeout: float = 10,
                 store_name: str = "Neon Market"):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.sender = sender
        self.timeout = timeout
        self.store_name = store_name

    @classmethod
    def from_settings(cls) -> "EmailChannel":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            secure=settings.SMTP_SECURE,
            sender=settings.MAIL_FROM,
            timeout=settings.CHANNEL_TIMEOUT_SECONDS,
            store_name=settings.STORE_NAME,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.sender)

    def build_message(self, req: DeliveryRequest) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = SUBJECT
        msg["From"] = self.sender
        msg["To"] = req.destination

        total = format_cents(req.total_cents)
        msg.set_content(
            f"Hola {greeting_name(req)}, gracias por tu compra en {self.store_name}.\n"
            f"Total pagado: {total}\n"
            f"Factura: {req.invoice_url}\n"
        )
        msg.add_alternative(
            f'<h1 style="color:#ff2bff;font-family:monospace;">Gracias por tu compra</h1>'
            f"<p>Adjuntamos la factura electrónica de tu compra en {self.store_name}.</p>"
            f"<p>Total pagado: <strong>{total}</strong></p>"
            f'<p><a href="{req.invoice_url}">Descargar factura</a></p>',
            subtype="html",
        )

        if req.invoice_path and os.path.exists(req.invoice_path):
            with open(req.invoice_path, "rb") as f:
                msg.add_attachment(
                    f.read(), maintype="application", subtype="pdf",
                    filename=f"invoice-{req.order_id}.pdf",
                )
        return msg

    def send(self, req: DeliveryRequest) -> DeliveryResult:
        if not self.is_configured:
            return DeliveryResult.failed(
                DeliveryErrorKind.NOT_CONFIGURED,
                "El correo no está configurado. Define SMTP_HOST y MAIL_FROM.",
            )

        try:
            msg = self.build_message(req)
            with self._connect() as smtp:
                if self.user:
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
            return DeliveryResult.sent()

        except (socket.timeout, TimeoutError) as e:
            return DeliveryResult.failed(DeliveryErrorKind.TIMEOUT, f"SMTP timeout: {e}")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP send to {req.destination} failed: {e}")
            return DeliveryResult.failed(DeliveryErrorKind.REJECTED, str(e))

    # ==========================================
    # Private helpers
    # ==========================================

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)

        smtp = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
        except (smtplib.SMTPException, OSError):
            smtp.close()
            raise
        return smtp
