"""
Invoice Renderer
=================
Draws the invoice PDF for an order snapshot with reportlab and returns its
public URL. The file is written to a temp name and moved into place, so a
reader never sees a half-written invoice. Rendering twice yields the same
layout; safe to retry.
"""

import os
import logging
import tempfile

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from config import settings
from common.helpers import format_cents, format_datetime

logger = logging.getLogger("neonmarket.invoice")

MAGENTA = colors.HexColor("#ff2bff")
CYAN = colors.HexColor("#09fbd3")
INK = colors.HexColor("#1b1b2f")
MUTED = colors.HexColor("#6b6fa8")

LEFT = 40
RIGHT = 555
BOTTOM_MARGIN = 80


# ==========================================
# Paths & URLs
# ==========================================

def invoice_filename(order_id: str) -> str:
    return f"invoice-{order_id}.pdf"


def invoice_path(order_id: str) -> str:
    return os.path.join(settings.INVOICE_DIR, invoice_filename(order_id))


def invoice_exists(order_id: str) -> bool:
    return os.path.isfile(invoice_path(order_id))


def invoice_url(order_id: str) -> str:
    return f"{settings.APP_URL}/invoices/{invoice_filename(order_id)}"


def ensure_invoice_dir() -> str:
    os.makedirs(settings.INVOICE_DIR, exist_ok=True)
    return settings.INVOICE_DIR


# ==========================================
# Rendering
# ==========================================

def render_invoice(order, purchaser) -> str:
    """
    Render invoice-{order.id}.pdf and return its public URL.
    order: Order with items loaded. purchaser: the User who placed it.
    """
    ensure_invoice_dir()
    target = invoice_path(order.id)

    fd, tmp_path = tempfile.mkstemp(prefix=".invoice-", suffix=".pdf.tmp", dir=settings.INVOICE_DIR)
    os.close(fd)
    try:
        # invariant=1 drops timestamps/ids so repeated renders are byte-stable
        c = canvas.Canvas(tmp_path, pagesize=A4, invariant=1)
        c.setTitle(f"Factura {order.id}")
        c.setAuthor(settings.STORE_NAME)
        _draw(c, order, purchaser)
        c.save()
        os.replace(tmp_path, target)
    except Exception:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

    logger.info(f"Invoice rendered for order {order.id}: {target}")
    return invoice_url(order.id)


def _draw(c: canvas.Canvas, order, purchaser):
    w, h = A4
    y = h - 60

    # header
    c.setFillColor(MAGENTA)
    c.setFont("Helvetica-Bold", 22)
    c.drawCentredString(w / 2, y, settings.STORE_NAME)
    y -= 34

    c.setFillColor(INK)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(LEFT, y, f"Factura: {order.id}")
    y -= 16
    c.setFont("Helvetica", 11)
    c.drawString(LEFT, y, f"Cliente: {purchaser.display_name} ({purchaser.email})")
    y -= 16
    c.drawString(LEFT, y, f"Fecha: {format_datetime(order.created_at)}")
    y -= 26

    # summary panel
    c.setStrokeColor(CYAN)
    c.setLineWidth(1.2)
    c.rect(LEFT, y - 34, RIGHT - LEFT, 44, stroke=1, fill=0)
    c.setFont("Helvetica", 10)
    c.drawString(LEFT + 10, y - 6, f"Estado: {str(getattr(order.status, 'value', order.status)).upper()}")
    c.drawString(LEFT + 10, y - 22, f"Productos: {order.item_count}")
    c.drawString(LEFT + 190, y - 22, f"Unidades: {order.unit_count}")
    c.drawRightString(RIGHT - 10, y - 22, f"Total: {format_cents(order.total_cents)}")
    y -= 60

    # item table
    y = _draw_table_header(c, y)
    running = 0
    c.setFont("Helvetica", 10)
    for item in order.items:
        running += item.line_total
        c.setFillColor(INK)
        c.drawString(LEFT, y, item.product_name[:42])
        c.drawRightString(320, y, str(item.quantity))
        c.drawRightString(395, y, format_cents(item.price_cents))
        c.drawRightString(475, y, format_cents(item.line_total))
        c.drawRightString(RIGHT, y, format_cents(running))
        y -= 14
        if y < BOTTOM_MARGIN:
            c.showPage()
            y = _draw_table_header(c, h - 60)
            c.setFont("Helvetica", 10)

    # totals
    y -= 6
    c.setStrokeColor(INK)
    c.line(LEFT, y, RIGHT, y)
    y -= 22
    c.setFillColor(MAGENTA)
    c.setFont("Helvetica-Bold", 14)
    c.drawRightString(RIGHT, y, f"Total: {format_cents(order.total_cents)}")

    # footer
    c.setFillColor(MUTED)
    c.setFont("Helvetica", 9)
    c.drawCentredString(
        w / 2, 40,
        "Gracias por comprar en nuestro mercado neón. Sigue explorando nuestras ofertas.",
    )


def _draw_table_header(c: canvas.Canvas, y: float) -> float:
    c.setFillColor(INK)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(LEFT, y, "Producto")
    c.drawRightString(320, y, "Cant.")
    c.drawRightString(395, y, "Precio")
    c.drawRightString(475, y, "Subtotal")
    c.drawRightString(RIGHT, y, "Acumulado")
    y -= 8
    c.setStrokeColor(INK)
    c.line(LEFT, y, RIGHT, y)
    return y - 14
