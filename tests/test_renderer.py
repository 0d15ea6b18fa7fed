"""Invoice renderer: file naming, URL shape and repeatable output."""
import os
from datetime import datetime
from types import SimpleNamespace

import pytest

from config import settings
from modules.invoice import renderer


def _item(name, quantity, price_cents):
    return SimpleNamespace(
        product_name=name, quantity=quantity, price_cents=price_cents,
        line_total=quantity * price_cents,
    )


@pytest.fixture()
def order():
    items = [_item("Neon Katana", 2, 10000), _item("Holo Visor", 1, 5000)]
    return SimpleNamespace(
        id="a" * 32,
        status="paid",
        created_at=datetime(2026, 1, 15, 21, 30),
        total_cents=25000,
        items=items,
        item_count=len(items),
        unit_count=3,
    )


@pytest.fixture()
def purchaser():
    return SimpleNamespace(display_name="Night Rider", email="rider@neon.mx")


@pytest.fixture(autouse=True)
def invoice_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "INVOICE_DIR", str(tmp_path / "invoices"))
    return tmp_path / "invoices"


def test_render_writes_pdf_and_returns_public_url(order, purchaser, invoice_dir):
    url = renderer.render_invoice(order, purchaser)

    assert url == f"{settings.APP_URL}/invoices/invoice-{order.id}.pdf"
    path = invoice_dir / f"invoice-{order.id}.pdf"
    assert path.is_file()
    assert path.read_bytes().startswith(b"%PDF")
    assert renderer.invoice_exists(order.id)


def test_render_is_repeatable(order, purchaser, invoice_dir):
    renderer.render_invoice(order, purchaser)
    first = (invoice_dir / f"invoice-{order.id}.pdf").read_bytes()

    renderer.render_invoice(order, purchaser)
    second = (invoice_dir / f"invoice-{order.id}.pdf").read_bytes()

    assert first == second
    # no temp files left behind
    assert os.listdir(invoice_dir) == [f"invoice-{order.id}.pdf"]


def test_long_orders_span_pages(purchaser, invoice_dir):
    items = [_item(f"Chrome implant #{i}", 1, 1000) for i in range(120)]
    order = SimpleNamespace(
        id="b" * 32, status="paid", created_at=datetime(2026, 1, 15),
        total_cents=120000, items=items, item_count=120, unit_count=120,
    )

    renderer.render_invoice(order, purchaser)

    assert renderer.invoice_exists(order.id)


def test_failed_render_leaves_no_file(order, purchaser, invoice_dir, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(renderer, "_draw", explode)

    with pytest.raises(RuntimeError):
        renderer.render_invoice(order, purchaser)

    assert not renderer.invoice_exists(order.id)
    assert os.listdir(invoice_dir) == []


def test_missing_invoice_does_not_exist(invoice_dir):
    assert not renderer.invoice_exists("c" * 32)
    assert renderer.invoice_path("c" * 32).endswith("invoice-" + "c" * 32 + ".pdf")
