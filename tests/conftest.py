"""Shared pytest fixtures: temp SQLite database, app client and fake delivery channels."""
import os
import shutil
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="neonmarket-tests-")

# Settings are read at import time; configure the environment first
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789abcdef-0123456789"
os.environ["INVOICE_DIR"] = os.path.join(_TMP_DIR, "invoices")
os.environ["APP_URL"] = "http://testserver"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
for _key in ("SMTP_HOST", "MAIL_FROM", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN",
             "TWILIO_WHATSAPP_FROM", "TELEGRAM_BOT_TOKEN"):
    os.environ[_key] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import main  # noqa: E402
from config import settings  # noqa: E402
from config.database import Base, engine, SessionLocal  # noqa: E402
from common.exceptions import DuplicateError  # noqa: E402
from modules.auth.service import auth_service  # noqa: E402
from modules.catalog.models import Product  # noqa: E402
from modules.delivery.channels import (  # noqa: E402
    BaseChannel, ChannelRegistry, DeliveryResult,
)
from modules.delivery.deps import get_channels  # noqa: E402

PASSWORD = "neon-password-123"


class FakeChannel(BaseChannel):
    """Records every request; fails with `fail_with` when set."""

    def __init__(self, name: str, label: str = None):
        self.name = name
        self.label = label or name
        self.sent = []
        self.fail_with = None

    @property
    def is_configured(self) -> bool:
        return True

    def send(self, req):
        self.sent.append(req)
        if self.fail_with is not None:
            return DeliveryResult.failed(self.fail_with, "fake provider error")
        return DeliveryResult.sent()


@pytest.fixture()
def channels():
    return ChannelRegistry([
        FakeChannel("email", "correo"),
        FakeChannel("whatsapp", "WhatsApp"),
        FakeChannel("telegram", "Telegram"),
    ])


@pytest.fixture()
def client(channels):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    shutil.rmtree(settings.INVOICE_DIR, ignore_errors=True)
    os.makedirs(settings.INVOICE_DIR, exist_ok=True)

    main.app.dependency_overrides[get_channels] = lambda: channels
    try:
        with TestClient(main.app) as c:
            yield c
    finally:
        main.app.dependency_overrides.clear()


@pytest.fixture()
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_product(db):
    def _make(name="Neon Katana", price_cents=10000, tags=None, description=None):
        product = Product(
            name=name,
            description=description,
            price_cents=price_cents,
            tags=tags or [],
        )
        db.add(product)
        db.commit()
        return product.id
    return _make


@pytest.fixture()
def login(client, db):
    """Register (if needed) and log in; the TestClient keeps the auth cookie."""
    def _login(email="rider@neon.mx", name="Night Rider", role=None):
        try:
            auth_service.register(db, email, PASSWORD, name, role=role)
            db.commit()
        except DuplicateError:
            db.rollback()
        resp = client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert resp.status_code == 200, resp.text
        return resp.json()["user"]
    return _login
