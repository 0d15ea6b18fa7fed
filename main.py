"""
Neon Market - Application Entry Point
=======================================
FastAPI app initialization, middleware, and router registration.
"""

import logging
import time as _time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import settings
from config.database import Base, engine
from common.exceptions import StorefrontError, ErrorKind, field_error

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("neonmarket.app")
request_logger = logging.getLogger("neonmarket.request")


# ==========================================
# Import ALL models so Base can see them
# ==========================================
from modules.user.models import User  # noqa: F401,E402
from modules.catalog.models import Product  # noqa: F401,E402
from modules.cart.models import Cart, CartItem  # noqa: F401,E402
from modules.order.models import Order, OrderItem  # noqa: F401,E402
from modules.invoice.models import Invoice  # noqa: F401,E402

# ==========================================
# Import routers
# ==========================================
from modules.auth.routes import router as auth_router  # noqa: E402
from modules.catalog.routes import router as catalog_router  # noqa: E402
from modules.cart.routes import router as cart_router  # noqa: E402
from modules.order.routes import router as order_router  # noqa: E402
from modules.invoice.routes import router as invoice_router  # noqa: E402
from modules.delivery.channels import build_channels  # noqa: E402
from modules.invoice.renderer import ensure_invoice_dir  # noqa: E402


@asynccontextmanager
async def lifespan(app):
    # Auto-create any missing tables (safe for existing tables)
    Base.metadata.create_all(bind=engine)

    # Channel clients are built once per process and injected into routes
    app.state.channels = build_channels()
    logger.info(f"Delivery channels ready: {', '.join(app.state.channels.names())}")
    yield
    app.state.channels.close()


# ==========================================
# Create App
# ==========================================
app = FastAPI(
    title="Neon Market",
    description="Storefront API: catalog, cart, checkout and invoice delivery",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
    lifespan=lifespan,
)

# ==========================================
# Static Files: rendered invoices
# ==========================================
# No auth: the unguessable order id in the file name is the bearer
app.mount("/invoices", StaticFiles(directory=ensure_invoice_dir()), name="invoices")


# ==========================================
# Exception handlers
# ==========================================
async def storefront_exception_handler(request: Request, exc: StorefrontError):
    if exc.kind in (ErrorKind.UPSTREAM_FAILURE, ErrorKind.INTERNAL):
        logger.error(f"{request.method} {request.url.path} -> {exc.kind.value}: {exc.message}")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append(field_error(".".join(loc) or "body", err.get("msg", "")))
    return JSONResponse(
        {"message": "Datos inválidos.", "kind": ErrorKind.VALIDATION.value, "errors": errors},
        status_code=400,
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        {"message": "Ocurrió un error inesperado.", "kind": ErrorKind.INTERNAL.value},
        status_code=500,
    )


app.add_exception_handler(StorefrontError, storefront_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


# ==========================================
# Middleware: Request Log
# ==========================================
_SKIP_PATHS = ("/invoices/", "/health", "/favicon.ico")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and timing for every API request."""
    path = request.url.path
    if any(path.startswith(p) for p in _SKIP_PATHS):
        return await call_next(request)

    start = _time.time()
    response = await call_next(request)
    elapsed_ms = int((_time.time() - start) * 1000)
    request_logger.info(f"{request.method} {path} {response.status_code} {elapsed_ms}ms")
    return response


# ==========================================
# Register Routers
# ==========================================
app.include_router(auth_router)
app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(invoice_router)


# ==========================================
# Health check
# ==========================================
@app.get("/health")
async def health():
    return {"status": "ok", "version": "1.0.0"}
