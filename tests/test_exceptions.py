"""Error kinds and their HTTP mapping."""
from common.exceptions import (
    ErrorKind, EmptyCartError, InvoiceRenderError, NotFoundError, UpstreamError, field_error,
)


def test_every_kind_has_a_status():
    assert {kind: kind.status_code for kind in ErrorKind} == {
        ErrorKind.VALIDATION: 400,
        ErrorKind.UNAUTHORIZED: 401,
        ErrorKind.FORBIDDEN: 403,
        ErrorKind.NOT_FOUND: 404,
        ErrorKind.CONFLICT: 409,
        ErrorKind.UPSTREAM_FAILURE: 500,
        ErrorKind.INTERNAL: 500,
    }


def test_empty_cart_is_a_validation_error():
    exc = EmptyCartError()
    assert exc.status_code == 400
    assert exc.to_dict() == {"message": "Tu carrito está vacío.", "kind": "validation"}


def test_render_error_carries_retry_details():
    body = InvoiceRenderError(extra={"orderId": "abc", "retryable": True}).to_dict()
    assert body["kind"] == "internal"
    assert body["orderId"] == "abc"
    assert body["retryable"] is True


def test_field_errors_are_included():
    body = NotFoundError("x", errors=[field_error("id", "missing")]).to_dict()
    assert body["errors"] == [{"field": "id", "message": "missing"}]


def test_upstream_default_message():
    assert UpstreamError().status_code == 500
