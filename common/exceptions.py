"""
Neon Market - Custom Exceptions
================================
Business-level exceptions tagged with a closed ErrorKind.
main.py converts every StorefrontError into a JSON response.
"""

import enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM_FAILURE = "upstream_failure"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self]


ERROR_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UPSTREAM_FAILURE: 500,
    ErrorKind.INTERNAL: 500,
}


class StorefrontError(Exception):
    """Base exception for all business logic errors."""
    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "Ocurrió un error inesperado."

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors or []
        self.extra = extra or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> Dict[str, Any]:
        body = {"message": self.message, "kind": self.kind.value}
        if self.errors:
            body["errors"] = self.errors
        body.update(self.extra)
        return body


class ValidationError(StorefrontError):
    """Malformed or missing input."""
    kind = ErrorKind.VALIDATION
    default_message = "Datos inválidos."


class EmptyCartError(ValidationError):
    """Checkout attempted on a cart without items."""
    default_message = "Tu carrito está vacío."


class AuthenticationError(StorefrontError):
    """Raised when there is no authenticated session."""
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Debes iniciar sesión para acceder a esta función."


class AuthorizationError(StorefrontError):
    """Raised when user lacks permission."""
    kind = ErrorKind.FORBIDDEN
    default_message = "No tienes permisos suficientes."


class NotFoundError(StorefrontError):
    """Raised when a requested resource doesn't exist or isn't owned by the caller."""
    kind = ErrorKind.NOT_FOUND
    default_message = "Recurso no encontrado."


class DuplicateError(StorefrontError):
    """Raised for unique constraint violations at the business level."""
    kind = ErrorKind.CONFLICT
    default_message = "El recurso ya existe."


class UpstreamError(StorefrontError):
    """Raised when an external delivery provider fails."""
    kind = ErrorKind.UPSTREAM_FAILURE
    default_message = "No se pudo enviar la factura. Intenta de nuevo más tarde."


class InternalError(StorefrontError):
    """Unexpected failure (database, filesystem)."""
    kind = ErrorKind.INTERNAL


class InvoiceRenderError(InternalError):
    """The order exists but its PDF could not be rendered; share retries the render."""
    default_message = "Tu compra se registró, pero no pudimos generar la factura. Intenta compartirla de nuevo."


def field_error(field: str, message: str) -> Dict[str, str]:
    """Field-level detail entry for ValidationError.errors."""
    return {"field": field, "message": message}
