"""Error taxonomy for the storefront domain.

Validation-style failures extend Protean's ``ValidationError`` so that they
carry the usual ``{field: [messages]}`` payload and can be surfaced by the
API layer with a more specific status code. Missing records are reported with
Protean's ``ObjectNotFoundError`` directly.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class ConflictError(ValidationError):
    """A uniqueness rule would be violated (duplicate refund request, duplicate card)."""


class InvalidStateError(ValidationError):
    """The target record is not in a state that allows the requested transition."""


class InsufficientPointsError(ValidationError):
    """A customer tried to redeem more loyalty points than they hold."""


class GatewayError(Exception):
    """The payment provider rejected or failed the request."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class PaymentIndeterminate(GatewayError):
    """The payment provider did not answer in time; the outcome is unknown.

    Never retried automatically. ``idempotency_key`` identifies the attempt
    for manual reconciliation against the provider's dashboard.
    """

    def __init__(self, message: str, idempotency_key: str | None = None):
        super().__init__(message, code="indeterminate")
        self.idempotency_key = idempotency_key


__all__ = [
    "ConflictError",
    "GatewayError",
    "InsufficientPointsError",
    "InvalidStateError",
    "ObjectNotFoundError",
    "PaymentIndeterminate",
    "ValidationError",
]
