"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement so that
FakeGateway (dev/test) and StripeGateway (production) are interchangeable
without touching domain or application code.

Adapters return result objects for business outcomes (a declined card is a
``ChargeResult`` with ``success=False``) and raise for transport problems:
``GatewayError`` when the provider errored, ``PaymentIndeterminate`` when it
did not answer within the configured timeout.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CardDetails:
    """Masked card metadata reported by the gateway for a stored method."""

    gateway_method_id: str
    brand: str
    last4: str
    exp_month: int
    exp_year: int


@dataclass(frozen=True)
class ChargeResult:
    """Result of an off-session charge attempt."""

    success: bool
    gateway_transaction_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    gateway_refund_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_customer(self, email: str, name: str) -> str:
        """Create a gateway-side customer record and return its id."""
        ...

    @abstractmethod
    def attach_method(self, gateway_customer_id: str, gateway_method_id: str) -> CardDetails:
        """Attach a payment method to a customer and make it the default."""
        ...

    @abstractmethod
    def retrieve_method(self, gateway_method_id: str) -> CardDetails:
        """Fetch masked card metadata for a payment method."""
        ...

    @abstractmethod
    def detach_method(self, gateway_method_id: str) -> None:
        """Detach a payment method from its customer."""
        ...

    @abstractmethod
    def create_charge(
        self,
        amount: float,
        currency: str,
        gateway_customer_id: str,
        gateway_method_id: str,
        idempotency_key: str,
    ) -> ChargeResult:
        """Create and confirm an off-session charge."""
        ...

    @abstractmethod
    def create_refund(
        self,
        gateway_transaction_id: str,
        amount: float,
        idempotency_key: str,
    ) -> RefundResult:
        """Refund a previous charge in full."""
        ...
