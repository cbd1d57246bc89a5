"""Configurable fake payment gateway for development and testing.

Simulates a real payment gateway without any external calls. It can be
configured at runtime to decline, to time out, or to answer with a
non-terminal intent status, which makes every branch of the payment and
refund flows reachable from tests.
"""

from uuid import uuid4

from storefront.exceptions import GatewayError, PaymentIndeterminate
from storefront.gateway.port import CardDetails, ChargeResult, PaymentGateway, RefundResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.timeout: bool = False
        self.charge_status: str = "succeeded"
        self.detach_fails: bool = False
        self.calls: list[dict] = []
        self._cards: dict[str, CardDetails] = {}
        self._attached: dict[str, str] = {}

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Card declined",
        timeout: bool = False,
        charge_status: str = "succeeded",
        detach_fails: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.timeout = timeout
        self.charge_status = charge_status
        self.detach_fails = detach_fails

    def register_card(
        self,
        gateway_method_id: str,
        brand: str = "visa",
        last4: str = "4242",
        exp_month: int = 12,
        exp_year: int = 2030,
    ) -> CardDetails:
        """Pre-register card metadata returned for ``gateway_method_id``."""
        card = CardDetails(gateway_method_id, brand, last4, exp_month, exp_year)
        self._cards[gateway_method_id] = card
        return card

    def _card(self, gateway_method_id: str) -> CardDetails:
        if gateway_method_id not in self._cards:
            self.register_card(gateway_method_id)
        return self._cards[gateway_method_id]

    def create_customer(self, email: str, name: str) -> str:
        self.calls.append({"method": "create_customer", "email": email, "name": name})
        return f"fake_cus_{uuid4().hex[:12]}"

    def attach_method(self, gateway_customer_id: str, gateway_method_id: str) -> CardDetails:
        self.calls.append(
            {
                "method": "attach_method",
                "gateway_customer_id": gateway_customer_id,
                "gateway_method_id": gateway_method_id,
            }
        )
        if not self.should_succeed:
            raise GatewayError(self.failure_reason, code="card_error")
        self._attached[gateway_method_id] = gateway_customer_id
        return self._card(gateway_method_id)

    def retrieve_method(self, gateway_method_id: str) -> CardDetails:
        self.calls.append({"method": "retrieve_method", "gateway_method_id": gateway_method_id})
        return self._card(gateway_method_id)

    def detach_method(self, gateway_method_id: str) -> None:
        self.calls.append({"method": "detach_method", "gateway_method_id": gateway_method_id})
        if self.detach_fails:
            raise GatewayError("No such PaymentMethod is attached", code="resource_missing")
        self._attached.pop(gateway_method_id, None)

    def create_charge(
        self,
        amount: float,
        currency: str,
        gateway_customer_id: str,
        gateway_method_id: str,
        idempotency_key: str,
    ) -> ChargeResult:
        self.calls.append(
            {
                "method": "create_charge",
                "amount": amount,
                "currency": currency,
                "gateway_customer_id": gateway_customer_id,
                "gateway_method_id": gateway_method_id,
                "idempotency_key": idempotency_key,
            }
        )

        if self.timeout:
            raise PaymentIndeterminate("Gateway timed out", idempotency_key=idempotency_key)
        if self.should_succeed:
            return ChargeResult(
                success=True,
                gateway_transaction_id=f"fake_pi_{uuid4().hex[:12]}",
                gateway_status=self.charge_status,
            )
        return ChargeResult(
            success=False,
            gateway_status="failed",
            failure_reason=self.failure_reason,
        )

    def create_refund(
        self,
        gateway_transaction_id: str,
        amount: float,
        idempotency_key: str,
    ) -> RefundResult:
        self.calls.append(
            {
                "method": "create_refund",
                "gateway_transaction_id": gateway_transaction_id,
                "amount": amount,
                "idempotency_key": idempotency_key,
            }
        )

        if self.timeout:
            raise PaymentIndeterminate("Gateway timed out", idempotency_key=idempotency_key)
        if self.should_succeed:
            return RefundResult(
                success=True,
                gateway_refund_id=f"fake_re_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return RefundResult(
            success=False,
            gateway_status="failed",
            failure_reason=self.failure_reason,
        )
