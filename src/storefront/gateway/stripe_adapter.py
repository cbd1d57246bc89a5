"""Stripe payment gateway adapter.

Talks to Stripe through the stripe-python SDK: customers and stored payment
methods for card management, PaymentIntents (confirmed off-session) for
charges, and Refunds against a PaymentIntent.

Network retries are disabled and every request is bounded by ``timeout``. A
connection failure or timeout is reported as ``PaymentIndeterminate`` because
Stripe may or may not have processed the request; the idempotency key makes a
manual retry safe.
"""

import stripe
import structlog

from storefront.exceptions import GatewayError, PaymentIndeterminate
from storefront.gateway.port import CardDetails, ChargeResult, PaymentGateway, RefundResult

logger = structlog.get_logger(__name__)


def _to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def _card_details(payment_method) -> CardDetails:
    card = payment_method.card
    return CardDetails(
        gateway_method_id=payment_method.id,
        brand=card.brand,
        last4=card.last4,
        exp_month=card.exp_month,
        exp_year=card.exp_year,
    )


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str, timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.timeout = timeout
        stripe.max_network_retries = 0
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    def _call(self, operation: str, fn, *args, idempotency_key: str | None = None, **kwargs):
        if idempotency_key is not None:
            kwargs["idempotency_key"] = idempotency_key
        try:
            return fn(*args, api_key=self.api_key, **kwargs)
        except stripe.APIConnectionError as exc:
            logger.error(
                "Stripe request outcome unknown",
                operation=operation,
                idempotency_key=idempotency_key,
                error=str(exc),
            )
            raise PaymentIndeterminate(str(exc), idempotency_key=idempotency_key) from exc
        except stripe.StripeError as exc:
            logger.warning("Stripe request failed", operation=operation, error=str(exc), code=exc.code)
            raise GatewayError(exc.user_message or str(exc), code=exc.code) from exc

    def create_customer(self, email: str, name: str) -> str:
        customer = self._call("create_customer", stripe.Customer.create, email=email, name=name)
        return customer.id

    def attach_method(self, gateway_customer_id: str, gateway_method_id: str) -> CardDetails:
        self._call(
            "attach_method",
            stripe.PaymentMethod.attach,
            gateway_method_id,
            customer=gateway_customer_id,
        )
        self._call(
            "set_default_method",
            stripe.Customer.modify,
            gateway_customer_id,
            invoice_settings={"default_payment_method": gateway_method_id},
        )
        return self.retrieve_method(gateway_method_id)

    def retrieve_method(self, gateway_method_id: str) -> CardDetails:
        payment_method = self._call("retrieve_method", stripe.PaymentMethod.retrieve, gateway_method_id)
        return _card_details(payment_method)

    def detach_method(self, gateway_method_id: str) -> None:
        self._call("detach_method", stripe.PaymentMethod.detach, gateway_method_id)

    def create_charge(
        self,
        amount: float,
        currency: str,
        gateway_customer_id: str,
        gateway_method_id: str,
        idempotency_key: str,
    ) -> ChargeResult:
        try:
            intent = self._call(
                "create_charge",
                stripe.PaymentIntent.create,
                idempotency_key=idempotency_key,
                amount=_to_minor_units(amount),
                currency=currency,
                customer=gateway_customer_id,
                payment_method=gateway_method_id,
                off_session=True,
                confirm=True,
            )
        except GatewayError as exc:
            if exc.code in ("card_declined", "authentication_required", "expired_card"):
                return ChargeResult(success=False, gateway_status="failed", failure_reason=exc.message)
            raise

        return ChargeResult(
            success=True,
            gateway_transaction_id=intent.id,
            gateway_status=intent.status,
        )

    def create_refund(
        self,
        gateway_transaction_id: str,
        amount: float,
        idempotency_key: str,
    ) -> RefundResult:
        refund = self._call(
            "create_refund",
            stripe.Refund.create,
            idempotency_key=idempotency_key,
            payment_intent=gateway_transaction_id,
            amount=_to_minor_units(amount),
        )
        if refund.status == "failed":
            return RefundResult(
                success=False,
                gateway_refund_id=refund.id,
                gateway_status=refund.status,
                failure_reason=refund.failure_reason,
            )
        return RefundResult(success=True, gateway_refund_id=refund.id, gateway_status=refund.status)
