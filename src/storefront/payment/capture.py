"""Payment capture: charging a stored payment method.

The gateway is called before anything is written. A declined or failed
charge raises ``GatewayError`` and leaves no Payment behind. A timeout raises
``PaymentIndeterminate``; the charge is never retried automatically and the
idempotency key is logged so the attempt can be reconciled by hand.
"""

from uuid import uuid4

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import GatewayError, PaymentIndeterminate
from storefront.gateway import get_gateway
from storefront.payment.methods import owned_method
from storefront.payment.payment import Payment
from storefront.utils.clock import as_utc
from storefront.utils.logging import reconciliation_context
from storefront.utils.settings import setting

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Payment")
class ChargePayment:
    """Charge a stored payment method off-session and record the payment."""

    customer_id: Identifier(required=True)
    payment_method_id: Identifier(required=True)
    amount: Float(required=True, min_value=0.01)
    order_context: Text()
    idempotency_key: String(max_length=255)


@storefront.command_handler(part_of=Payment)
class ChargePaymentHandler:
    @handle(ChargePayment)
    def charge(self, command):
        method = owned_method(command.payment_method_id, command.customer_id)
        idempotency_key = command.idempotency_key or f"charge-{uuid4().hex}"
        currency = setting("CURRENCY")

        with reconciliation_context(idempotency_key=idempotency_key, payment_method_id=method.id):
            try:
                result = get_gateway().create_charge(
                    amount=command.amount,
                    currency=currency,
                    gateway_customer_id=method.gateway_customer_id,
                    gateway_method_id=method.gateway_method_id,
                    idempotency_key=idempotency_key,
                )
            except PaymentIndeterminate:
                logger.error(
                    "Charge outcome unknown, needs reconciliation",
                    customer_id=str(command.customer_id),
                    amount=command.amount,
                )
                raise

        if not result.success:
            logger.warning(
                "Charge declined",
                customer_id=str(command.customer_id),
                amount=command.amount,
                reason=result.failure_reason,
            )
            raise GatewayError(result.failure_reason or "Charge failed", code=result.gateway_status)

        payment = Payment.capture(
            customer_id=command.customer_id,
            payment_method_id=method.id,
            amount=command.amount,
            currency=currency,
            gateway_transaction_id=result.gateway_transaction_id,
            status=result.gateway_status,
            idempotency_key=idempotency_key,
            order_context=command.order_context,
        )
        current_domain.repository_for(Payment).add(payment)

        logger.info(
            "Payment captured",
            payment_id=str(payment.id),
            customer_id=str(command.customer_id),
            amount=payment.amount,
            status=payment.status,
        )
        return str(payment.id)


def get_payment(payment_id) -> Payment:
    return current_domain.repository_for(Payment).get(payment_id)


def payments_for_customer(customer_id) -> list[Payment]:
    repo = current_domain.repository_for(Payment)
    payments = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    return sorted(payments, key=lambda p: as_utc(p.created_at), reverse=True)
