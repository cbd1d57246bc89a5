"""Refund arbitration: an administrator approves or rejects a request.

Approval calls the gateway first. If the gateway fails or times out the
request stays pending and the error surfaces to the administrator, who may
retry; the refund idempotency key is derived from the request id, so a retry
cannot refund twice. Once the gateway has refunded, the approval is committed
and never rolled back: deleting the linked order and notifying the customer
happen afterwards in event handlers.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import GatewayError, PaymentIndeterminate
from storefront.gateway import get_gateway
from storefront.payment.payment import Payment
from storefront.refund.refund_request import RefundAction, RefundRequest
from storefront.utils.locking import run_exclusive
from storefront.utils.logging import reconciliation_context

logger = structlog.get_logger(__name__)


@storefront.command(part_of="RefundRequest")
class DecideRefund:
    """Approve or reject a pending refund request."""

    refund_request_id: Identifier(required=True)
    action: String(required=True, max_length=10)
    admin_note: Text()


def _parse_action(value) -> RefundAction:
    try:
        return RefundAction(str(value).lower())
    except ValueError:
        raise ValidationError({"action": ["Invalid action, expected 'approve' or 'reject'"]}) from None


@storefront.command_handler(part_of=RefundRequest)
class DecideRefundHandler:
    @handle(DecideRefund)
    def decide(self, command):
        repo = current_domain.repository_for(RefundRequest)
        request = repo.get(command.refund_request_id)
        action = _parse_action(command.action)
        request.assert_pending()

        if action == RefundAction.REJECT:
            request.reject(command.admin_note)
            repo.add(request)
            logger.info("Refund rejected", refund_request_id=str(request.id), payment_id=str(request.payment_id))
            return request.status

        payment = current_domain.repository_for(Payment).get(request.payment_id)
        idempotency_key = f"refund-{request.id}"
        with reconciliation_context(idempotency_key=idempotency_key, refund_request_id=request.id):
            try:
                result = get_gateway().create_refund(
                    gateway_transaction_id=payment.gateway_transaction_id,
                    amount=request.payment_amount,
                    idempotency_key=idempotency_key,
                )
            except PaymentIndeterminate:
                logger.error("Refund outcome unknown, request left pending for reconciliation")
                raise

        if not result.success:
            logger.warning(
                "Gateway refused refund, request left pending",
                refund_request_id=str(request.id),
                reason=result.failure_reason,
            )
            raise GatewayError(result.failure_reason or "Refund failed", code=result.gateway_status)

        request.approve(result.gateway_refund_id, command.admin_note)
        repo.add(request)
        logger.info(
            "Refund approved",
            refund_request_id=str(request.id),
            payment_id=str(request.payment_id),
            amount=request.payment_amount,
            gateway_refund_id=result.gateway_refund_id,
        )
        return request.status


def decide_refund(refund_request_id, action, admin_note=None):
    """Decide a request while holding its lock, so it cannot be decided twice at once."""
    return run_exclusive(
        f"refund:{refund_request_id}",
        DecideRefund(refund_request_id=refund_request_id, action=action, admin_note=admin_note),
        retry_on_conflict=False,
    )
