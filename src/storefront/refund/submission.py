"""Refund requests and their listings."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import ConflictError
from storefront.payment.payment import Payment
from storefront.refund.refund_request import RefundRequest
from storefront.utils.clock import as_utc
from storefront.utils.locking import refund_claim_key, run_exclusive


@storefront.command(part_of="RefundRequest")
class RequestRefund:
    """Ask for a captured payment to be refunded."""

    customer_id: Identifier(required=True)
    payment_id: Identifier(required=True)
    reason: Text(required=True)


@storefront.command_handler(part_of=RefundRequest)
class RequestRefundHandler:
    @handle(RequestRefund)
    def request_refund(self, command):
        payment = current_domain.repository_for(Payment).get(command.payment_id)
        if str(payment.customer_id) != str(command.customer_id):
            raise ObjectNotFoundError(f"Payment with id {command.payment_id} does not exist")

        repo = current_domain.repository_for(RefundRequest)
        if repo.for_customer_and_payment(command.customer_id, command.payment_id) is not None:
            raise ConflictError({"payment_id": ["Refund request already exists for this payment"]})

        if not payment.succeeded:
            raise ValidationError({"payment_id": [f"Payment is {payment.status} and cannot be refunded"]})

        request = RefundRequest.open(
            customer_id=command.customer_id,
            payment_id=command.payment_id,
            reason=command.reason,
            payment_amount=payment.amount,
            currency=payment.currency,
        )
        repo.add(request)
        return str(request.id)


def request_refund(command: RequestRefund) -> str:
    """Open a refund request while holding the (customer, payment) claim lock.

    The duplicate check and the insert happen under one lock, so two
    concurrent requests for the same payment cannot both succeed.
    """
    return run_exclusive(
        refund_claim_key(command.customer_id, command.payment_id),
        command,
        retry_on_conflict=False,
    )


def _newest_first(requests):
    return sorted(requests, key=lambda r: as_utc(r.created_at), reverse=True)


def get_refund_request(refund_request_id) -> RefundRequest:
    return current_domain.repository_for(RefundRequest).get(refund_request_id)


def refunds_for_customer(customer_id) -> list[RefundRequest]:
    return _newest_first(current_domain.repository_for(RefundRequest).for_customer(customer_id))


def all_refunds() -> list[RefundRequest]:
    return _newest_first(current_domain.repository_for(RefundRequest).everything())
