"""Post-decision side effects of refund arbitration.

Each step runs after the decision has committed and fails on its own:

* approval deletes the order paid for by the refunded payment, which also
  reverses that order's loyalty effect; a missing order is fine, any other
  failure is logged with the request id for manual reconciliation;
* every decision is emailed to the customer with a refund notice attached.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification.documents import refund_notice
from storefront.notification.helpers import notify_customer
from storefront.notification.notification import NotificationType
from storefront.order.deletion import DeleteOrder
from storefront.order.order import Order
from storefront.refund.events import RefundApproved, RefundRejected
from storefront.refund.refund_request import RefundRequest
from storefront.utils.locking import customer_key, run_exclusive

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=RefundRequest)
class RefundOrderCleanupHandler:
    @handle(RefundApproved)
    def delete_refunded_order(self, event: RefundApproved) -> None:
        try:
            order = current_domain.repository_for(Order).by_payment_reference(event.payment_id)
            if order is None:
                logger.info(
                    "No order linked to refunded payment",
                    refund_request_id=str(event.refund_request_id),
                    payment_id=str(event.payment_id),
                )
                return

            run_exclusive(
                customer_key(order.customer_id),
                DeleteOrder(order_id=order.id, reason=f"Refund {event.refund_request_id} approved"),
            )
        except Exception:
            logger.exception(
                "Failed to delete order after refund approval, needs reconciliation",
                refund_request_id=str(event.refund_request_id),
                payment_id=str(event.payment_id),
            )


@storefront.event_handler(part_of=RefundRequest)
class RefundDecisionNotifier:
    def _notify(self, event, notification_type, approved):
        try:
            document = refund_notice(
                refund_request_id=event.refund_request_id,
                payment_id=event.payment_id,
                customer_name="",
                amount=event.amount or 0.0,
                currency=event.currency or "usd",
                issued_at=event.decided_at,
                approved=approved,
                note=event.admin_response,
            )
            notify_customer(
                customer_id=str(event.customer_id),
                notification_type=notification_type,
                context={
                    "refund_request_id": str(event.refund_request_id),
                    "payment_id": str(event.payment_id),
                    "amount": f"{event.amount or 0.0:.2f}",
                    "currency": event.currency or "usd",
                    "admin_response": event.admin_response,
                    "notice_number": document.number,
                },
                document=document,
                source_id=str(event.refund_request_id),
            )
        except Exception:
            logger.exception(
                "Failed to notify customer about refund decision",
                refund_request_id=str(event.refund_request_id),
            )

    @handle(RefundApproved)
    def on_refund_approved(self, event: RefundApproved) -> None:
        self._notify(event, NotificationType.REFUND_APPROVED.value, approved=True)

    @handle(RefundRejected)
    def on_refund_rejected(self, event: RefundRejected) -> None:
        self._notify(event, NotificationType.REFUND_REJECTED.value, approved=False)
