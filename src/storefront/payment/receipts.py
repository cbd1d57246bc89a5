"""Payment receipts: invoice email after a successful charge.

Runs after the Payment has committed. Only charges that succeeded and carry
an order context get an invoice. Any failure is logged and swallowed; the
recorded payment is never affected.
"""

import json

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification.documents import invoice_for_payment
from storefront.notification.helpers import notify_customer
from storefront.notification.notification import NotificationType
from storefront.payment.events import PaymentCaptured
from storefront.payment.payment import SUCCEEDED, Payment

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Payment)
class PaymentReceiptHandler:
    @handle(PaymentCaptured)
    def send_receipt(self, event: PaymentCaptured) -> None:
        if event.status != SUCCEEDED or not event.order_context:
            return

        try:
            order = json.loads(event.order_context)
            document = invoice_for_payment(
                payment_id=event.payment_id,
                customer_name=order.get("customer_name"),
                amount=event.amount,
                currency=event.currency,
                issued_at=event.captured_at,
                order=order,
            )
            notify_customer(
                customer_id=str(event.customer_id),
                notification_type=NotificationType.PAYMENT_RECEIPT.value,
                context={
                    "payment_id": str(event.payment_id),
                    "amount": f"{event.amount:.2f}",
                    "currency": event.currency,
                    "invoice_number": document.number,
                },
                document=document,
                source_id=str(event.payment_id),
            )
        except Exception:
            logger.exception("Failed to send payment receipt", payment_id=str(event.payment_id))
