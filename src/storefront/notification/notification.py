"""Notification aggregate: one customer email with an optional document.

Notifications are created by post-commit event handlers and dispatched right
away. Delivery problems are recorded here (``Failed`` with a reason) and never
travel back to the operation that triggered the notification.

State Machine:
    PENDING → SENT
    PENDING → FAILED
"""

from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront
from storefront.notification.events import NotificationCreated, NotificationFailed, NotificationSent
from storefront.utils.clock import utcnow


class NotificationType(Enum):
    PAYMENT_RECEIPT = "PaymentReceipt"
    REFUND_APPROVED = "RefundApproved"
    REFUND_REJECTED = "RefundRejected"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


_VALID_TRANSITIONS = {
    NotificationStatus.PENDING: {NotificationStatus.SENT, NotificationStatus.FAILED},
    NotificationStatus.SENT: set(),
    NotificationStatus.FAILED: set(),
}


@storefront.aggregate
class Notification:
    """A message to a customer about a payment or refund decision."""

    recipient_id: Identifier(required=True)
    recipient_email: String(required=True, max_length=254)
    notification_type: String(choices=NotificationType, required=True)
    subject: String(max_length=500)
    body: Text(required=True)
    template_name: String(max_length=200)
    source_id: String(max_length=200)
    context_data: Text()  # JSON: template context plus the document model, if any
    attachment_name: String(max_length=255)
    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)
    failure_reason: String(max_length=500)
    sent_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(
        cls,
        recipient_id,
        recipient_email,
        notification_type,
        body,
        subject=None,
        template_name=None,
        source_id=None,
        context_data=None,
    ):
        now = utcnow()
        notification = cls(
            recipient_id=recipient_id,
            recipient_email=recipient_email,
            notification_type=notification_type,
            subject=subject,
            body=body,
            template_name=template_name,
            source_id=source_id,
            context_data=context_data,
            status=NotificationStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                notification_type=notification_type,
                subject=subject,
                source_id=source_id,
                created_at=now,
            )
        )
        return notification

    def _assert_can_transition(self, target_status):
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_sent(self, attachment_name=None):
        self._assert_can_transition(NotificationStatus.SENT)

        now = utcnow()
        self.status = NotificationStatus.SENT.value
        self.attachment_name = attachment_name
        self.sent_at = now
        self.updated_at = now
        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                sent_at=now,
            )
        )

    def mark_failed(self, reason):
        self._assert_can_transition(NotificationStatus.FAILED)

        now = utcnow()
        self.status = NotificationStatus.FAILED.value
        self.failure_reason = (reason or "Unknown dispatch error")[:500]
        self.updated_at = now
        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                reason=self.failure_reason,
                failed_at=now,
            )
        )
