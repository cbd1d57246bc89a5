"""Template registry: maps NotificationType to template classes."""

from storefront.notification.notification import NotificationType
from storefront.notification.templates.payment_receipt import PaymentReceiptTemplate
from storefront.notification.templates.refund_decision import RefundApprovedTemplate, RefundRejectedTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.PAYMENT_RECEIPT.value: PaymentReceiptTemplate,
    NotificationType.REFUND_APPROVED.value: RefundApprovedTemplate,
    NotificationType.REFUND_REJECTED.value: RefundRejectedTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
