"""Refund decision templates: sent when an administrator decides a refund request."""

from storefront.notification.notification import NotificationType


class RefundApprovedTemplate:
    notification_type = NotificationType.REFUND_APPROVED.value

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        amount = context.get("amount", "0.00")
        currency = str(context.get("currency", "usd")).upper()
        note = context.get("admin_response") or "Approved"
        return {
            "subject": "Your refund request was approved",
            "body": (
                f"Hi {name},\n\n"
                f"Your refund of {currency} {amount} has been approved and sent back to "
                "your original payment method. It should appear within 5-10 business days.\n\n"
                f"Note from our team: {note}"
            ),
        }


class RefundRejectedTemplate:
    notification_type = NotificationType.REFUND_REJECTED.value

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        note = context.get("admin_response") or "Rejected"
        return {
            "subject": "Your refund request was rejected",
            "body": (
                f"Hi {name},\n\n"
                "After reviewing your refund request we are unable to approve it.\n\n"
                f"Reason: {note}\n\n"
                "Reply to this email if you would like us to take another look."
            ),
        }
