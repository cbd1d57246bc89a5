"""Payment receipt template: sent when a charge for an order succeeds."""

from storefront.notification.notification import NotificationType


class PaymentReceiptTemplate:
    notification_type = NotificationType.PAYMENT_RECEIPT.value

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("customer_name", "there")
        amount = context.get("amount", "0.00")
        currency = str(context.get("currency", "usd")).upper()
        invoice_number = context.get("invoice_number", "N/A")
        return {
            "subject": f"Your invoice {invoice_number}",
            "body": (
                f"Hi {name},\n\n"
                f"We received your payment of {currency} {amount}. "
                f"Invoice {invoice_number} is attached to this email.\n\n"
                "Thank you for shopping with us!"
            ),
        }
