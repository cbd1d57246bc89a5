"""Domain events for payments and stored payment methods."""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="PaymentMethod")
class PaymentMethodAdded:
    """A card was attached to the customer's gateway record."""

    __version__ = 1

    payment_method_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    brand: String()
    last4: String()


@storefront.event(part_of="PaymentMethod")
class PaymentMethodUpdated:
    """A stored card was swapped for another gateway payment method."""

    __version__ = 1

    payment_method_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    previous_gateway_method_id: String()
    brand: String()
    last4: String()


@storefront.event(part_of="Payment")
class PaymentCaptured:
    """The gateway accepted a charge and a Payment was recorded."""

    __version__ = 1

    payment_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    amount: Float(required=True)
    currency: String(required=True)
    gateway_transaction_id: String(required=True)
    status: String(required=True)
    order_context: Text()
    captured_at: DateTime(required=True)
