"""Domain events for the RefundRequest aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="RefundRequest")
class RefundRequested:
    """A customer asked for a payment to be refunded."""

    __version__ = 1

    refund_request_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    payment_id: Identifier(required=True)
    amount: Float(required=True)
    reason: Text()
    requested_at: DateTime(required=True)


@storefront.event(part_of="RefundRequest")
class RefundApproved:
    """The gateway refunded the payment and the request was approved."""

    __version__ = 1

    refund_request_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    payment_id: Identifier(required=True)
    amount: Float(required=True)
    currency: String()
    gateway_refund_id: String(required=True)
    admin_response: Text()
    decided_at: DateTime(required=True)


@storefront.event(part_of="RefundRequest")
class RefundRejected:
    """The request was turned down; no money or points move."""

    __version__ = 1

    refund_request_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    payment_id: Identifier(required=True)
    amount: Float()
    currency: String()
    admin_response: Text()
    decided_at: DateTime(required=True)
