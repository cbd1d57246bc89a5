"""Payment and PaymentMethod aggregates.

A Payment is written once per charge the gateway accepted and mirrors the
gateway's status string verbatim. A PaymentMethod is a customer's stored card
as known to the gateway, with masked metadata for display.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.utils.clock import as_utc, utcnow

SUCCEEDED = "succeeded"


@storefront.aggregate
class PaymentMethod:
    """A stored card attached to the customer's gateway record."""

    customer_id: Identifier(required=True)
    gateway_customer_id: String(required=True, max_length=255)
    gateway_method_id: String(required=True, max_length=255)
    brand: String(max_length=30)
    last4: String(max_length=4)
    exp_month: Integer(min_value=1, max_value=12)
    exp_year: Integer()
    is_default: Boolean(default=True)
    created_at: DateTime(default=utcnow)

    @classmethod
    def register(cls, customer_id, gateway_customer_id, card):
        from storefront.payment.events import PaymentMethodAdded

        method = cls(
            customer_id=customer_id,
            gateway_customer_id=gateway_customer_id,
            gateway_method_id=card.gateway_method_id,
            brand=card.brand,
            last4=card.last4,
            exp_month=card.exp_month,
            exp_year=card.exp_year,
            is_default=True,
            created_at=utcnow(),
        )
        method.raise_(
            PaymentMethodAdded(
                payment_method_id=method.id,
                customer_id=customer_id,
                brand=card.brand,
                last4=card.last4,
            )
        )
        return method

    def replace_card(self, card):
        from storefront.payment.events import PaymentMethodUpdated

        previous = self.gateway_method_id
        self.gateway_method_id = card.gateway_method_id
        self.brand = card.brand
        self.last4 = card.last4
        self.exp_month = card.exp_month
        self.exp_year = card.exp_year
        self.raise_(
            PaymentMethodUpdated(
                payment_method_id=self.id,
                customer_id=self.customer_id,
                previous_gateway_method_id=previous,
                brand=card.brand,
                last4=card.last4,
            )
        )

    def belongs_to(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)


@storefront.aggregate
class Payment:
    """A captured charge. Written once and never modified."""

    customer_id: Identifier(required=True)
    payment_method_id: Identifier(required=True)
    amount: Float(required=True, min_value=0.0)
    currency: String(required=True, max_length=3)
    gateway_transaction_id: String(required=True, max_length=255)
    status: String(required=True, max_length=50)
    idempotency_key: String(max_length=255)
    order_context: Text()
    created_at: DateTime(default=utcnow)

    @invariant.post
    def amount_must_be_positive(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be positive"]})

    @classmethod
    def capture(
        cls,
        customer_id,
        payment_method_id,
        amount,
        currency,
        gateway_transaction_id,
        status,
        idempotency_key=None,
        order_context=None,
        created_at=None,
    ):
        from storefront.payment.events import PaymentCaptured

        created_at = created_at or utcnow()
        payment = cls(
            customer_id=customer_id,
            payment_method_id=payment_method_id,
            amount=round(amount, 2),
            currency=currency,
            gateway_transaction_id=gateway_transaction_id,
            status=status,
            idempotency_key=idempotency_key,
            order_context=order_context,
            created_at=created_at,
        )
        payment.raise_(
            PaymentCaptured(
                payment_id=payment.id,
                customer_id=customer_id,
                amount=payment.amount,
                currency=currency,
                gateway_transaction_id=gateway_transaction_id,
                status=status,
                order_context=order_context,
                captured_at=created_at,
            )
        )
        return payment

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED

    def captured_between(self, start, end) -> bool:
        return start <= as_utc(self.created_at) < end
