"""Order aggregate: a single-product storefront order with its pricing breakdown.

The breakdown always satisfies
``total_price == base_price - promotion_discount - loyalty_discount`` within
the configured tolerance. ``loyalty_points_delta`` records what placing the
order did to the customer's balance (+N earned, -N redeemed) so that deleting
the order can undo exactly that.
"""

from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.utils.clock import as_utc, utcnow
from storefront.utils.settings import setting

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class OrderSize(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"


@storefront.aggregate
class Order:
    """A customer's order for one product, priced at checkout time."""

    customer_id: Identifier(required=True)
    product_id: String(required=True, max_length=100)
    product_code: String(required=True, max_length=50)
    product_name: String(max_length=255)
    customer_name: String(required=True, max_length=150)
    customer_address: Text(required=True)
    size: String(required=True, choices=OrderSize)
    quantity: Integer(required=True, min_value=1)
    unit_price: Float(required=True, min_value=0.0)
    base_price: Float(required=True, min_value=0.0)
    total_price: Float(required=True, min_value=0.0)
    has_promotion: Boolean(default=False)
    promotion_id: String(max_length=100)
    promotion_title: String(max_length=150)
    promotion_discount: Float(default=0.0, min_value=0.0)
    used_loyalty_points: Boolean(default=False)
    loyalty_discount: Float(default=0.0, min_value=0.0)
    loyalty_points_delta: Integer(default=0)
    payment_type: String(max_length=50)
    payment_id: String(max_length=100)
    status: String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at: DateTime(default=utcnow)
    updated_at: DateTime(default=utcnow)

    @invariant.post
    def total_matches_breakdown(self):
        if self.base_price is None or self.total_price is None:
            return
        expected = self.base_price - (self.promotion_discount or 0.0) - (self.loyalty_discount or 0.0)
        if abs(self.total_price - expected) > setting("PRICE_TOLERANCE") + 1e-9:
            raise ValidationError(
                {"total_price": [f"Total {self.total_price:.2f} does not match the price breakdown ({expected:.2f})"]}
            )

    @invariant.post
    def promotion_fields_are_consistent(self):
        if self.has_promotion and not self.promotion_id:
            raise ValidationError({"promotion_id": ["A promoted order must reference its promotion"]})

    @classmethod
    def place(
        cls,
        customer_id,
        product_id,
        product_code,
        customer_name,
        customer_address,
        size,
        quantity,
        unit_price,
        promotion_discount=0.0,
        promotion_id=None,
        promotion_title=None,
        product_name=None,
        payment_type=None,
        payment_id=None,
    ):
        base_price = round(unit_price * quantity, 2)
        promotion_discount = round(promotion_discount, 2)
        now = utcnow()
        return cls(
            customer_id=customer_id,
            product_id=product_id,
            product_code=product_code,
            product_name=product_name,
            customer_name=customer_name,
            customer_address=customer_address,
            size=size,
            quantity=quantity,
            unit_price=unit_price,
            base_price=base_price,
            total_price=round(base_price - promotion_discount, 2),
            has_promotion=promotion_id is not None,
            promotion_id=promotion_id,
            promotion_title=promotion_title,
            promotion_discount=promotion_discount,
            payment_type=payment_type,
            payment_id=payment_id,
            created_at=now,
            updated_at=now,
        )

    def apply_loyalty(self, used_points: bool, points_delta: int, discount: float):
        """Record the loyalty side of checkout and emit ``OrderPlaced``."""
        from storefront.order.events import OrderPlaced

        discount = round(min(discount, self.base_price - self.promotion_discount), 2) if used_points else 0.0
        with atomic_change(self):
            self.used_loyalty_points = used_points
            self.loyalty_points_delta = points_delta
            self.loyalty_discount = discount
            self.total_price = round(self.base_price - self.promotion_discount - discount, 2)

        self.raise_(
            OrderPlaced(
                order_id=self.id,
                customer_id=self.customer_id,
                product_id=self.product_id,
                quantity=self.quantity,
                base_price=self.base_price,
                promotion_discount=self.promotion_discount,
                loyalty_discount=self.loyalty_discount,
                total_price=self.total_price,
                loyalty_points_delta=points_delta,
                payment_id=self.payment_id,
                placed_at=self.created_at,
            )
        )

    def update_details(
        self,
        customer_name=_UNSET,
        customer_address=_UNSET,
        size=_UNSET,
        quantity=_UNSET,
        payment_type=_UNSET,
        payment_id=_UNSET,
        status=_UNSET,
    ):
        from storefront.order.events import OrderUpdated

        changes = {
            name: value
            for name, value in (
                ("customer_name", customer_name),
                ("customer_address", customer_address),
                ("size", size),
                ("payment_type", payment_type),
                ("payment_id", payment_id),
                ("status", status),
            )
            if value is not _UNSET
        }

        if quantity is not _UNSET and quantity != self.quantity:
            self._rescale(quantity)
            changes["quantity"] = quantity

        for field, value in changes.items():
            if field != "quantity":
                setattr(self, field, value)
        self.updated_at = utcnow()

        self.raise_(
            OrderUpdated(
                order_id=self.id,
                changed_fields=",".join(sorted(changes)),
                status=self.status,
                total_price=self.total_price,
            )
        )

    def _rescale(self, quantity):
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        per_unit_promotion = self.promotion_discount / self.quantity
        base_price = round(self.unit_price * quantity, 2)
        promotion_discount = round(per_unit_promotion * quantity, 2)
        loyalty_discount = min(self.loyalty_discount, round(base_price - promotion_discount, 2))

        with atomic_change(self):
            self.quantity = quantity
            self.base_price = base_price
            self.promotion_discount = promotion_discount
            self.loyalty_discount = loyalty_discount
            self.total_price = round(base_price - promotion_discount - loyalty_discount, 2)

    def mark_deleted(self, reason):
        from storefront.order.events import OrderDeleted

        self.raise_(
            OrderDeleted(
                order_id=self.id,
                customer_id=self.customer_id,
                payment_id=self.payment_id,
                loyalty_points_delta=self.loyalty_points_delta,
                reason=reason,
                deleted_at=utcnow(),
            )
        )


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id) -> list[Order]:
        orders = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return sorted(orders, key=lambda o: as_utc(o.created_at), reverse=True)

    def by_payment_reference(self, payment_id) -> Order | None:
        matches = self._dao.query.filter(payment_id=str(payment_id)).all().items
        return matches[0] if matches else None

    def everything(self) -> list[Order]:
        return self._dao.query.all().items
