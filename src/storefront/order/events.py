"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A checkout produced a priced order."""

    __version__ = 1

    order_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    product_id: String(required=True)
    quantity: Integer(required=True)
    base_price: Float(required=True)
    promotion_discount: Float()
    loyalty_discount: Float()
    total_price: Float(required=True)
    loyalty_points_delta: Integer()
    payment_id: String()
    placed_at: DateTime(required=True)


@storefront.event(part_of="Order")
class OrderUpdated:
    """An administrator edited an order."""

    __version__ = 1

    order_id: Identifier(required=True)
    changed_fields: String()
    status: String(required=True)
    total_price: Float(required=True)


@storefront.event(part_of="Order")
class OrderDeleted:
    """An order was removed and its loyalty effect undone."""

    __version__ = 1

    order_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    payment_id: String()
    loyalty_points_delta: Integer()
    reason: String()
    deleted_at: DateTime(required=True)
