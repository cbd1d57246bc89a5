"""Domain events for the Promotion aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Promotion")
class PromotionCreated:
    """A promotion was added to the catalog."""

    __version__ = 1

    promotion_id: Identifier(required=True)
    title: String(required=True)
    product_code: String(required=True)
    discount_percent: Float(required=True)
    start_date: DateTime(required=True)
    end_date: DateTime(required=True)
