"""Promotion aggregate: a time-windowed percentage discount on one product code."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, String, Text

from storefront.domain import storefront
from storefront.utils.clock import as_utc, utcnow


@storefront.aggregate
class Promotion:
    """A percentage discount bound to a single product code for a date window.

    Whether a promotion is active is derived from the window and the current
    time; it is never stored.
    """

    title: String(required=True, max_length=150)
    product_code: String(required=True, max_length=50)
    description: Text()
    discount_percent: Float(required=True, min_value=0.0, max_value=100.0)
    start_date: DateTime(required=True)
    end_date: DateTime(required=True)
    banner_image: String(max_length=500)
    created_at: DateTime(default=utcnow)

    @invariant.post
    def window_must_be_ordered(self):
        if self.start_date and self.end_date and as_utc(self.start_date) > as_utc(self.end_date):
            raise ValidationError({"end_date": ["Promotion must end on or after its start date"]})

    @invariant.post
    def discount_must_be_positive(self):
        if self.discount_percent is not None and self.discount_percent <= 0:
            raise ValidationError({"discount_percent": ["Discount must be greater than zero"]})

    def is_active_at(self, now) -> bool:
        now = as_utc(now)
        return as_utc(self.start_date) <= now <= as_utc(self.end_date)

    @classmethod
    def launch(cls, title, product_code, discount_percent, start_date, end_date, description=None, banner_image=None):
        from storefront.promotion.events import PromotionCreated

        promotion = cls(
            title=title,
            product_code=product_code,
            description=description,
            discount_percent=discount_percent,
            start_date=start_date,
            end_date=end_date,
            banner_image=banner_image,
            created_at=utcnow(),
        )
        promotion.raise_(
            PromotionCreated(
                promotion_id=promotion.id,
                title=title,
                product_code=product_code,
                discount_percent=discount_percent,
                start_date=start_date,
                end_date=end_date,
            )
        )
        return promotion
