"""Promotion pricing engine.

``price_for`` is a pure function of its inputs: no repository access, no
clock. When several promotions for the same product are active at once the
most recently created one wins, with the promotion id as a final tie-breaker,
so the result never depends on the order promotions are passed in.
"""

from dataclasses import dataclass
from datetime import datetime

from protean.utils.globals import current_domain

from storefront.promotion.promotion import Promotion
from storefront.utils.clock import as_utc, utcnow


@dataclass(frozen=True)
class PriceQuote:
    """Outcome of pricing one product against the promotion catalog."""

    active: bool
    original_price: float
    discount_percent: float
    discounted_price: float
    promotion_id: str | None = None
    promotion_title: str | None = None

    @property
    def discount_amount(self) -> float:
        return round(self.original_price - self.discounted_price, 2)


def _recency(promotion):
    return (as_utc(promotion.created_at), str(promotion.id))


def select_promotion(product_code: str, promotions, now: datetime):
    """Pick the single promotion that applies to ``product_code`` at ``now``, if any."""
    matching = [p for p in promotions if p.product_code == product_code and p.is_active_at(now)]
    if not matching:
        return None
    return max(matching, key=_recency)


def price_for(product_code: str, original_price: float, promotions, now: datetime) -> PriceQuote:
    promotion = select_promotion(product_code, promotions, now)
    if promotion is None:
        return PriceQuote(
            active=False,
            original_price=original_price,
            discount_percent=0.0,
            discounted_price=round(original_price, 2),
        )

    discounted = round(original_price * (1 - promotion.discount_percent / 100), 2)
    return PriceQuote(
        active=True,
        original_price=original_price,
        discount_percent=promotion.discount_percent,
        discounted_price=discounted,
        promotion_id=str(promotion.id),
        promotion_title=promotion.title,
    )


def promotions_for_product(product_code: str) -> list[Promotion]:
    repo = current_domain.repository_for(Promotion)
    return repo._dao.query.filter(product_code=product_code).all().items


def quote_product(product_code: str, original_price: float, now: datetime | None = None) -> PriceQuote:
    """Price a product against the stored catalog at ``now`` (defaults to the current time)."""
    return price_for(product_code, original_price, promotions_for_product(product_code), now or utcnow())
