"""Promotion catalog management and listing."""

from datetime import datetime

from protean import handle
from protean.fields import DateTime, Float, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.promotion.promotion import Promotion
from storefront.utils.clock import as_utc, utcnow


@storefront.command(part_of="Promotion")
class CreatePromotion:
    """Add a promotion to the catalog."""

    title: String(required=True, max_length=150)
    product_code: String(required=True, max_length=50)
    description: Text()
    discount_percent: Float(required=True, min_value=0.0, max_value=100.0)
    start_date: DateTime(required=True)
    end_date: DateTime(required=True)
    banner_image: String(max_length=500)


@storefront.command_handler(part_of=Promotion)
class PromotionCommandHandler:
    @handle(CreatePromotion)
    def create_promotion(self, command):
        promotion = Promotion.launch(
            title=command.title,
            product_code=command.product_code,
            discount_percent=command.discount_percent,
            start_date=command.start_date,
            end_date=command.end_date,
            description=command.description,
            banner_image=command.banner_image,
        )
        current_domain.repository_for(Promotion).add(promotion)
        return str(promotion.id)


def list_promotions(active_only: bool = False, now: datetime | None = None) -> list[Promotion]:
    promotions = current_domain.repository_for(Promotion)._dao.query.all().items
    if active_only:
        now = now or utcnow()
        promotions = [p for p in promotions if p.is_active_at(now)]
    return sorted(promotions, key=lambda p: as_utc(p.start_date), reverse=True)
