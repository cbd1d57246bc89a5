"""Domain tests for the promotion pricing engine."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from storefront.promotion.pricing import PriceQuote, price_for, select_promotion
from storefront.promotion.promotion import Promotion

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=UTC)


def _promotion(discount=20.0, product_code="TSHIRT-001", start=None, end=None, created_at=None, title="Sale"):
    return Promotion(
        title=title,
        product_code=product_code,
        discount_percent=discount,
        start_date=start or NOW - timedelta(days=1),
        end_date=end or NOW + timedelta(days=1),
        created_at=created_at or NOW - timedelta(days=2),
    )


class TestPriceFor:
    def test_active_promotion_discounts_price(self):
        promotion = _promotion(discount=20.0)
        quote = price_for("TSHIRT-001", 100.0, [promotion], NOW)

        assert quote.active is True
        assert quote.discounted_price == 80.00
        assert quote.discount_percent == 20.0
        assert quote.promotion_id == str(promotion.id)
        assert quote.discount_amount == 20.00

    def test_no_promotion_leaves_price_unchanged(self):
        quote = price_for("TSHIRT-001", 100.0, [], NOW)
        assert quote == PriceQuote(active=False, original_price=100.0, discount_percent=0.0, discounted_price=100.0)

    def test_promotion_for_other_product_is_ignored(self):
        quote = price_for("JEANS-002", 60.0, [_promotion(product_code="TSHIRT-001")], NOW)
        assert quote.active is False
        assert quote.discounted_price == 60.0

    def test_expired_promotion_is_ignored(self):
        expired = _promotion(start=NOW - timedelta(days=10), end=NOW - timedelta(days=5))
        assert price_for("TSHIRT-001", 100.0, [expired], NOW).active is False

    def test_future_promotion_is_ignored(self):
        upcoming = _promotion(start=NOW + timedelta(days=1), end=NOW + timedelta(days=5))
        assert price_for("TSHIRT-001", 100.0, [upcoming], NOW).active is False

    def test_window_is_inclusive_at_both_ends(self):
        promotion = _promotion(start=NOW, end=NOW + timedelta(hours=1))
        assert price_for("TSHIRT-001", 100.0, [promotion], NOW).active is True
        assert price_for("TSHIRT-001", 100.0, [promotion], NOW + timedelta(hours=1)).active is True

    def test_discounted_price_rounds_to_cents(self):
        quote = price_for("TSHIRT-001", 19.99, [_promotion(discount=15.0)], NOW)
        assert quote.discounted_price == 16.99

    def test_same_inputs_give_same_quote(self):
        promotions = [_promotion(discount=10.0), _promotion(discount=30.0, created_at=NOW - timedelta(hours=1))]
        assert price_for("TSHIRT-001", 100.0, promotions, NOW) == price_for("TSHIRT-001", 100.0, promotions, NOW)

    def test_naive_now_is_read_as_utc(self):
        promotion = _promotion()
        assert price_for("TSHIRT-001", 100.0, [promotion], NOW.replace(tzinfo=None)).active is True


class TestOverlappingPromotions:
    def test_most_recently_created_promotion_wins(self):
        older = _promotion(discount=10.0, created_at=NOW - timedelta(days=3), title="Older")
        newer = _promotion(discount=30.0, created_at=NOW - timedelta(hours=1), title="Newer")

        quote = price_for("TSHIRT-001", 100.0, [older, newer], NOW)
        assert quote.promotion_title == "Newer"
        assert quote.discounted_price == 70.0

    def test_selection_does_not_depend_on_input_order(self):
        first = _promotion(discount=10.0, created_at=NOW - timedelta(days=3))
        second = _promotion(discount=25.0, created_at=NOW - timedelta(days=1))

        assert select_promotion("TSHIRT-001", [first, second], NOW) is second
        assert select_promotion("TSHIRT-001", [second, first], NOW) is second

    def test_equal_creation_times_break_ties_by_id(self):
        created = NOW - timedelta(days=1)
        a = _promotion(discount=10.0, created_at=created)
        b = _promotion(discount=20.0, created_at=created)
        expected = max([a, b], key=lambda p: str(p.id))

        assert select_promotion("TSHIRT-001", [a, b], NOW) is expected
        assert select_promotion("TSHIRT-001", [b, a], NOW) is expected


class TestPromotionInvariants:
    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _promotion(start=NOW, end=NOW - timedelta(days=1))
        assert "end_date" in exc.value.messages

    def test_zero_discount_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _promotion(discount=0.0)
        assert "discount_percent" in exc.value.messages

    def test_launch_raises_promotion_created(self):
        promotion = Promotion.launch(
            title="Flash Sale",
            product_code="TSHIRT-001",
            discount_percent=15.0,
            start_date=NOW,
            end_date=NOW + timedelta(days=2),
        )
        assert len(promotion._events) == 1
        assert promotion._events[0].__class__.__name__ == "PromotionCreated"
