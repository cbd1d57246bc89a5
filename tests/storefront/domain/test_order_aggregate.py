"""Domain tests for the Order aggregate and its price breakdown."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.order.events import OrderDeleted, OrderPlaced, OrderUpdated
from storefront.order.order import Order, OrderStatus


def _order(**overrides):
    data = {
        "customer_id": "cust-001",
        "product_id": "prod-001",
        "product_code": "TSHIRT-001",
        "customer_name": "Jane Doe",
        "customer_address": "1 Main St",
        "size": "M",
        "quantity": 2,
        "unit_price": 50.0,
    }
    data.update(overrides)
    return Order.place(**data)


class TestOrderPlacement:
    def test_place_computes_base_and_total(self):
        order = _order()
        assert order.base_price == 100.0
        assert order.total_price == 100.0
        assert order.has_promotion is False
        assert order.status == OrderStatus.PENDING.value

    def test_place_with_promotion(self):
        order = _order(promotion_discount=20.0, promotion_id="promo-1", promotion_title="Summer Sale")
        assert order.has_promotion is True
        assert order.total_price == 80.0

    def test_apply_loyalty_discount(self):
        order = _order()
        order.apply_loyalty(used_points=True, points_delta=-5, discount=5.0)

        assert order.used_loyalty_points is True
        assert order.loyalty_discount == 5.0
        assert order.total_price == 95.0
        assert order.loyalty_points_delta == -5

    def test_loyalty_discount_capped_at_remaining_price(self):
        order = _order(quantity=1, unit_price=3.0)
        order.apply_loyalty(used_points=True, points_delta=-5, discount=5.0)

        assert order.loyalty_discount == 3.0
        assert order.total_price == 0.0

    def test_discount_ignored_when_points_not_used(self):
        order = _order()
        order.apply_loyalty(used_points=False, points_delta=5, discount=5.0)
        assert order.loyalty_discount == 0.0
        assert order.total_price == 100.0

    def test_apply_loyalty_raises_order_placed(self):
        order = _order()
        order.apply_loyalty(used_points=False, points_delta=5, discount=0.0)

        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.loyalty_points_delta == 5
        assert event.total_price == 100.0


class TestOrderInvariants:
    def test_total_must_match_breakdown(self):
        with pytest.raises(ValidationError) as exc:
            Order(
                customer_id="cust-001",
                product_id="prod-001",
                product_code="TSHIRT-001",
                customer_name="Jane Doe",
                customer_address="1 Main St",
                size="M",
                quantity=1,
                unit_price=100.0,
                base_price=100.0,
                total_price=70.0,
                promotion_discount=20.0,
            )
        assert "total_price" in exc.value.messages

    def test_breakdown_tolerance_comes_from_settings(self, monkeypatch):
        monkeypatch.setitem(current_domain.config["custom"], "PRICE_TOLERANCE", 0.5)

        order = Order(
            customer_id="cust-001",
            product_id="prod-001",
            product_code="TSHIRT-001",
            customer_name="Jane Doe",
            customer_address="1 Main St",
            size="M",
            quantity=1,
            unit_price=100.0,
            base_price=100.0,
            total_price=80.3,
            promotion_discount=20.0,
        )
        assert order.total_price == 80.3

    def test_promoted_order_needs_promotion_id(self):
        with pytest.raises(ValidationError) as exc:
            Order(
                customer_id="cust-001",
                product_id="prod-001",
                product_code="TSHIRT-001",
                customer_name="Jane Doe",
                customer_address="1 Main St",
                size="M",
                quantity=1,
                unit_price=100.0,
                base_price=100.0,
                total_price=80.0,
                promotion_discount=20.0,
                has_promotion=True,
            )
        assert "promotion_id" in exc.value.messages

    def test_invalid_size_is_rejected(self):
        with pytest.raises(ValidationError):
            _order(size="XXXL")


class TestOrderUpdates:
    def test_update_details_changes_fields(self):
        order = _order()
        order.update_details(customer_address="2 High St", status=OrderStatus.SHIPPED.value)

        assert order.customer_address == "2 High St"
        assert order.status == OrderStatus.SHIPPED.value
        event = order._events[-1]
        assert isinstance(event, OrderUpdated)
        assert event.changed_fields == "customer_address,status"

    def test_changing_quantity_rescales_prices(self):
        order = _order(quantity=2, unit_price=50.0, promotion_discount=20.0, promotion_id="promo-1")
        order.update_details(quantity=3)

        assert order.base_price == 150.0
        assert order.promotion_discount == 30.0
        assert order.total_price == 120.0

    def test_mark_deleted_raises_order_deleted(self):
        order = _order()
        order.apply_loyalty(used_points=False, points_delta=5, discount=0.0)
        order.mark_deleted("Refund approved")

        event = order._events[-1]
        assert isinstance(event, OrderDeleted)
        assert event.loyalty_points_delta == 5
        assert event.reason == "Refund approved"
