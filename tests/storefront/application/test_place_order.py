"""Application tests for order placement, pricing and the loyalty policy."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.customer.customer import Customer
from storefront.loyalty import ledger
from storefront.order.order import Order


def _balance(customer_id):
    return current_domain.repository_for(Customer).get(customer_id).loyalty_points


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestLoyaltyPolicy:
    def test_order_without_redemption_earns_points(self, customer_id, place):
        order_id = place(customer_id)

        order = _order(order_id)
        assert _balance(customer_id) == 5
        assert order.used_loyalty_points is False
        assert order.loyalty_points_delta == 5
        assert order.total_price == 100.0

    def test_redeeming_order_spends_points_and_discounts(self, customer_id, place):
        ledger.earn(customer_id, 5, reference="welcome")

        order_id = place(customer_id, use_loyalty_points=True)

        order = _order(order_id)
        assert _balance(customer_id) == 0
        assert order.used_loyalty_points is True
        assert order.loyalty_discount == 5.0
        assert order.loyalty_points_delta == -5
        assert order.total_price == 95.0

    def test_opting_in_without_enough_points_earns_instead(self, customer_id, place):
        ledger.earn(customer_id, 3, reference="welcome")

        order_id = place(customer_id, use_loyalty_points=True)

        order = _order(order_id)
        assert _balance(customer_id) == 8
        assert order.used_loyalty_points is False
        assert order.loyalty_discount == 0.0

    def test_fully_discounted_order_keeps_points_and_earns(self, customer_id, place, create_promotion):
        create_promotion(discount_percent=100.0)
        ledger.earn(customer_id, 5, reference="welcome")

        order = _order(place(customer_id, use_loyalty_points=True))

        assert order.total_price == 0.0
        assert order.used_loyalty_points is False
        assert order.loyalty_discount == 0.0
        assert order.loyalty_points_delta == 5
        assert _balance(customer_id) == 10

    def test_each_order_moves_the_balance_once(self, customer_id, place):
        place(customer_id)
        place(customer_id)
        assert _balance(customer_id) == 10

    def test_unknown_customer_is_not_found(self, place):
        with pytest.raises(ObjectNotFoundError):
            place("missing-customer")


class TestServerSidePricing:
    def test_active_promotion_is_applied(self, customer_id, place, create_promotion):
        promotion_id = create_promotion(discount_percent=20.0)

        order = _order(place(customer_id))

        assert order.has_promotion is True
        assert order.promotion_id == promotion_id
        assert order.promotion_discount == 20.0
        assert order.total_price == 80.0

    def test_promotion_and_loyalty_combine(self, customer_id, place, create_promotion):
        create_promotion(discount_percent=20.0)
        ledger.earn(customer_id, 5, reference="welcome")

        order = _order(place(customer_id, quantity=2, use_loyalty_points=True))

        assert order.base_price == 200.0
        assert order.promotion_discount == 40.0
        assert order.loyalty_discount == 5.0
        assert order.total_price == 155.0

    def test_matching_client_claims_are_accepted(self, customer_id, place, create_promotion):
        promotion_id = create_promotion(discount_percent=20.0)

        order_id = place(
            customer_id,
            has_promotion=True,
            promotion_id=promotion_id,
            promotion_discount=20.0,
            loyalty_discount=0.0,
            total_price=80.0,
        )
        assert _order(order_id).total_price == 80.0

    def test_tampered_total_is_rejected(self, customer_id, place, create_promotion):
        create_promotion(discount_percent=20.0)

        with pytest.raises(ValidationError) as exc:
            place(customer_id, total_price=1.0)

        assert "total_price" in exc.value.messages
        assert current_domain.repository_for(Order)._dao.query.all().items == []
        assert _balance(customer_id) == 0

    def test_claiming_inactive_promotion_is_rejected(self, customer_id, place):
        with pytest.raises(ValidationError) as exc:
            place(customer_id, has_promotion=True, promotion_discount=50.0, total_price=50.0)

        assert "has_promotion" in exc.value.messages
        assert "promotion_discount" in exc.value.messages

    def test_claimed_loyalty_discount_without_points_is_rejected(self, customer_id, place):
        with pytest.raises(ValidationError) as exc:
            place(customer_id, use_loyalty_points=True, loyalty_discount=5.0, total_price=95.0)
        assert "loyalty_discount" in exc.value.messages


class TestCartClearing:
    def test_cart_is_emptied_after_checkout(self, customer_id, place):
        repo = current_domain.repository_for(ShoppingCart)
        cart = ShoppingCart(customer_id=customer_id)
        cart.add_item("prod-001", quantity=2)
        repo.add(cart)

        place(customer_id)

        assert repo.find_by_customer(customer_id).items == []

    def test_order_stands_when_cart_clearing_fails(self, customer_id, place, monkeypatch):
        def broken(self, customer_id):
            raise RuntimeError("cart store unavailable")

        monkeypatch.setattr("storefront.cart.cart.ShoppingCartRepository.find_by_customer", broken)

        order_id = place(customer_id)

        assert _order(order_id) is not None
        assert _balance(customer_id) == 5
