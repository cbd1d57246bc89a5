"""Application tests for order edits, deletion and the loyalty reversal it triggers."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from storefront.customer.customer import Customer
from storefront.loyalty import ledger
from storefront.order.deletion import DeleteOrder, delete_order
from storefront.order.maintenance import UpdateOrder, list_orders, orders_for_customer
from storefront.order.order import Order, OrderStatus


def _balance(customer_id):
    return current_domain.repository_for(Customer).get(customer_id).loyalty_points


class TestDeleteOrder:
    def test_deleting_earning_order_takes_points_back(self, customer_id, place):
        order_id = place(customer_id)
        assert _balance(customer_id) == 5

        assert delete_order(order_id) == 0
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Order).get(order_id)

    def test_deleting_redeeming_order_gives_points_back(self, customer_id, place):
        ledger.earn(customer_id, 5, reference="welcome")
        order_id = place(customer_id, use_loyalty_points=True)
        assert _balance(customer_id) == 0

        assert delete_order(order_id) == 5

    def test_reversal_saturates_at_zero(self, customer_id, place):
        order_id = place(customer_id)
        ledger.redeem(customer_id, 3, reference="voucher")

        assert delete_order(order_id) == 0
        assert _balance(customer_id) == 0

    def test_missing_customer_does_not_block_deletion(self, customer_id, place):
        order_id = place(customer_id)
        customer = current_domain.repository_for(Customer).get(customer_id)
        current_domain.repository_for(Customer)._dao.delete(customer)

        assert current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False) is None
        assert list_orders() == []

    def test_deleting_unknown_order_is_not_found(self):
        with pytest.raises(ObjectNotFoundError):
            delete_order("missing-order")

    def test_reversal_is_applied_once_per_order(self, customer_id, place):
        order_id = place(customer_id)
        ledger.reverse(customer_id, 5, reference=order_id)
        ledger.earn(customer_id, 5, reference="welcome")

        assert delete_order(order_id) == 5


class TestUpdateOrder:
    def test_update_shipping_and_status(self, customer_id, place):
        order_id = place(customer_id)
        current_domain.process(
            UpdateOrder(order_id=order_id, customer_address="2 High St", status=OrderStatus.SHIPPED.value),
            asynchronous=False,
        )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.customer_address == "2 High St"
        assert order.status == OrderStatus.SHIPPED.value

    def test_quantity_change_keeps_breakdown_consistent(self, customer_id, place, create_promotion):
        create_promotion(discount_percent=10.0)
        order_id = place(customer_id, unit_price=40.0)

        current_domain.process(UpdateOrder(order_id=order_id, quantity=3), asynchronous=False)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.base_price == 120.0
        assert order.promotion_discount == 12.0
        assert order.total_price == 108.0

    def test_update_does_not_touch_loyalty(self, customer_id, place):
        order_id = place(customer_id)
        current_domain.process(UpdateOrder(order_id=order_id, quantity=2), asynchronous=False)
        assert _balance(customer_id) == 5


class TestOrderReads:
    def test_orders_for_customer_only_returns_theirs(self, customer_id, place, register_customer):
        first = place(customer_id)
        second = place(customer_id)
        other = register_customer(name="Sam Roe", email="sam@example.com")
        place(other)

        assert {o.id for o in orders_for_customer(customer_id)} == {first, second}
        assert len(list_orders()) == 3
