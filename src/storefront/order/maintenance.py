"""Administrative order edits and order reads."""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class UpdateOrder:
    """Edit shipping details, quantity, payment reference or status of an order."""

    order_id: Identifier(required=True)
    customer_name: String(max_length=150)
    customer_address: Text()
    size: String(max_length=5)
    quantity: Integer(min_value=1)
    payment_type: String(max_length=50)
    payment_id: String(max_length=100)
    status: String(max_length=20)


@storefront.command_handler(part_of=Order)
class UpdateOrderHandler:
    @handle(UpdateOrder)
    def update_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        changes = {
            field: getattr(command, field)
            for field in (
                "customer_name",
                "customer_address",
                "size",
                "quantity",
                "payment_type",
                "payment_id",
                "status",
            )
            if getattr(command, field) is not None
        }
        order.update_details(**changes)
        repo.add(order)


def get_order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


def list_orders() -> list[Order]:
    return current_domain.repository_for(Order).everything()


def orders_for_customer(customer_id) -> list[Order]:
    return current_domain.repository_for(Order).for_customer(customer_id)
