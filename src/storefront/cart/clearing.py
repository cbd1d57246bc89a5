"""Empty the customer's cart after an order is placed.

Runs after the order has committed. A failure here is logged and swallowed:
the order stands whether or not the cart could be cleared.
"""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.order.events import OrderPlaced
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class CartClearingHandler:
    @handle(OrderPlaced)
    def clear_cart(self, event: OrderPlaced) -> None:
        try:
            repo = current_domain.repository_for(ShoppingCart)
            cart = repo.find_by_customer(event.customer_id)
            if cart is None or not cart.items:
                return
            cart.clear()
            repo.add(cart)
            logger.info("Cart cleared after checkout", customer_id=str(event.customer_id), order_id=str(event.order_id))
        except Exception:
            logger.exception(
                "Failed to clear cart after checkout",
                customer_id=str(event.customer_id),
                order_id=str(event.order_id),
            )
