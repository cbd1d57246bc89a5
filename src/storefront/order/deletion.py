"""Order deletion and loyalty reversal.

Deleting an order undoes the loyalty movement it caused, in the same unit of
work as the deletion: points the order earned are taken back (saturating at
zero) and points it redeemed are given back. A customer record that no longer
exists does not block the deletion.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.loyalty import ledger
from storefront.order.order import Order
from storefront.utils.locking import customer_key, run_exclusive

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class DeleteOrder:
    """Remove an order and undo its loyalty effect."""

    order_id: Identifier(required=True)
    reason: String(max_length=255, default="Deleted by administrator")


@storefront.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        balance = None
        try:
            balance = ledger.undo_order_effect(order.customer_id, order.loyalty_points_delta or 0, reference=order.id)
        except ObjectNotFoundError:
            logger.warning(
                "Customer not found while reversing loyalty, deleting order anyway",
                order_id=str(order.id),
                customer_id=str(order.customer_id),
            )

        order.mark_deleted(command.reason)
        repo.add(order)
        repo._dao.delete(order)

        logger.info(
            "Order deleted",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            loyalty_balance=balance,
            reason=command.reason,
        )
        return balance


def delete_order(order_id, reason: str = "Deleted by administrator"):
    """Delete an order while holding its customer's loyalty lock."""
    order = current_domain.repository_for(Order).get(order_id)
    return run_exclusive(customer_key(order.customer_id), DeleteOrder(order_id=order_id, reason=reason))
