"""Order placement: turning a checkout payload into a priced order.

Pricing is recomputed from the stored promotion catalog; any pricing fields
the client sends along are treated as claims and checked against the
recomputation. A mismatch rejects the order instead of trusting the client.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.domain import storefront
from storefront.loyalty import ledger
from storefront.order.order import Order
from storefront.promotion.pricing import quote_product
from storefront.utils.clock import utcnow
from storefront.utils.locking import customer_key, run_exclusive
from storefront.utils.settings import setting

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    """Create an order from checkout data for one product line."""

    customer_id: Identifier(required=True)
    product_id: String(required=True, max_length=100)
    product_code: String(required=True, max_length=50)
    product_name: String(max_length=255)
    customer_name: String(required=True, max_length=150)
    customer_address: Text(required=True)
    size: String(required=True, max_length=5)
    quantity: Integer(required=True, min_value=1)
    unit_price: Float(required=True, min_value=0.0)
    payment_type: String(max_length=50)
    payment_id: String(max_length=100)
    use_loyalty_points: Boolean(default=False)

    # Client-side pricing claims, verified against the server-side quote
    has_promotion: Boolean()
    promotion_id: String(max_length=100)
    promotion_discount: Float()
    loyalty_discount: Float()
    total_price: Float()


def _mismatch(claimed, expected, tolerance) -> bool:
    return claimed is not None and abs(claimed - expected) > tolerance


def _verify_claims(command, promotion_id, promotion_discount, loyalty_discount, total_price):
    tolerance = setting("PRICE_TOLERANCE")
    errors = {}

    if command.has_promotion is not None and bool(command.has_promotion) != (promotion_id is not None):
        errors["has_promotion"] = ["Promotion claim does not match the active promotion for this product"]
    if command.promotion_id and command.promotion_id != promotion_id:
        errors["promotion_id"] = ["Promotion is not active for this product"]
    if _mismatch(command.promotion_discount, promotion_discount, tolerance):
        errors["promotion_discount"] = [
            f"Price mismatch: expected promotion discount {promotion_discount:.2f}, got {command.promotion_discount:.2f}"
        ]
    if _mismatch(command.loyalty_discount, loyalty_discount, tolerance):
        errors["loyalty_discount"] = [
            f"Price mismatch: expected loyalty discount {loyalty_discount:.2f}, got {command.loyalty_discount:.2f}"
        ]
    if _mismatch(command.total_price, total_price, tolerance):
        errors["total_price"] = [f"Price mismatch: expected total {total_price:.2f}, got {command.total_price:.2f}"]

    if errors:
        raise ValidationError(errors)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        customer = current_domain.repository_for(Customer).get(command.customer_id)

        quote = quote_product(command.product_code, command.unit_price, utcnow())
        order = Order.place(
            customer_id=command.customer_id,
            product_id=command.product_id,
            product_code=command.product_code,
            product_name=command.product_name,
            customer_name=command.customer_name,
            customer_address=command.customer_address,
            size=command.size,
            quantity=command.quantity,
            unit_price=command.unit_price,
            promotion_discount=quote.discount_amount * command.quantity,
            promotion_id=quote.promotion_id,
            promotion_title=quote.promotion_title,
            payment_type=command.payment_type,
            payment_id=command.payment_id,
        )

        # Points are only spent when they buy a discount; a free order earns instead
        loyalty_discount = round(min(setting("LOYALTY_REDEMPTION_VALUE"), order.total_price), 2)
        redeeming = (
            bool(command.use_loyalty_points)
            and loyalty_discount > 0
            and customer.loyalty_points >= setting("LOYALTY_REDEMPTION_POINTS")
        )
        if command.use_loyalty_points and not redeeming:
            logger.info(
                "Loyalty points not redeemed, earning instead",
                order_id=str(order.id),
                customer_id=str(command.customer_id),
                balance=customer.loyalty_points,
                payable=order.total_price,
            )
        if not redeeming:
            loyalty_discount = 0.0
        _verify_claims(
            command,
            promotion_id=quote.promotion_id,
            promotion_discount=order.promotion_discount,
            loyalty_discount=loyalty_discount,
            total_price=round(order.total_price - loyalty_discount, 2),
        )

        outcome = ledger.apply_order_policy(command.customer_id, redeeming, reference=order.id)
        order.apply_loyalty(outcome.used_points, outcome.points_delta, loyalty_discount)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            total_price=order.total_price,
            has_promotion=order.has_promotion,
            loyalty_points_delta=outcome.points_delta,
        )
        return str(order.id)


def place_order(command: PlaceOrder) -> str:
    """Place an order while holding the customer's loyalty lock."""
    return run_exclusive(customer_key(command.customer_id), command)
