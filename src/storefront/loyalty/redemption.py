"""Explicit loyalty redemption requested by a customer."""

from protean import handle
from protean.fields import Identifier, Integer, String

from storefront.customer.customer import Customer
from storefront.domain import storefront
from storefront.loyalty import ledger


@storefront.command(part_of="Customer")
class RedeemLoyaltyPoints:
    """Spend loyalty points outside of checkout (e.g. for a voucher)."""

    customer_id: Identifier(required=True)
    points: Integer(required=True, min_value=1)
    reference: String(max_length=100)


@storefront.command_handler(part_of=Customer)
class RedeemLoyaltyPointsHandler:
    @handle(RedeemLoyaltyPoints)
    def redeem_points(self, command):
        return ledger.redeem(command.customer_id, command.points, command.reference)
