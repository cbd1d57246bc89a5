"""Domain events for loyalty balance movements."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Customer")
class LoyaltyPointsEarned:
    """Points were credited to a customer's balance."""

    __version__ = 1

    customer_id: Identifier(required=True)
    points: Integer(required=True)
    previous_balance: Integer(required=True)
    balance: Integer(required=True)
    reference: String()


@storefront.event(part_of="Customer")
class LoyaltyPointsRedeemed:
    """Points were spent for a discount."""

    __version__ = 1

    customer_id: Identifier(required=True)
    points: Integer(required=True)
    previous_balance: Integer(required=True)
    balance: Integer(required=True)
    reference: String()


@storefront.event(part_of="Customer")
class LoyaltyPointsReversed:
    """Previously earned points were taken back (saturating at zero)."""

    __version__ = 1

    customer_id: Identifier(required=True)
    points: Integer(required=True)
    previous_balance: Integer(required=True)
    balance: Integer(required=True)
    reference: String()


@storefront.event(part_of="Customer")
class LoyaltyPointsRestored:
    """Previously redeemed points were given back."""

    __version__ = 1

    customer_id: Identifier(required=True)
    points: Integer(required=True)
    previous_balance: Integer(required=True)
    balance: Integer(required=True)
    reference: String()
