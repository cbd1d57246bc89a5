"""Customer aggregate: the storefront's view of a user and their loyalty balance."""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from storefront.domain import storefront
from storefront.exceptions import InsufficientPointsError


class LoyaltyEntryKind(Enum):
    """Kinds of loyalty balance movement."""

    EARN = "earn"
    REDEEM = "redeem"
    REVERSE = "reverse"
    RESTORE = "restore"


@storefront.aggregate
class Customer:
    """A shopper known to the storefront.

    Holds the contact details used on receipts, the gateway-side customer id
    created lazily on the first stored card, and the integer loyalty balance.
    The balance is only ever moved through ``record_loyalty``, which the
    loyalty ledger calls; nothing else assigns ``loyalty_points``.
    """

    name: String(required=True, max_length=150)
    email: String(required=True, max_length=254, unique=True)
    loyalty_points: Integer(default=0, min_value=0)
    gateway_customer_id: String(max_length=255)
    registered_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def loyalty_balance_is_never_negative(self):
        if self.loyalty_points is not None and self.loyalty_points < 0:
            raise ValidationError({"loyalty_points": ["Loyalty balance cannot be negative"]})

    @classmethod
    def register(cls, name, email):
        from storefront.customer.events import CustomerRegistered

        now = datetime.now(UTC)
        customer = cls(name=name, email=email, loyalty_points=0, registered_at=now)
        customer.raise_(
            CustomerRegistered(
                customer_id=customer.id,
                name=name,
                email=email,
                registered_at=now,
            )
        )
        return customer

    def link_gateway_customer(self, gateway_customer_id):
        if self.gateway_customer_id:
            raise ValidationError({"gateway_customer_id": ["Customer is already linked to the gateway"]})
        self.gateway_customer_id = gateway_customer_id

    def record_loyalty(self, kind: LoyaltyEntryKind, points: int, reference=None) -> int:
        """Move the loyalty balance and return the new value."""
        from storefront.loyalty.events import (
            LoyaltyPointsEarned,
            LoyaltyPointsRedeemed,
            LoyaltyPointsRestored,
            LoyaltyPointsReversed,
        )

        if points is None or points <= 0:
            raise ValidationError({"points": ["Points must be a positive integer"]})

        before = self.loyalty_points or 0
        if kind == LoyaltyEntryKind.REDEEM:
            if before < points:
                raise InsufficientPointsError(
                    {"loyalty_points": [f"Balance of {before} points is below the {points} requested"]}
                )
            after = before - points
        elif kind == LoyaltyEntryKind.REVERSE:
            after = max(before - points, 0)
        else:
            after = before + points

        self.loyalty_points = after

        event_cls = {
            LoyaltyEntryKind.EARN: LoyaltyPointsEarned,
            LoyaltyEntryKind.REDEEM: LoyaltyPointsRedeemed,
            LoyaltyEntryKind.REVERSE: LoyaltyPointsReversed,
            LoyaltyEntryKind.RESTORE: LoyaltyPointsRestored,
        }[kind]
        self.raise_(
            event_cls(
                customer_id=self.id,
                points=points,
                previous_balance=before,
                balance=after,
                reference=str(reference) if reference is not None else None,
            )
        )
        return after
