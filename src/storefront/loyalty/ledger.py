"""Loyalty point ledger.

The only code path that moves ``Customer.loyalty_points``. Every operation is
a single read-modify-write of one Customer aggregate plus one appended
LoyaltyEntry, both registered with the caller's unit of work, and returns the
new balance. Callers that can race on the same customer (order placement,
order deletion, refund approval) hold the customer lock from
``storefront.utils.locking`` around the whole command.

Operations carrying a ``reference`` are idempotent: applying the same kind of
movement for the same reference twice leaves the balance untouched.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer, LoyaltyEntryKind
from storefront.loyalty.entry import LoyaltyEntry
from storefront.utils.settings import setting

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LoyaltyOutcome:
    """What an order did to its customer's balance."""

    used_points: bool
    points_delta: int
    balance: int


def _apply(customer_id, kind: LoyaltyEntryKind, points: int, reference=None) -> int:
    repo = current_domain.repository_for(Customer)
    entries = current_domain.repository_for(LoyaltyEntry)
    customer = repo.get(customer_id)

    if entries.applied(customer.id, kind, reference):
        logger.info(
            "Loyalty movement already applied",
            customer_id=str(customer_id),
            kind=kind.value,
            reference=str(reference),
        )
        return customer.loyalty_points

    balance = customer.record_loyalty(kind, points, reference)
    repo.add(customer)
    entries.add(LoyaltyEntry.record(customer.id, kind, points, balance, reference))

    logger.info(
        "Loyalty balance updated",
        customer_id=str(customer_id),
        kind=kind.value,
        points=points,
        balance=balance,
        reference=str(reference) if reference is not None else None,
    )
    return balance


def earn(customer_id, points: int, reference=None) -> int:
    return _apply(customer_id, LoyaltyEntryKind.EARN, points, reference)


def redeem(customer_id, points: int, reference=None) -> int:
    """Spend points; raises ``InsufficientPointsError`` when the balance is short."""
    return _apply(customer_id, LoyaltyEntryKind.REDEEM, points, reference)


def reverse(customer_id, points: int, reference=None) -> int:
    """Take back earned points. Saturates at zero and never fails on underflow."""
    return _apply(customer_id, LoyaltyEntryKind.REVERSE, points, reference)


def restore(customer_id, points: int, reference=None) -> int:
    """Give back points that were redeemed for an order that no longer exists."""
    return _apply(customer_id, LoyaltyEntryKind.RESTORE, points, reference)


def balance_of(customer_id) -> int:
    return current_domain.repository_for(Customer).get(customer_id).loyalty_points


def history(customer_id) -> list[LoyaltyEntry]:
    """Applied movements for a customer, oldest first."""
    return current_domain.repository_for(LoyaltyEntry).history(customer_id)


def apply_order_policy(customer_id, wants_to_redeem: bool, reference) -> LoyaltyOutcome:
    """Redeem when the customer opted in and can afford it, earn otherwise.

    Exactly one of the two happens per order.
    """
    redemption_points = setting("LOYALTY_REDEMPTION_POINTS")
    if wants_to_redeem and balance_of(customer_id) >= redemption_points:
        balance = redeem(customer_id, redemption_points, reference)
        return LoyaltyOutcome(used_points=True, points_delta=-redemption_points, balance=balance)

    if wants_to_redeem:
        logger.info(
            "Not enough loyalty points to redeem, earning instead",
            customer_id=str(customer_id),
            reference=str(reference),
        )
    earned = setting("LOYALTY_POINTS_PER_ORDER")
    balance = earn(customer_id, earned, reference)
    return LoyaltyOutcome(used_points=False, points_delta=earned, balance=balance)


def undo_order_effect(customer_id, points_delta: int, reference) -> int:
    """Reverse what an order did: take back earned points, give back redeemed ones."""
    if points_delta > 0:
        return reverse(customer_id, points_delta, reference)
    if points_delta < 0:
        return restore(customer_id, -points_delta, reference)
    return balance_of(customer_id)
