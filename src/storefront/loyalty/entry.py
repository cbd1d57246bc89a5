"""LoyaltyEntry aggregate: the append-only history of loyalty movements.

Entries live apart from the Customer so that loading a customer never loads
their history. Idempotency is a keyed lookup: a (customer, kind, reference)
triple is stored at most once, and the store enforces it too.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, Integer, String

from storefront.customer.customer import LoyaltyEntryKind
from storefront.domain import storefront


def entry_key(customer_id, kind: LoyaltyEntryKind, reference) -> str | None:
    if reference is None:
        return None
    return f"{customer_id}:{kind.value}:{reference}"


@storefront.aggregate
class LoyaltyEntry:
    """One applied movement of a customer's loyalty balance.

    ``reference`` names the business fact that caused the movement (usually an
    order id). Movements without a reference are never deduplicated.
    """

    customer_id: Identifier(required=True)
    reference: String(max_length=100)
    kind: String(required=True, choices=LoyaltyEntryKind)
    points: Integer(required=True, min_value=1)
    balance_after: Integer(required=True, min_value=0)
    idempotency_key: String(max_length=255, unique=True)
    recorded_at: DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def record(cls, customer_id, kind: LoyaltyEntryKind, points, balance_after, reference=None):
        return cls(
            customer_id=customer_id,
            reference=str(reference) if reference is not None else None,
            kind=kind.value,
            points=points,
            balance_after=balance_after,
            idempotency_key=entry_key(customer_id, kind, reference),
        )


@storefront.repository(part_of=LoyaltyEntry)
class LoyaltyEntryRepository:
    def applied(self, customer_id, kind: LoyaltyEntryKind, reference) -> bool:
        key = entry_key(customer_id, kind, reference)
        if key is None:
            return False
        return bool(self._dao.query.filter(idempotency_key=key).all().items)

    def history(self, customer_id) -> list[LoyaltyEntry]:
        entries = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return sorted(entries, key=lambda e: e.recorded_at)
