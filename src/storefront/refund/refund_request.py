"""RefundRequest aggregate: the refund arbitration state machine.

State Machine:
    PENDING → APPROVED (terminal)
    PENDING → REJECTED (terminal)

``state`` exposes the status as a closed set of variants so callers match on
``Pending``, ``Approved(refund_id)`` or ``Rejected(note)`` instead of comparing
strings.
"""

from dataclasses import dataclass
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront
from storefront.exceptions import InvalidStateError
from storefront.refund.events import RefundApproved, RefundRejected, RefundRequested
from storefront.utils.clock import utcnow

DEFAULT_APPROVAL_NOTE = "Approved"
DEFAULT_REJECTION_NOTE = "Rejected due to suspicious activity"


class RefundStatus(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class RefundAction(Enum):
    APPROVE = "approve"
    REJECT = "reject"


_VALID_TRANSITIONS = {
    RefundStatus.PENDING: {RefundStatus.APPROVED, RefundStatus.REJECTED},
    RefundStatus.APPROVED: set(),
    RefundStatus.REJECTED: set(),
}


@dataclass(frozen=True)
class Pending:
    pass


@dataclass(frozen=True)
class Approved:
    refund_id: str


@dataclass(frozen=True)
class Rejected:
    note: str


RefundState = Pending | Approved | Rejected


def claim_key_for(customer_id, payment_id) -> str:
    return f"{customer_id}:{payment_id}"


@storefront.aggregate
class RefundRequest:
    """A customer's request to get a captured payment back."""

    customer_id: Identifier(required=True)
    payment_id: Identifier(required=True)
    # One request per (customer, payment), also enforced by the store
    claim_key: String(max_length=255, unique=True)
    reason: Text(required=True)
    payment_amount: Float(required=True, min_value=0.0)
    currency: String(max_length=3)
    status: String(choices=RefundStatus, default=RefundStatus.PENDING.value)
    admin_response: Text()
    gateway_refund_id: String(max_length=255)
    created_at: DateTime()
    decided_at: DateTime()

    @classmethod
    def open(cls, customer_id, payment_id, reason, payment_amount, currency):
        now = utcnow()
        request = cls(
            customer_id=customer_id,
            payment_id=payment_id,
            claim_key=claim_key_for(customer_id, payment_id),
            reason=reason,
            payment_amount=payment_amount,
            currency=currency,
            status=RefundStatus.PENDING.value,
            created_at=now,
        )
        request.raise_(
            RefundRequested(
                refund_request_id=str(request.id),
                customer_id=str(customer_id),
                payment_id=str(payment_id),
                amount=payment_amount,
                reason=reason,
                requested_at=now,
            )
        )
        return request

    @property
    def state(self) -> RefundState:
        status = RefundStatus(self.status)
        if status == RefundStatus.APPROVED:
            return Approved(refund_id=self.gateway_refund_id)
        if status == RefundStatus.REJECTED:
            return Rejected(note=self.admin_response)
        return Pending()

    @property
    def is_pending(self) -> bool:
        return isinstance(self.state, Pending)

    def _assert_can_transition(self, target_status):
        current = RefundStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateError(
                {"status": [f"Refund already processed: cannot move from {current.value} to {target_status.value}"]}
            )

    def assert_pending(self):
        if not self.is_pending:
            raise InvalidStateError({"status": [f"Refund already processed ({self.status})"]})

    def approve(self, gateway_refund_id, note=None):
        self._assert_can_transition(RefundStatus.APPROVED)

        now = utcnow()
        self.status = RefundStatus.APPROVED.value
        self.gateway_refund_id = gateway_refund_id
        self.admin_response = note or DEFAULT_APPROVAL_NOTE
        self.decided_at = now

        self.raise_(
            RefundApproved(
                refund_request_id=str(self.id),
                customer_id=str(self.customer_id),
                payment_id=str(self.payment_id),
                amount=self.payment_amount,
                currency=self.currency,
                gateway_refund_id=gateway_refund_id,
                admin_response=self.admin_response,
                decided_at=now,
            )
        )

    def reject(self, note=None):
        self._assert_can_transition(RefundStatus.REJECTED)

        now = utcnow()
        self.status = RefundStatus.REJECTED.value
        self.admin_response = note or DEFAULT_REJECTION_NOTE
        self.decided_at = now

        self.raise_(
            RefundRejected(
                refund_request_id=str(self.id),
                customer_id=str(self.customer_id),
                payment_id=str(self.payment_id),
                amount=self.payment_amount,
                currency=self.currency,
                admin_response=self.admin_response,
                decided_at=now,
            )
        )


@storefront.repository(part_of=RefundRequest)
class RefundRequestRepository:
    def for_customer_and_payment(self, customer_id, payment_id) -> RefundRequest | None:
        matches = self._dao.query.filter(customer_id=str(customer_id), payment_id=str(payment_id)).all().items
        return matches[0] if matches else None

    def for_customer(self, customer_id) -> list[RefundRequest]:
        return self._dao.query.filter(customer_id=str(customer_id)).all().items

    def everything(self) -> list[RefundRequest]:
        return self._dao.query.all().items
