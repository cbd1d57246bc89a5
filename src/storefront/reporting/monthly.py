"""Monthly financial report.

Derived on demand from Payment and RefundRequest records; nothing is stored.
Month boundaries are UTC. Approved refunds count against the month in which
they were approved, at the original payment amount.
"""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.payment.payment import Payment
from storefront.refund.refund_request import RefundRequest, RefundStatus
from storefront.utils.clock import as_utc, utcnow

PAGE_SIZE = 500


@dataclass(frozen=True)
class MonthlyReport:
    year: int
    month: int
    total_payments_amount: float
    total_payments_count: int
    refund_pending_count: int
    refund_approved_count: int
    refund_rejected_count: int
    refund_total_count: int
    total_approved_refund_amount: float
    net_income: float
    last_net_income: float
    income_delta: float
    generated_at: datetime

    def to_dict(self) -> dict:
        return asdict(self)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValidationError({"month": ["Month must be between 1 and 12"]})
    if year < 1970:
        raise ValidationError({"year": ["Year must be 1970 or later"]})
    start = datetime(year, month, 1, tzinfo=UTC)
    end = datetime(year + 1, 1, 1, tzinfo=UTC) if month == 12 else datetime(year, month + 1, 1, tzinfo=UTC)
    return start, end


def previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _all(aggregate_cls) -> list:
    dao = current_domain.repository_for(aggregate_cls)._dao
    records, offset = [], 0
    while True:
        page = dao.query.limit(PAGE_SIZE).offset(offset).all().items
        records.extend(page)
        if len(page) < PAGE_SIZE:
            return records
        offset += PAGE_SIZE


def _within(value, start, end) -> bool:
    return value is not None and start <= as_utc(value) < end


def _net_income(payments, requests, start, end) -> tuple[float, float, float]:
    total_payments = sum(p.amount for p in payments if _within(p.created_at, start, end))
    total_refunds = sum(
        r.payment_amount
        for r in requests
        if r.status == RefundStatus.APPROVED.value and _within(r.decided_at, start, end)
    )
    return round(total_payments, 2), round(total_refunds, 2), round(total_payments - total_refunds, 2)


def monthly_report(year: int | None = None, month: int | None = None) -> MonthlyReport:
    """Build the report for ``year``/``month``, defaulting to the current UTC month."""
    now = utcnow()
    year = year or now.year
    month = month or now.month
    start, end = month_bounds(year, month)
    last_start, last_end = month_bounds(*previous_month(year, month))

    payments = _all(Payment)
    requests = _all(RefundRequest)

    total_payments, total_refunds, net_income = _net_income(payments, requests, start, end)
    _, _, last_net_income = _net_income(payments, requests, last_start, last_end)

    created_this_month = [r for r in requests if _within(r.created_at, start, end)]
    by_status = {status: 0 for status in RefundStatus}
    for request in created_this_month:
        by_status[RefundStatus(request.status)] += 1

    return MonthlyReport(
        year=year,
        month=month,
        total_payments_amount=total_payments,
        total_payments_count=sum(1 for p in payments if _within(p.created_at, start, end)),
        refund_pending_count=by_status[RefundStatus.PENDING],
        refund_approved_count=by_status[RefundStatus.APPROVED],
        refund_rejected_count=by_status[RefundStatus.REJECTED],
        refund_total_count=len(created_this_month),
        total_approved_refund_amount=total_refunds,
        net_income=net_income,
        last_net_income=last_net_income,
        income_delta=round(net_income - last_net_income, 2),
        generated_at=now,
    )
