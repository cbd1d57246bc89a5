"""Application tests for the monthly financial report."""

from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.payment.payment import Payment
from storefront.refund.refund_request import RefundRequest, RefundStatus
from storefront.reporting.monthly import month_bounds, monthly_report, previous_month


def _payment(amount, when, customer_id="cust-001"):
    payment = Payment(
        customer_id=customer_id,
        payment_method_id="pm-001",
        amount=amount,
        currency="usd",
        gateway_transaction_id=f"pi_{amount}_{when:%Y%m%d}",
        status="succeeded",
        created_at=when,
    )
    current_domain.repository_for(Payment).add(payment)
    return payment


def _refund(payment, status, created_at, decided_at=None):
    request = RefundRequest(
        customer_id=payment.customer_id,
        payment_id=payment.id,
        reason="Not as described",
        payment_amount=payment.amount,
        currency="usd",
        status=status.value,
        created_at=created_at,
        decided_at=decided_at,
    )
    current_domain.repository_for(RefundRequest).add(request)
    return request


@pytest.fixture()
def march_ledger():
    _payment(100.0, datetime(2026, 2, 20, tzinfo=UTC))

    large = _payment(200.0, datetime(2026, 3, 2, tzinfo=UTC))
    medium = _payment(250.0, datetime(2026, 3, 10, tzinfo=UTC))
    small = _payment(50.0, datetime(2026, 3, 31, 23, 59, tzinfo=UTC))

    _refund(small, RefundStatus.APPROVED, datetime(2026, 3, 31, 23, 59, 30, tzinfo=UTC), datetime(2026, 3, 31, 23, 59, 45, tzinfo=UTC))
    _refund(large, RefundStatus.PENDING, datetime(2026, 3, 5, tzinfo=UTC))
    _refund(medium, RefundStatus.REJECTED, datetime(2026, 3, 12, tzinfo=UTC), datetime(2026, 3, 13, tzinfo=UTC))

    _payment(75.0, datetime(2026, 4, 1, tzinfo=UTC))


class TestMonthlyReport:
    def test_net_income_is_payments_minus_approved_refunds(self, march_ledger):
        report = monthly_report(2026, 3)

        assert report.total_payments_amount == 500.0
        assert report.total_payments_count == 3
        assert report.total_approved_refund_amount == 50.0
        assert report.net_income == 450.0

    def test_compares_with_previous_month(self, march_ledger):
        report = monthly_report(2026, 3)

        assert report.last_net_income == 100.0
        assert report.income_delta == 350.0

    def test_counts_requests_created_in_month_by_status(self, march_ledger):
        report = monthly_report(2026, 3)

        assert report.refund_pending_count == 1
        assert report.refund_approved_count == 1
        assert report.refund_rejected_count == 1
        assert report.refund_total_count == 3

    def test_refund_counts_against_month_it_was_approved(self):
        payment = _payment(80.0, datetime(2026, 5, 30, tzinfo=UTC))
        _refund(payment, RefundStatus.APPROVED, datetime(2026, 5, 31, tzinfo=UTC), datetime(2026, 6, 2, tzinfo=UTC))

        may = monthly_report(2026, 5)
        june = monthly_report(2026, 6)

        assert may.net_income == 80.0
        assert may.refund_approved_count == 1
        assert june.total_approved_refund_amount == 80.0
        assert june.net_income == -80.0
        assert june.last_net_income == 80.0

    def test_empty_month_reports_zeroes(self):
        report = monthly_report(2025, 1)

        assert report.total_payments_amount == 0
        assert report.net_income == 0
        assert report.refund_total_count == 0

    def test_defaults_to_current_month(self):
        now = datetime.now(UTC)
        report = monthly_report()
        assert (report.year, report.month) == (now.year, now.month)

    def test_invalid_month_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            monthly_report(2026, 13)
        assert "month" in exc.value.messages


class TestMonthArithmetic:
    def test_december_bounds_roll_into_next_year(self):
        start, end = month_bounds(2025, 12)
        assert start == datetime(2025, 12, 1, tzinfo=UTC)
        assert end == datetime(2026, 1, 1, tzinfo=UTC)

    def test_previous_month_of_january(self):
        assert previous_month(2026, 1) == (2025, 12)
