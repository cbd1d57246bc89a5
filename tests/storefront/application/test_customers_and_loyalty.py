"""Application tests for customer registration and the loyalty ledger."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.customer.customer import LoyaltyEntryKind
from storefront.customer.registration import RegisterCustomer, get_customer
from storefront.exceptions import ConflictError, InsufficientPointsError
from storefront.loyalty import ledger
from storefront.loyalty.entry import LoyaltyEntry
from storefront.loyalty.redemption import RedeemLoyaltyPoints
from storefront.utils.locking import customer_key, run_exclusive


class TestRegisterCustomer:
    def test_registration_normalizes_email(self, register_customer):
        customer_id = register_customer(email="  Jane@Example.COM ")

        customer = get_customer(customer_id)
        assert customer.email == "jane@example.com"
        assert customer.loyalty_points == 0

    def test_duplicate_email_conflicts(self, register_customer):
        register_customer(email="jane@example.com")
        with pytest.raises(ConflictError):
            current_domain.process(RegisterCustomer(name="Other Jane", email="JANE@example.com"), asynchronous=False)


class TestLedger:
    def test_same_reference_is_applied_once(self, customer_id):
        assert ledger.earn(customer_id, 5, reference="ord-1") == 5
        assert ledger.earn(customer_id, 5, reference="ord-1") == 5
        assert ledger.balance_of(customer_id) == 5

    def test_unreferenced_movements_always_apply(self, customer_id):
        ledger.earn(customer_id, 5)
        ledger.earn(customer_id, 5)
        assert ledger.balance_of(customer_id) == 10

    def test_entries_record_balance_history(self, customer_id):
        ledger.earn(customer_id, 5, reference="ord-1")
        ledger.redeem(customer_id, 5, reference="ord-2")

        assert sorted((e.kind, e.balance_after) for e in ledger.history(customer_id)) == [("earn", 5), ("redeem", 0)]

    def test_store_rejects_a_repeated_movement(self, customer_id):
        ledger.earn(customer_id, 5, reference="ord-1")
        repeat = LoyaltyEntry.record(customer_id, LoyaltyEntryKind.EARN, 5, balance_after=10, reference="ord-1")

        with pytest.raises(ValidationError) as exc:
            current_domain.repository_for(LoyaltyEntry).add(repeat)

        assert "idempotency_key" in exc.value.messages
        assert len(ledger.history(customer_id)) == 1

    def test_history_is_kept_per_customer(self, customer_id, register_customer):
        other = register_customer(name="Sam Roe", email="sam@example.com")
        ledger.earn(customer_id, 5, reference="ord-1")
        ledger.earn(other, 5, reference="ord-1")

        assert [e.reference for e in ledger.history(customer_id)] == ["ord-1"]
        assert ledger.balance_of(other) == 5

    def test_undo_order_effect(self, customer_id):
        ledger.earn(customer_id, 5, reference="ord-1")
        assert ledger.undo_order_effect(customer_id, 5, reference="ord-1") == 0
        assert ledger.undo_order_effect(customer_id, -5, reference="ord-2") == 5
        assert ledger.undo_order_effect(customer_id, 0, reference="ord-3") == 5

    def test_apply_order_policy(self, customer_id):
        earned = ledger.apply_order_policy(customer_id, wants_to_redeem=True, reference="ord-1")
        assert (earned.used_points, earned.points_delta, earned.balance) == (False, 5, 5)

        redeemed = ledger.apply_order_policy(customer_id, wants_to_redeem=True, reference="ord-2")
        assert (redeemed.used_points, redeemed.points_delta, redeemed.balance) == (True, -5, 0)


class TestRedeemCommand:
    def test_redeem_through_command(self, customer_id):
        ledger.earn(customer_id, 10, reference="welcome")
        command = RedeemLoyaltyPoints(customer_id=customer_id, points=5, reference="voucher-1")

        assert run_exclusive(customer_key(customer_id), command) == 5

    def test_redeeming_too_many_points_fails(self, customer_id):
        ledger.earn(customer_id, 3, reference="welcome")

        with pytest.raises(InsufficientPointsError):
            current_domain.process(RedeemLoyaltyPoints(customer_id=customer_id, points=5), asynchronous=False)
        assert ledger.balance_of(customer_id) == 3
