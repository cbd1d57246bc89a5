import json
import os

import pytest
from protean import current_domain


@pytest.fixture(scope="session")
def _storefront_domain(request):
    """Initialize the storefront domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    from storefront.gateway import reset_gateway
    from storefront.notification.channel import reset_channels
    from storefront.notification.documents import reset_renderer

    reset_gateway()
    reset_channels()
    reset_renderer()

    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()

    reset_gateway()
    reset_channels()
    reset_renderer()


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------
@pytest.fixture()
def gateway():
    """A fresh FakeGateway installed as the active payment gateway."""
    from storefront.gateway import set_gateway
    from storefront.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def mailbox():
    """The fake email adapter that records every sent message."""
    from storefront.notification.channel import get_email_channel

    return get_email_channel()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def register_customer():
    from storefront.customer.registration import RegisterCustomer

    def _register(name="Jane Doe", email="jane@example.com"):
        return current_domain.process(RegisterCustomer(name=name, email=email), asynchronous=False)

    return _register


@pytest.fixture()
def customer_id(register_customer):
    return register_customer()


@pytest.fixture()
def create_promotion():
    from datetime import UTC, datetime, timedelta

    from storefront.promotion.management import CreatePromotion

    def _create(product_code="TSHIRT-001", discount_percent=20.0, title="Summer Sale", start=None, end=None):
        now = datetime.now(UTC)
        return current_domain.process(
            CreatePromotion(
                title=title,
                product_code=product_code,
                discount_percent=discount_percent,
                start_date=start or now - timedelta(days=1),
                end_date=end or now + timedelta(days=1),
            ),
            asynchronous=False,
        )

    return _create


@pytest.fixture()
def place():
    """Place an order through the locked entry point; keyword overrides go into the command."""
    from storefront.order.placement import PlaceOrder, place_order

    def _place(customer_id, **overrides):
        data = {
            "customer_id": customer_id,
            "product_id": "prod-001",
            "product_code": "TSHIRT-001",
            "product_name": "Classic Tee",
            "customer_name": "Jane Doe",
            "customer_address": "1 Main St, Springfield",
            "size": "M",
            "quantity": 1,
            "unit_price": 100.0,
            "payment_type": "card",
        }
        data.update(overrides)
        return place_order(PlaceOrder(**data))

    return _place


@pytest.fixture()
def add_card(gateway):
    from storefront.payment.methods import AddPaymentMethod

    def _add(customer_id, gateway_method_id="pm_card_visa"):
        return current_domain.process(
            AddPaymentMethod(customer_id=customer_id, gateway_method_id=gateway_method_id),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def charge(gateway):
    from storefront.payment.capture import ChargePayment

    def _charge(customer_id, payment_method_id, amount=50.0, order=None, idempotency_key=None):
        return current_domain.process(
            ChargePayment(
                customer_id=customer_id,
                payment_method_id=payment_method_id,
                amount=amount,
                order_context=json.dumps(order) if order else None,
                idempotency_key=idempotency_key,
            ),
            asynchronous=False,
        )

    return _charge


@pytest.fixture()
def paid_customer(customer_id, add_card, charge):
    """A customer with a stored card and one succeeded $50 payment."""
    payment_method_id = add_card(customer_id)
    payment_id = charge(customer_id, payment_method_id, amount=50.0)
    return {"customer_id": customer_id, "payment_method_id": payment_method_id, "payment_id": payment_id}
