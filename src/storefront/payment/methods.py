"""Stored payment methods: add, update, remove and read.

The gateway customer record is created lazily the first time a customer
stores a card. Duplicate cards are rejected before the gateway is asked to
attach anything. Removing a card detaches it from the gateway on a best-effort
basis; the local record is deleted regardless.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.domain import storefront
from storefront.exceptions import ConflictError, GatewayError
from storefront.gateway import get_gateway
from storefront.payment.payment import PaymentMethod

logger = structlog.get_logger(__name__)


@storefront.command(part_of="PaymentMethod")
class AddPaymentMethod:
    """Attach a gateway payment method to the customer and store it as default."""

    customer_id: Identifier(required=True)
    gateway_method_id: String(required=True, max_length=255)


@storefront.command(part_of="PaymentMethod")
class UpdatePaymentMethod:
    """Replace the card behind a stored payment method."""

    payment_method_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    gateway_method_id: String(required=True, max_length=255)


@storefront.command(part_of="PaymentMethod")
class RemovePaymentMethod:
    """Delete a stored payment method."""

    payment_method_id: Identifier(required=True)
    customer_id: Identifier(required=True)


def _methods_for(customer_id) -> list[PaymentMethod]:
    repo = current_domain.repository_for(PaymentMethod)
    return repo._dao.query.filter(customer_id=str(customer_id)).all().items


def owned_method(payment_method_id, customer_id) -> PaymentMethod:
    """Load a payment method, hiding methods that belong to someone else."""
    method = current_domain.repository_for(PaymentMethod).get(payment_method_id)
    if not method.belongs_to(customer_id):
        raise ObjectNotFoundError(f"PaymentMethod with id {payment_method_id} does not exist")
    return method


def _ensure_gateway_customer(customer: Customer) -> str:
    if customer.gateway_customer_id:
        return customer.gateway_customer_id

    gateway_customer_id = get_gateway().create_customer(email=customer.email, name=customer.name)
    customer.link_gateway_customer(gateway_customer_id)
    current_domain.repository_for(Customer).add(customer)
    logger.info("Gateway customer created", customer_id=str(customer.id), gateway_customer_id=gateway_customer_id)
    return gateway_customer_id


@storefront.command_handler(part_of=PaymentMethod)
class PaymentMethodCommandHandler:
    @handle(AddPaymentMethod)
    def add_payment_method(self, command):
        customer = current_domain.repository_for(Customer).get(command.customer_id)

        if any(m.gateway_method_id == command.gateway_method_id for m in _methods_for(command.customer_id)):
            raise ConflictError({"gateway_method_id": ["Card already added"]})

        gateway_customer_id = _ensure_gateway_customer(customer)
        card = get_gateway().attach_method(gateway_customer_id, command.gateway_method_id)

        repo = current_domain.repository_for(PaymentMethod)
        for existing in _methods_for(command.customer_id):
            if existing.is_default:
                existing.is_default = False
                repo.add(existing)

        method = PaymentMethod.register(command.customer_id, gateway_customer_id, card)
        repo.add(method)

        logger.info(
            "Payment method added",
            payment_method_id=str(method.id),
            customer_id=str(command.customer_id),
            brand=card.brand,
            last4=card.last4,
        )
        return str(method.id)

    @handle(UpdatePaymentMethod)
    def update_payment_method(self, command):
        method = owned_method(command.payment_method_id, command.customer_id)
        card = get_gateway().retrieve_method(command.gateway_method_id)
        method.replace_card(card)
        current_domain.repository_for(PaymentMethod).add(method)

    @handle(RemovePaymentMethod)
    def remove_payment_method(self, command):
        method = owned_method(command.payment_method_id, command.customer_id)

        try:
            get_gateway().detach_method(method.gateway_method_id)
        except GatewayError as exc:
            logger.warning(
                "Gateway detach failed, removing payment method locally",
                payment_method_id=str(method.id),
                gateway_method_id=method.gateway_method_id,
                error=exc.message,
            )

        current_domain.repository_for(PaymentMethod)._dao.delete(method)
        logger.info("Payment method removed", payment_method_id=str(method.id), customer_id=str(command.customer_id))


def list_payment_methods(customer_id) -> list[PaymentMethod]:
    return _methods_for(customer_id)


def get_payment_method(payment_method_id, customer_id) -> PaymentMethod:
    return owned_method(payment_method_id, customer_id)
