"""Customer registration and customer lookups."""

from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.customer.customer import Customer
from storefront.domain import storefront
from storefront.exceptions import ConflictError


@storefront.command(part_of="Customer")
class RegisterCustomer:
    """Create a storefront customer with an empty loyalty balance."""

    name: String(required=True, max_length=150)
    email: String(required=True, max_length=254)


@storefront.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repo = current_domain.repository_for(Customer)
        email = command.email.strip().lower()
        if repo._dao.query.filter(email=email).all().items:
            raise ConflictError({"email": [f"A customer with email {email} already exists"]})

        customer = Customer.register(name=command.name, email=email)
        repo.add(customer)
        return str(customer.id)


def get_customer(customer_id) -> Customer:
    return current_domain.repository_for(Customer).get(customer_id)
