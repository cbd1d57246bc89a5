"""Shopping cart collaborator.

Cart item mechanics live elsewhere; the storefront core only needs to find a
customer's cart and empty it once an order has been placed.
"""

from protean import atomic_change
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.domain import storefront
from storefront.utils.clock import utcnow


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id: String(required=True, max_length=100)
    product_code: String(max_length=50)
    size: String(max_length=5)
    quantity: Integer(required=True, min_value=1)


@storefront.aggregate
class ShoppingCart:
    customer_id: Identifier(required=True)
    items: HasMany(CartItem)
    updated_at: DateTime(default=utcnow)

    def add_item(self, product_id, quantity=1, product_code=None, size=None):
        item = CartItem(product_id=product_id, product_code=product_code, size=size, quantity=quantity)
        self.add_items(item)
        self.updated_at = utcnow()
        return item

    def clear(self):
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self.updated_at = utcnow()


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def find_by_customer(self, customer_id) -> ShoppingCart | None:
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None
