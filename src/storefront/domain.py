"""Storefront bounded context: Orders, Payments, Refunds and Loyalty.

Turns a shopping cart into a paid order, reconciles promotional and loyalty
discounts against the captured payment, and arbitrates refund disputes while
keeping each customer's loyalty balance consistent. Everything that touches the
loyalty counter lives in this one domain so that order deletion and loyalty
reversal commit in the same unit of work.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
