"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept separate from the internal Protean
commands. Response models read straight from aggregates.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Customers & loyalty
# ---------------------------------------------------------------------------
class RegisterCustomerRequest(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    email: str = Field(min_length=3, max_length=254)


class CustomerIdResponse(BaseModel):
    customer_id: str


class LoyaltyBalanceResponse(BaseModel):
    customer_id: str
    loyalty_points: int


class RedeemPointsRequest(BaseModel):
    points: int = Field(gt=0)
    reference: str | None = None


# ---------------------------------------------------------------------------
# Promotions
# ---------------------------------------------------------------------------
class CreatePromotionRequest(BaseModel):
    title: str
    product_code: str
    description: str | None = None
    discount_percent: float = Field(gt=0, le=100)
    start_date: datetime
    end_date: datetime
    banner_image: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Summer Sale",
                    "product_code": "TSHIRT-001",
                    "discount_percent": 20,
                    "start_date": "2026-06-01T00:00:00Z",
                    "end_date": "2026-06-30T23:59:59Z",
                }
            ]
        }
    }


class PromotionIdResponse(BaseModel):
    promotion_id: str


class PromotionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    product_code: str
    description: str | None = None
    discount_percent: float
    start_date: datetime
    end_date: datetime
    banner_image: str | None = None


class PriceQuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    active: bool
    original_price: float
    discount_percent: float
    discounted_price: float
    promotion_id: str | None = None
    promotion_title: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    customer_id: str
    product_id: str
    product_code: str
    product_name: str | None = None
    customer_name: str
    customer_address: str
    size: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    payment_type: str | None = None
    payment_id: str | None = None
    use_loyalty_points: bool = False
    has_promotion: bool | None = None
    promotion_id: str | None = None
    promotion_discount: float | None = None
    loyalty_discount: float | None = None
    total_price: float | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "product_id": "prod-001",
                    "product_code": "TSHIRT-001",
                    "customer_name": "Jane Doe",
                    "customer_address": "1 Main St, Springfield",
                    "size": "M",
                    "quantity": 1,
                    "unit_price": 100.0,
                    "payment_type": "card",
                    "use_loyalty_points": False,
                }
            ]
        }
    }


class UpdateOrderRequest(BaseModel):
    customer_name: str | None = None
    customer_address: str | None = None
    size: str | None = None
    quantity: int | None = Field(default=None, ge=1)
    payment_type: str | None = None
    payment_id: str | None = None
    status: str | None = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    product_id: str
    product_code: str
    product_name: str | None = None
    customer_name: str
    customer_address: str
    size: str
    quantity: int
    unit_price: float
    base_price: float
    total_price: float
    has_promotion: bool
    promotion_id: str | None = None
    promotion_title: str | None = None
    promotion_discount: float
    used_loyalty_points: bool
    loyalty_discount: float
    payment_type: str | None = None
    payment_id: str | None = None
    status: str
    created_at: datetime | None = None


class PlaceOrderResponse(BaseModel):
    order: OrderResponse
    loyalty_points: int
    loyalty_points_used: bool
    loyalty_discount: float


class DeleteOrderResponse(BaseModel):
    status: str
    loyalty_points: int | None = None


# ---------------------------------------------------------------------------
# Payment methods & payments
# ---------------------------------------------------------------------------
class AddPaymentMethodRequest(BaseModel):
    customer_id: str
    gateway_method_id: str


class UpdatePaymentMethodRequest(BaseModel):
    customer_id: str
    gateway_method_id: str


class PaymentMethodIdResponse(BaseModel):
    payment_method_id: str


class PaymentMethodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    brand: str | None = None
    last4: str | None = None
    exp_month: int | None = None
    exp_year: int | None = None
    is_default: bool


class ChargePaymentRequest(BaseModel):
    customer_id: str
    payment_method_id: str
    amount: float = Field(gt=0)
    order: dict | None = None
    idempotency_key: str | None = None


class PaymentIdResponse(BaseModel):
    payment_id: str


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    payment_method_id: str
    amount: float
    currency: str
    gateway_transaction_id: str
    status: str
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Refunds
# ---------------------------------------------------------------------------
class RequestRefundRequest(BaseModel):
    customer_id: str
    payment_id: str
    reason: str = Field(min_length=1)


class DecideRefundRequest(BaseModel):
    action: str
    admin_note: str | None = None


class RefundIdResponse(BaseModel):
    refund_request_id: str


class RefundRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    payment_id: str
    reason: str
    payment_amount: float
    status: str
    admin_response: str | None = None
    gateway_refund_id: str | None = None
    created_at: datetime | None = None
    decided_at: datetime | None = None


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
class MonthContext(BaseModel):
    year: int
    month: int


class MonthlyReportTotals(BaseModel):
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


class MonthlyReportResponse(BaseModel):
    context: MonthContext
    totals: MonthlyReportTotals
    generated_at: datetime
