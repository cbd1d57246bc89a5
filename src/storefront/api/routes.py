"""FastAPI routes for the storefront API."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddPaymentMethodRequest,
    ChargePaymentRequest,
    CreatePromotionRequest,
    CustomerIdResponse,
    DecideRefundRequest,
    DeleteOrderResponse,
    LoyaltyBalanceResponse,
    MonthContext,
    MonthlyReportResponse,
    MonthlyReportTotals,
    OrderResponse,
    PaymentIdResponse,
    PaymentMethodIdResponse,
    PaymentMethodResponse,
    PaymentResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    PriceQuoteResponse,
    PromotionIdResponse,
    PromotionResponse,
    RedeemPointsRequest,
    RefundIdResponse,
    RefundRequestResponse,
    RegisterCustomerRequest,
    RequestRefundRequest,
    StatusResponse,
    UpdateOrderRequest,
    UpdatePaymentMethodRequest,
)
from storefront.customer.registration import RegisterCustomer, get_customer
from storefront.loyalty.redemption import RedeemLoyaltyPoints
from storefront.order.deletion import delete_order
from storefront.order.maintenance import UpdateOrder, get_order, list_orders, orders_for_customer
from storefront.order.placement import PlaceOrder, place_order
from storefront.payment.capture import ChargePayment, payments_for_customer
from storefront.payment.methods import (
    AddPaymentMethod,
    RemovePaymentMethod,
    UpdatePaymentMethod,
    get_payment_method,
    list_payment_methods,
)
from storefront.promotion.management import CreatePromotion, list_promotions
from storefront.promotion.pricing import quote_product
from storefront.refund.arbitration import decide_refund
from storefront.refund.submission import RequestRefund, all_refunds, refunds_for_customer, request_refund
from storefront.reporting.monthly import monthly_report
from storefront.utils.locking import customer_key, run_exclusive

# ---------------------------------------------------------------------------
# Customer Router
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customers", tags=["customers"])


@customer_router.post("", status_code=201, response_model=CustomerIdResponse)
async def register_customer(body: RegisterCustomerRequest) -> CustomerIdResponse:
    """Register a shopper with an empty loyalty balance."""
    command = RegisterCustomer(name=body.name, email=body.email)
    result = current_domain.process(command, asynchronous=False)
    return CustomerIdResponse(customer_id=result)


@customer_router.get("/{customer_id}/loyalty", response_model=LoyaltyBalanceResponse)
async def loyalty_balance(customer_id: str) -> LoyaltyBalanceResponse:
    customer = get_customer(customer_id)
    return LoyaltyBalanceResponse(customer_id=customer_id, loyalty_points=customer.loyalty_points)


@customer_router.post("/{customer_id}/loyalty/redeem", response_model=LoyaltyBalanceResponse)
async def redeem_points(customer_id: str, body: RedeemPointsRequest) -> LoyaltyBalanceResponse:
    """Spend loyalty points. Fails with 422 when the balance is too low."""
    command = RedeemLoyaltyPoints(customer_id=customer_id, points=body.points, reference=body.reference)
    balance = run_exclusive(customer_key(customer_id), command)
    return LoyaltyBalanceResponse(customer_id=customer_id, loyalty_points=balance)


# ---------------------------------------------------------------------------
# Promotion Router
# ---------------------------------------------------------------------------
promotion_router = APIRouter(prefix="/promotions", tags=["promotions"])


@promotion_router.post("", status_code=201, response_model=PromotionIdResponse)
async def create_promotion(body: CreatePromotionRequest) -> PromotionIdResponse:
    command = CreatePromotion(**body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return PromotionIdResponse(promotion_id=result)


@promotion_router.get("", response_model=list[PromotionResponse])
async def get_promotions(active_only: bool = False) -> list[PromotionResponse]:
    return [PromotionResponse.model_validate(p) for p in list_promotions(active_only=active_only)]


@promotion_router.get("/quote", response_model=PriceQuoteResponse)
async def get_quote(product_code: str, price: float = Query(ge=0)) -> PriceQuoteResponse:
    """Price a product against the promotions active right now."""
    return PriceQuoteResponse.model_validate(quote_product(product_code, price))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=PlaceOrderResponse)
async def create_order(body: PlaceOrderRequest) -> PlaceOrderResponse:
    """Place an order. Pricing is recomputed on the server and client totals are verified."""
    order_id = place_order(PlaceOrder(**body.model_dump()))
    order = get_order(order_id)
    customer = get_customer(body.customer_id)
    return PlaceOrderResponse(
        order=OrderResponse.model_validate(order),
        loyalty_points=customer.loyalty_points,
        loyalty_points_used=order.used_loyalty_points,
        loyalty_discount=order.loyalty_discount,
    )


@order_router.get("", response_model=list[OrderResponse])
async def get_orders() -> list[OrderResponse]:
    return [OrderResponse.model_validate(o) for o in list_orders()]


@order_router.get("/mine", response_model=list[OrderResponse])
async def get_my_orders(customer_id: str) -> list[OrderResponse]:
    return [OrderResponse.model_validate(o) for o in orders_for_customer(customer_id)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_single_order(order_id: str) -> OrderResponse:
    return OrderResponse.model_validate(get_order(order_id))


@order_router.put("/{order_id}", response_model=OrderResponse)
async def update_order(order_id: str, body: UpdateOrderRequest) -> OrderResponse:
    command = UpdateOrder(order_id=order_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return OrderResponse.model_validate(get_order(order_id))


@order_router.delete("/{order_id}", response_model=DeleteOrderResponse)
async def remove_order(order_id: str) -> DeleteOrderResponse:
    """Delete an order and undo its loyalty effect."""
    balance = delete_order(order_id)
    return DeleteOrderResponse(status="deleted", loyalty_points=balance)


# ---------------------------------------------------------------------------
# Payment Method Router
# ---------------------------------------------------------------------------
payment_method_router = APIRouter(prefix="/payment-methods", tags=["payment-methods"])


@payment_method_router.post("", status_code=201, response_model=PaymentMethodIdResponse)
async def add_payment_method(body: AddPaymentMethodRequest) -> PaymentMethodIdResponse:
    command = AddPaymentMethod(customer_id=body.customer_id, gateway_method_id=body.gateway_method_id)
    result = current_domain.process(command, asynchronous=False)
    return PaymentMethodIdResponse(payment_method_id=result)


@payment_method_router.get("", response_model=list[PaymentMethodResponse])
async def get_payment_methods(customer_id: str) -> list[PaymentMethodResponse]:
    return [PaymentMethodResponse.model_validate(m) for m in list_payment_methods(customer_id)]


@payment_method_router.get("/{payment_method_id}", response_model=PaymentMethodResponse)
async def get_single_payment_method(payment_method_id: str, customer_id: str) -> PaymentMethodResponse:
    return PaymentMethodResponse.model_validate(get_payment_method(payment_method_id, customer_id))


@payment_method_router.put("/{payment_method_id}", response_model=PaymentMethodResponse)
async def update_payment_method(payment_method_id: str, body: UpdatePaymentMethodRequest) -> PaymentMethodResponse:
    command = UpdatePaymentMethod(
        payment_method_id=payment_method_id,
        customer_id=body.customer_id,
        gateway_method_id=body.gateway_method_id,
    )
    current_domain.process(command, asynchronous=False)
    return PaymentMethodResponse.model_validate(get_payment_method(payment_method_id, body.customer_id))


@payment_method_router.delete("/{payment_method_id}", response_model=StatusResponse)
async def remove_payment_method(payment_method_id: str, customer_id: str) -> StatusResponse:
    command = RemovePaymentMethod(payment_method_id=payment_method_id, customer_id=customer_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deleted")


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=PaymentIdResponse)
async def create_payment(body: ChargePaymentRequest) -> PaymentIdResponse:
    """Charge a stored payment method. 502 on decline, 504 when the outcome is unknown."""
    command = ChargePayment(
        customer_id=body.customer_id,
        payment_method_id=body.payment_method_id,
        amount=body.amount,
        order_context=json.dumps(body.order) if body.order else None,
        idempotency_key=body.idempotency_key,
    )
    result = current_domain.process(command, asynchronous=False)
    return PaymentIdResponse(payment_id=result)


@payment_router.get("/mine", response_model=list[PaymentResponse])
async def get_my_payments(customer_id: str) -> list[PaymentResponse]:
    return [PaymentResponse.model_validate(p) for p in payments_for_customer(customer_id)]


# ---------------------------------------------------------------------------
# Refund Router
# ---------------------------------------------------------------------------
refund_router = APIRouter(prefix="/refunds", tags=["refunds"])


@refund_router.post("", status_code=201, response_model=RefundIdResponse)
async def create_refund_request(body: RequestRefundRequest) -> RefundIdResponse:
    """Open a refund request. 409 if one already exists for this payment."""
    command = RequestRefund(customer_id=body.customer_id, payment_id=body.payment_id, reason=body.reason)
    return RefundIdResponse(refund_request_id=request_refund(command))


@refund_router.put("/{refund_request_id}/decision", response_model=StatusResponse)
async def decide_refund_request(refund_request_id: str, body: DecideRefundRequest) -> StatusResponse:
    """Approve or reject a pending request. 409 once it has been decided."""
    status = decide_refund(refund_request_id, body.action, body.admin_note)
    return StatusResponse(status=status)


@refund_router.get("/mine", response_model=list[RefundRequestResponse])
async def get_my_refunds(customer_id: str) -> list[RefundRequestResponse]:
    return [RefundRequestResponse.model_validate(r) for r in refunds_for_customer(customer_id)]


@refund_router.get("", response_model=list[RefundRequestResponse])
async def get_all_refunds() -> list[RefundRequestResponse]:
    return [RefundRequestResponse.model_validate(r) for r in all_refunds()]


# ---------------------------------------------------------------------------
# Report Router
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/reports", tags=["reports"])


@report_router.get("/monthly", response_model=MonthlyReportResponse)
async def get_monthly_report(
    year: int | None = Query(default=None, ge=1970),
    month: int | None = Query(default=None, ge=1, le=12),
) -> MonthlyReportResponse:
    """Net income for a UTC calendar month, defaulting to the current month."""
    report = monthly_report(year, month)
    return MonthlyReportResponse(
        context=MonthContext(year=report.year, month=report.month),
        totals=MonthlyReportTotals(**{k: v for k, v in report.to_dict().items() if k in MonthlyReportTotals.model_fields}),
        generated_at=report.generated_at,
    )


routers = [
    customer_router,
    promotion_router,
    order_router,
    payment_method_router,
    payment_router,
    refund_router,
    report_router,
]
