"""FastAPI endpoints for customers' orders."""

from fastapi import APIRouter, Depends, Query

from pizzeria.identity.access import current_user, require_verified_email
from pizzeria.identity.user import User
from pizzeria.ordering import workflows
from pizzeria.ordering.api.schemas import (
    CancelOrderRequest,
    ConfirmCodRequest,
    CreateOrderRequest,
    RateOrderRequest,
    VerifyPaymentRequest,
)
from pizzeria.shared.api import DEFAULT_PAGE_SIZE, Envelope, ok, paginate

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("/create", status_code=201, response_model=Envelope, response_model_exclude_none=True)
def create_order(body: CreateOrderRequest, user: User = Depends(require_verified_email)) -> Envelope:
    order, gateway_order = workflows.place_order(
        user,
        items=[item.model_dump() for item in body.items],
        delivery_address=body.delivery_address.model_dump(),
        contact_phone=body.contact_phone,
        payment_method=body.payment_method,
        order_notes=body.order_notes,
    )
    data = {"order": workflows.order_view(order)}
    if gateway_order is not None:
        data["razorpay_order"] = gateway_order
    return ok(data, "Order created successfully")


@router.post("/verify-payment", response_model=Envelope, response_model_exclude_none=True)
def verify_payment(body: VerifyPaymentRequest, user: User = Depends(current_user)) -> Envelope:
    order = workflows.verify_payment(
        user,
        body.order_id,
        gateway_order_id=body.razorpay_order_id,
        gateway_payment_id=body.razorpay_payment_id,
        signature=body.razorpay_signature,
    )
    return ok({"order": workflows.order_view(order)}, "Payment verified successfully")


@router.post("/confirm-cod", response_model=Envelope, response_model_exclude_none=True)
def confirm_cod(body: ConfirmCodRequest, user: User = Depends(current_user)) -> Envelope:
    order = workflows.confirm_cash_on_delivery(user, body.order_id)
    return ok({"order": workflows.order_view(order)}, "Order confirmed successfully")


@router.get("/my-orders", response_model=Envelope, response_model_exclude_none=True)
def my_orders(
    status: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    user: User = Depends(current_user),
) -> Envelope:
    orders = workflows.list_orders_for(user, status)
    window, pagination = paginate(orders, page, limit)
    return ok({"orders": [workflows.order_summary(o) for o in window]}, pagination=pagination)


@router.get("/{order_id}", response_model=Envelope, response_model_exclude_none=True)
def get_order(order_id: str, user: User = Depends(current_user)) -> Envelope:
    order = workflows.get_order_for(user, order_id)
    return ok({"order": workflows.order_view(order)})


@router.get("/{order_id}/track", response_model=Envelope, response_model_exclude_none=True)
def track_order(order_id: str, user: User = Depends(current_user)) -> Envelope:
    return ok({"tracking": workflows.track(user, order_id)})


@router.put("/{order_id}/cancel", response_model=Envelope, response_model_exclude_none=True)
def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    user: User = Depends(current_user),
) -> Envelope:
    order = workflows.cancel_by_customer(user, order_id, reason=body.reason if body else None)
    return ok({"order": workflows.order_view(order)}, "Order cancelled successfully")


@router.post("/{order_id}/rate", response_model=Envelope, response_model_exclude_none=True)
def rate_order(order_id: str, body: RateOrderRequest, user: User = Depends(current_user)) -> Envelope:
    order = workflows.rate_order(user, order_id, body.rating, body.review)
    return ok({"order": workflows.order_view(order, include_history=False)}, "Thank you for your feedback!")
