"""FastAPI endpoints for the back office: dashboard, orders, users, analytics."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query

from pizzeria.admin import reporting
from pizzeria.admin.api.schemas import UpdateOrderStatusRequest
from pizzeria.identity.access import require_role
from pizzeria.identity.auth import serialize_user
from pizzeria.identity.user import Role, User
from pizzeria.ordering import workflows
from pizzeria.shared.api import DEFAULT_PAGE_SIZE, Envelope, ok, paginate

admin = require_role(Role.ADMIN.value)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(admin)])


def _aware(moment: datetime | None) -> datetime | None:
    """Query dates without an offset are read as UTC."""
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


@router.get("/dashboard", response_model=Envelope, response_model_exclude_none=True)
def dashboard() -> Envelope:
    return ok(reporting.dashboard())


@router.get("/orders", response_model=Envelope, response_model_exclude_none=True)
def list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    payment_method: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
) -> Envelope:
    orders = reporting.list_orders(
        status=status,
        payment_status=payment_status,
        payment_method=payment_method,
        start_date=_aware(start_date),
        end_date=_aware(end_date),
    )
    window, pagination = paginate(orders, page, limit)
    return ok({"orders": [workflows.order_summary(o) for o in window]}, pagination=pagination)


@router.get("/orders/{order_id}", response_model=Envelope, response_model_exclude_none=True)
def get_order(order_id: str) -> Envelope:
    return ok({"order": workflows.order_view(workflows.find_order(order_id))})


@router.put("/orders/{order_id}/status", response_model=Envelope, response_model_exclude_none=True)
def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    user: User = Depends(admin),
) -> Envelope:
    order, previous = workflows.change_status(user, order_id, body.status, body.notes)
    return ok(
        {"order": workflows.order_view(order), "previous_status": previous},
        f"Order status updated to {order.status}",
    )


@router.get("/users", response_model=Envelope, response_model_exclude_none=True)
def list_users(
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
) -> Envelope:
    users = reporting.list_users(search)
    window, pagination = paginate(users, page, limit)
    return ok({"users": window}, pagination=pagination)


@router.get("/users/{user_id}", response_model=Envelope, response_model_exclude_none=True)
def get_user(user_id: str) -> Envelope:
    return ok(reporting.user_detail(user_id))


@router.put("/users/{user_id}/toggle-status", response_model=Envelope, response_model_exclude_none=True)
def toggle_user_status(user_id: str) -> Envelope:
    user = reporting.toggle_user(user_id)
    state = "activated" if user.is_active else "deactivated"
    return ok({"user": serialize_user(user)}, f"User {state} successfully")


@router.get("/analytics/sales", response_model=Envelope, response_model_exclude_none=True)
def sales_analytics(
    period: str = "month",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> Envelope:
    return ok(reporting.sales_report(period, _aware(start_date), _aware(end_date)))
