"""Back-office reporting: dashboard figures, order and user listings, sales analytics."""

from collections import Counter, defaultdict
from datetime import UTC, datetime, timedelta

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from pizzeria.identity.account import SetUserActive
from pizzeria.identity.auth import serialize_user
from pizzeria.identity.user import Role, User
from pizzeria.inventory import ledger
from pizzeria.ordering.order import ACTIVE_STATUSES, Order, OrderStatus
from pizzeria.ordering.workflows import order_summary
from pizzeria.shared.errors import NotFound, ValidationFailure
from pizzeria.shared.query import fetch

RECENT_ORDERS = 10
POPULAR_PIZZAS = 5
TOP_PIZZAS = 10
DASHBOARD_LOW_STOCK = 5
ACTIVE_USER_DAYS = 30

CANCELLED = OrderStatus.CANCELLED.value
DELIVERED = OrderStatus.DELIVERED.value


def _day_start(moment):
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _period_bounds(now):
    today = _day_start(now)
    # Weeks start on Sunday
    week = today - timedelta(days=(today.weekday() + 1) % 7)
    month = today.replace(day=1)
    return today, week, month


def _revenue(orders):
    return round(sum(o.pricing.total for o in orders if o.status == DELIVERED), 2)


def popular_pizzas(orders, limit=POPULAR_PIZZAS):
    """Best sellers by quantity among ``orders``, with the revenue they brought."""
    quantities = Counter()
    revenue = defaultdict(float)
    names = {}
    for order in orders:
        for item in order.items:
            key = str(item.pizza_id)
            quantities[key] += item.quantity
            revenue[key] += item.total_item_price
            names[key] = item.name
    return [
        {"pizza_id": key, "name": names[key], "total_ordered": count, "revenue": round(revenue[key], 2)}
        for key, count in quantities.most_common(limit)
    ]


def dashboard(now=None):
    now = now or datetime.now(UTC)
    today, week, month = _period_bounds(now)
    orders = fetch(Order)
    live = [o for o in orders if o.status != CANCELLED]

    customers = fetch(User, role=Role.USER.value)
    active_since = now - timedelta(days=ACTIVE_USER_DAYS)

    distribution = Counter(o.status for o in live)
    recent = sorted(orders, key=lambda o: o.created_at, reverse=True)[:RECENT_ORDERS]

    return {
        "statistics": {
            "orders": {
                "total": len(live),
                "today": sum(1 for o in live if o.created_at >= today),
                "week": sum(1 for o in live if o.created_at >= week),
                "month": sum(1 for o in live if o.created_at >= month),
                "pending": sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
                "active": sum(1 for o in orders if o.status in ACTIVE_STATUSES),
            },
            "revenue": {
                "total": _revenue(orders),
                "today": _revenue(o for o in orders if o.created_at >= today),
                "month": _revenue(o for o in orders if o.created_at >= month),
            },
            "users": {
                "total": len(customers),
                "active": sum(1 for u in customers if u.last_login and u.last_login >= active_since),
            },
        },
        "recent_orders": [order_summary(o) for o in recent],
        "low_stock_items": [ledger.item_view(i, now) for i in ledger.low_stock_items()[:DASHBOARD_LOW_STOCK]],
        "order_status_distribution": [
            {"status": status, "count": count} for status, count in distribution.most_common()
        ],
        "popular_pizzas": popular_pizzas(live),
    }


def list_orders(status=None, payment_status=None, payment_method=None, start_date=None, end_date=None):
    filters = {}
    if status:
        filters["status"] = status
    if payment_status:
        filters["payment_status"] = payment_status
    if payment_method:
        filters["payment_method"] = payment_method

    orders = fetch(Order, **filters)
    if start_date:
        orders = [o for o in orders if o.created_at >= start_date]
    if end_date:
        orders = [o for o in orders if o.created_at <= end_date]
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def get_user(user_id):
    try:
        return current_domain.repository_for(User).get(user_id)
    except ObjectNotFoundError:
        raise NotFound("User not found") from None


def list_users(search=None):
    users = fetch(User, role=Role.USER.value)
    if search:
        needle = search.strip().lower()
        users = [u for u in users if needle in u.name.lower() or needle in u.email.lower()]
    users = sorted(users, key=lambda u: u.created_at, reverse=True)

    live_counts = Counter(str(o.user_id) for o in fetch(Order) if o.status != CANCELLED)
    return [{**serialize_user(u), "order_count": live_counts[str(u.id)]} for u in users]


def user_detail(user_id):
    user = get_user(user_id)
    orders = sorted(fetch(Order, user_id=str(user.id)), key=lambda o: o.created_at, reverse=True)
    return {
        "user": serialize_user(user),
        "statistics": {
            "total_orders": sum(1 for o in orders if o.status != CANCELLED),
            "total_spent": _revenue(orders),
            "cancelled_orders": sum(1 for o in orders if o.status == CANCELLED),
        },
        "recent_orders": [order_summary(o) for o in orders[:RECENT_ORDERS]],
    }


def toggle_user(user_id):
    user = get_user(user_id)
    if user.is_admin:
        raise ValidationFailure("Cannot modify admin user status")
    current_domain.process(SetUserActive(user_id=str(user.id), is_active=not user.is_active), asynchronous=False)
    return get_user(user_id)


# ---------------------------------------------------------------------------
# Sales analytics
# ---------------------------------------------------------------------------
_BUCKET_FORMATS = {"day": "%Y-%m-%d %H:00", "week": "%Y-%m-%d", "month": "%Y-%m-%d", "year": "%Y-%m"}


def sales_report(period="month", start_date=None, end_date=None, now=None):
    """Delivered-order revenue bucketed by hour, day or month depending on ``period``."""
    if period not in _BUCKET_FORMATS:
        raise ValidationFailure(f"Unknown period: {period}")

    now = now or datetime.now(UTC)
    if not (start_date and end_date):
        today, week, month = _period_bounds(now)
        start_date = {
            "day": today,
            "week": week,
            "month": month,
            "year": today.replace(month=1, day=1),
        }[period]
        end_date = today + timedelta(days=1) if period == "day" else now

    delivered = [
        o for o in fetch(Order, status=DELIVERED) if start_date <= o.created_at <= end_date
    ]

    buckets = defaultdict(list)
    for order in delivered:
        buckets[order.created_at.strftime(_BUCKET_FORMATS[period])].append(order.pricing.total)

    sales = [
        {
            "bucket": key,
            "revenue": round(sum(totals), 2),
            "orders": len(totals),
            "avg_order_value": round(sum(totals) / len(totals), 2),
        }
        for key, totals in sorted(buckets.items())
    ]
    total_revenue = round(sum(s["revenue"] for s in sales), 2)
    total_orders = sum(s["orders"] for s in sales)
    return {
        "period": period,
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "sales_data": sales,
        "top_pizzas": popular_pizzas(delivered, TOP_PIZZAS),
        "summary": {
            "total_revenue": total_revenue,
            "total_orders": total_orders,
            "avg_order_value": round(total_revenue / total_orders, 2) if total_orders else 0,
        },
    }
