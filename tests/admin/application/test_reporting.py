"""Application tests for back-office reporting."""

from datetime import UTC, datetime, timedelta

import pytest

from pizzeria.admin import reporting
from pizzeria.ordering import workflows
from pizzeria.shared.errors import NotFound, ValidationFailure

DELIVERY_PATH = ("preparing", "ready", "out-for-delivery", "delivered")


@pytest.fixture()
def deliver(customer, admin):
    def _deliver(order, user=None):
        workflows.confirm_cash_on_delivery(user or customer, order.order_number)
        for status in DELIVERY_PATH:
            workflows.change_status(admin, order.order_number, status)
        return workflows.find_order(order.order_number)

    return _deliver


class TestDashboard:
    def test_counts_and_revenue(self, place_order, deliver, customer, admin):
        delivered, _ = place_order(payment_method="cod")
        deliver(delivered)
        place_order(payment_method="cod")
        cancelled, _ = place_order(payment_method="cod")
        workflows.cancel_by_customer(customer, cancelled.order_number)

        stats = reporting.dashboard()["statistics"]

        assert stats["orders"]["total"] == 2
        assert stats["orders"]["today"] == 2
        assert stats["orders"]["pending"] == 1
        # Only delivered orders count as revenue
        assert stats["revenue"]["total"] == 678
        assert stats["users"]["total"] == 1

    def test_popular_pizzas(self, place_order):
        place_order(payment_method="cod")
        place_order(payment_method="cod")
        [top] = reporting.dashboard()["popular_pizzas"]
        assert (top["name"], top["total_ordered"], top["revenue"]) == ("Margherita", 4, 1196)

    def test_low_stock_items(self, make_item):
        make_item("Mozzarella", current_stock=3, min_stock_level=10)
        make_item("Cheddar", current_stock=60)
        low = reporting.dashboard()["low_stock_items"]
        assert [item["name"] for item in low] == ["Mozzarella"]


class TestUsers:
    def test_list_users_excludes_admins(self, customer, other_customer, admin, place_order):
        place_order(payment_method="cod")
        users = {u["email"]: u for u in reporting.list_users()}
        assert set(users) == {customer.email, other_customer.email}
        assert users[customer.email]["order_count"] == 1

    def test_search(self, customer, other_customer):
        assert [u["name"] for u in reporting.list_users(search="ravi")] == ["Ravi Kumar"]

    def test_user_detail(self, customer, place_order, deliver):
        order, _ = place_order(payment_method="cod")
        deliver(order)
        detail = reporting.user_detail(str(customer.id))
        assert detail["statistics"] == {"total_orders": 1, "total_spent": 678, "cancelled_orders": 0}
        assert detail["recent_orders"][0]["order_id"] == order.order_number

    def test_toggle_user(self, customer):
        assert reporting.toggle_user(str(customer.id)).is_active is False
        assert reporting.toggle_user(str(customer.id)).is_active is True

    def test_admins_cannot_be_toggled(self, admin):
        with pytest.raises(ValidationFailure):
            reporting.toggle_user(str(admin.id))

    def test_unknown_user(self):
        with pytest.raises(NotFound):
            reporting.user_detail("missing")


class TestOrderListing:
    def test_filters(self, place_order, customer):
        first, _ = place_order(payment_method="cod")
        place_order(payment_method="razorpay")
        workflows.confirm_cash_on_delivery(customer, first.order_number)

        assert [o.order_number for o in reporting.list_orders(status="confirmed")] == [first.order_number]
        assert len(reporting.list_orders(payment_method="razorpay")) == 1
        assert reporting.list_orders(end_date=datetime.now(UTC) - timedelta(days=1)) == []


class TestSalesReport:
    def test_month_report(self, place_order, deliver):
        order, _ = place_order(payment_method="cod")
        deliver(order)
        place_order(payment_method="cod")

        report = reporting.sales_report("month")

        assert report["summary"] == {"total_revenue": 678, "total_orders": 1, "avg_order_value": 678}
        [bucket] = report["sales_data"]
        assert bucket["bucket"] == order.created_at.strftime("%Y-%m-%d")
        assert report["top_pizzas"][0]["total_ordered"] == 2

    def test_explicit_range_excludes_other_orders(self, place_order, deliver):
        order, _ = place_order(payment_method="cod")
        deliver(order)
        start = datetime.now(UTC) - timedelta(days=10)
        end = datetime.now(UTC) - timedelta(days=5)
        report = reporting.sales_report("day", start_date=start, end_date=end)
        assert report["sales_data"] == []
        assert report["summary"]["avg_order_value"] == 0

    def test_unknown_period(self):
        with pytest.raises(ValidationFailure):
            reporting.sales_report("decade")
