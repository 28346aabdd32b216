"""Tests for the InventoryItem aggregate: classification, clamping and the stock ledger."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from pizzeria.inventory.events import LowStockDetected, StockAdjusted
from pizzeria.inventory.item import InventoryItem, classify


def _item(current_stock=100.0, min_stock_level=20.0, max_stock_level=200.0):
    return InventoryItem.create(
        name="Mozzarella",
        category="cheese",
        unit="kg",
        current_stock=current_stock,
        min_stock_level=min_stock_level,
        max_stock_level=max_stock_level,
        price_per_unit=450.0,
    )


class TestClassification:
    @pytest.mark.parametrize(
        "stock, expected",
        [(10, "critical"), (0, "critical"), (20, "low"), (15, "low"), (100, "normal"), (200, "overstocked"), (250, "overstocked")],
    )
    def test_thresholds(self, stock, expected):
        assert classify(stock, 20, 200) == expected

    def test_item_status_follows_stock(self):
        assert _item(current_stock=10).stock_status == "critical"
        assert _item(current_stock=100).stock_status == "normal"

    def test_stock_value(self):
        assert _item(current_stock=2.5).stock_value == 1125.0

    def test_max_must_exceed_min(self):
        with pytest.raises(ValidationError) as exc:
            _item(min_stock_level=50, max_stock_level=50)
        assert "max_stock_level" in exc.value.messages


class TestStockAdjustments:
    def test_restock_adds(self):
        item = _item(current_stock=30)
        movement = item.adjust_stock("restock", 20, reason="Weekly delivery")
        assert item.current_stock == 50
        assert (movement.previous_stock, movement.new_stock) == (30, 50)

    def test_adjustment_sets_absolute_value(self):
        item = _item(current_stock=30)
        item.adjust_stock("adjustment", 42)
        assert item.current_stock == 42

    def test_consumption_and_wastage_subtract(self):
        item = _item(current_stock=30)
        item.adjust_stock("consumption", 5)
        item.adjust_stock("wastage", 3)
        assert item.current_stock == 22

    def test_stock_never_goes_negative(self):
        item = _item(current_stock=3)
        movement = item.adjust_stock("consumption", 5)
        assert item.current_stock == 0
        assert movement.new_stock == 0
        assert movement.quantity == 5

    def test_every_adjustment_writes_one_movement(self):
        item = _item(current_stock=3)
        item.adjust_stock("consumption", 5)
        item.adjust_stock("consumption", 1)
        item.adjust_stock("restock", 10)
        assert len(item.stock_history) == 3
        assert [m.action for m in item.stock_history] == ["consumption", "consumption", "restock"]

    def test_unknown_action_is_rejected(self):
        item = _item()
        with pytest.raises(ValidationError):
            item.adjust_stock("theft", 1)
        assert len(item.stock_history) == 0

    def test_negative_quantity_is_rejected(self):
        with pytest.raises(ValidationError):
            _item().adjust_stock("restock", -1)

    def test_movement_defaults_to_system_actor(self):
        movement = _item().adjust_stock("consumption", 1, order_ref="PZ123456001")
        assert movement.actor == "system"
        assert movement.order_ref == "PZ123456001"

    def test_restock_clears_alert_flag(self):
        item = _item(current_stock=30)
        item.mark_alert_sent()
        item.adjust_stock("restock", 100)
        assert item.low_stock_alert_sent is False

    def test_stock_cannot_be_edited_directly(self):
        with pytest.raises(ValidationError):
            _item().update_details(current_stock=5)


class TestStockEvents:
    def test_adjustment_raises_stock_adjusted(self):
        item = _item(current_stock=100)
        item.adjust_stock("consumption", 10)
        event = item._events[-1]
        assert isinstance(event, StockAdjusted)
        assert (event.previous_status, event.new_status) == ("normal", "normal")

    def test_crossing_into_low_raises_low_stock_detected(self):
        item = _item(current_stock=25)
        item.adjust_stock("consumption", 10)
        assert isinstance(item._events[-1], LowStockDetected)
        assert item._events[-1].status == "low"

    def test_crossing_straight_into_critical(self):
        item = _item(current_stock=25)
        item.adjust_stock("consumption", 17)
        assert isinstance(item._events[-1], LowStockDetected)
        assert item._events[-1].status == "critical"

    def test_staying_low_does_not_raise_again(self):
        item = _item(current_stock=15)
        item.adjust_stock("consumption", 1)
        assert not any(isinstance(e, LowStockDetected) for e in item._events)


class TestForecast:
    def test_consumption_rate_uses_trailing_thirty_days(self):
        now = datetime.now(UTC)
        item = _item(current_stock=100)
        item.adjust_stock("consumption", 30, now=now - timedelta(days=2))
        item.adjust_stock("consumption", 60, now=now - timedelta(days=45))
        assert item.consumption_rate(now) == 1.0

    def test_stock_out_prediction(self):
        now = datetime.now(UTC)
        item = _item(current_stock=100)
        item.adjust_stock("consumption", 30, now=now - timedelta(days=1))
        # 70 left at one unit a day
        assert item.predict_stock_out_date(now) == now + timedelta(days=70)

    def test_no_prediction_without_consumption(self):
        assert _item().predict_stock_out_date() is None
