"""InventoryItem aggregate: one ingredient with thresholds and a stock ledger.

Stock only changes through ``adjust_stock``, which appends exactly one
``StockMovement`` per call, including calls whose result had to be clamped
at zero. Status is derived from the thresholds:

    critical     current <= min / 2
    low          current <= min
    overstocked  current >= max
    normal       otherwise
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, String, Text, ValueObject

from pizzeria.domain import pizzeria
from pizzeria.inventory.events import InventoryItemAdded, LowStockDetected, StockAdjusted

CONSUMPTION_WINDOW_DAYS = 30


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class InventoryCategory(Enum):
    BASE = "base"
    SAUCE = "sauce"
    CHEESE = "cheese"
    VEGETABLE = "vegetable"
    MEAT = "meat"
    OTHER = "other"


class StockUnit(Enum):
    KG = "kg"
    GRAMS = "grams"
    LITERS = "liters"
    ML = "ml"
    PIECES = "pieces"
    PACKETS = "packets"


class StockAction(Enum):
    RESTOCK = "restock"
    CONSUMPTION = "consumption"
    WASTAGE = "wastage"
    ADJUSTMENT = "adjustment"


class StockStatus(Enum):
    CRITICAL = "critical"
    LOW = "low"
    NORMAL = "normal"
    OVERSTOCKED = "overstocked"


# Statuses that warrant a low-stock alert
ALERT_STATUSES = {StockStatus.CRITICAL.value, StockStatus.LOW.value}


def classify(current_stock, min_stock_level, max_stock_level):
    """Classify a stock level. Critical is checked before low."""
    if current_stock <= min_stock_level / 2:
        return StockStatus.CRITICAL.value
    if current_stock <= min_stock_level:
        return StockStatus.LOW.value
    if current_stock >= max_stock_level:
        return StockStatus.OVERSTOCKED.value
    return StockStatus.NORMAL.value


# ---------------------------------------------------------------------------
# Value Objects / Entities
# ---------------------------------------------------------------------------
@pizzeria.value_object(part_of="InventoryItem")
class Supplier:
    name = String(max_length=100)
    contact = String(max_length=50)
    email = String(max_length=254)


@pizzeria.entity(part_of="InventoryItem")
class StockMovement:
    """One line of the stock ledger. Never edited once written."""

    action = String(required=True, choices=StockAction)
    quantity = Float(required=True, min_value=0.0)
    previous_stock = Float(required=True)
    new_stock = Float(required=True)
    reason = Text()
    actor = String(max_length=100)  # user id, or "system"
    order_ref = String(max_length=30)
    timestamp = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@pizzeria.aggregate
class InventoryItem:
    name = String(required=True, max_length=100, unique=True)
    category = String(required=True, choices=InventoryCategory)
    current_stock = Float(default=0.0, min_value=0.0)
    min_stock_level = Float(default=10.0, min_value=0.0)
    max_stock_level = Float(default=100.0, min_value=0.0)
    unit = String(required=True, choices=StockUnit)
    price_per_unit = Float(default=0.0, min_value=0.0)
    supplier = ValueObject(Supplier)
    expiry_date = DateTime()
    last_restocked = DateTime()
    low_stock_alert_sent = Boolean(default=False)
    is_active = Boolean(default=True)
    stock_history = HasMany(StockMovement)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def max_stock_must_exceed_min(self):
        if self.max_stock_level is not None and self.min_stock_level is not None:
            if self.max_stock_level <= self.min_stock_level:
                raise ValidationError(
                    {"max_stock_level": ["Maximum stock level must be greater than minimum stock level"]}
                )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, category, unit, current_stock=0.0, supplier=None, **attributes):
        now = datetime.now(UTC)
        item = cls(
            name=name.strip(),
            category=category,
            unit=unit,
            current_stock=current_stock,
            supplier=Supplier(**supplier) if supplier else None,
            last_restocked=now,
            created_at=now,
            updated_at=now,
            **attributes,
        )
        item.raise_(
            InventoryItemAdded(
                item_id=str(item.id),
                name=item.name,
                category=item.category,
                current_stock=item.current_stock,
            )
        )
        return item

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def stock_status(self):
        return classify(self.current_stock, self.min_stock_level, self.max_stock_level)

    @property
    def stock_value(self):
        return round((self.current_stock or 0) * (self.price_per_unit or 0), 2)

    @property
    def needs_alert(self):
        return bool(self.is_active and self.stock_status in ALERT_STATUSES and not self.low_stock_alert_sent)

    def consumption_rate(self, now=None):
        """Average daily consumption over the trailing 30 days."""
        now = now or datetime.now(UTC)
        since = now - timedelta(days=CONSUMPTION_WINDOW_DAYS)
        consumed = sum(
            m.quantity
            for m in self.stock_history
            if m.action == StockAction.CONSUMPTION.value and m.timestamp >= since
        )
        return consumed / CONSUMPTION_WINDOW_DAYS

    def predict_stock_out_date(self, now=None):
        now = now or datetime.now(UTC)
        rate = self.consumption_rate(now)
        if rate <= 0:
            return None
        return now + timedelta(days=self.current_stock / rate)

    # -------------------------------------------------------------------
    # Stock ledger
    # -------------------------------------------------------------------
    def adjust_stock(self, action, quantity, reason=None, actor=None, order_ref=None, now=None):
        """Apply one stock movement and record it. Returns the appended movement."""
        try:
            action = StockAction(action)
        except ValueError:
            raise ValidationError({"action": [f"Unknown stock action: {action}"]}) from None
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Quantity must be zero or more"]})

        now = now or datetime.now(UTC)
        previous_stock = self.current_stock or 0.0
        previous_status = self.stock_status

        if action == StockAction.RESTOCK:
            new_stock = previous_stock + quantity
        elif action == StockAction.ADJUSTMENT:
            new_stock = quantity
        else:
            new_stock = previous_stock - quantity
        new_stock = max(new_stock, 0.0)

        movement = StockMovement(
            action=action.value,
            quantity=abs(quantity),
            previous_stock=previous_stock,
            new_stock=new_stock,
            reason=reason,
            actor=actor or "system",
            order_ref=order_ref,
            timestamp=now,
        )

        self.current_stock = new_stock
        if action == StockAction.RESTOCK:
            self.low_stock_alert_sent = False
            self.last_restocked = now
        self.add_stock_history(movement)
        self.updated_at = now

        new_status = self.stock_status
        self.raise_(
            StockAdjusted(
                item_id=str(self.id),
                name=self.name,
                action=action.value,
                quantity=abs(quantity),
                previous_stock=previous_stock,
                new_stock=new_stock,
                previous_status=previous_status,
                new_status=new_status,
                order_ref=order_ref,
                adjusted_at=now,
            )
        )

        if new_status in ALERT_STATUSES and previous_status not in ALERT_STATUSES:
            self.raise_(
                LowStockDetected(
                    item_id=str(self.id),
                    name=self.name,
                    current_stock=new_stock,
                    min_stock_level=self.min_stock_level,
                    status=new_status,
                )
            )

        return movement

    def mark_alert_sent(self):
        self.low_stock_alert_sent = True
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Admin edits
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Edit descriptive fields and thresholds. Stock itself only moves through adjust_stock."""
        if "current_stock" in changes:
            raise ValidationError({"current_stock": ["Use a stock adjustment to change the stock level"]})

        supplier = changes.pop("supplier", None)
        with atomic_change(self):
            for field_name, value in changes.items():
                setattr(self, field_name, value)
            if supplier is not None:
                self.supplier = Supplier(**supplier)
            self.updated_at = datetime.now(UTC)

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Inventory item is already inactive"]})
        self.is_active = False
        self.updated_at = datetime.now(UTC)
