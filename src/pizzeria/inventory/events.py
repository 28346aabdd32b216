"""Domain events for inventory items."""

from protean.fields import DateTime, Float, Identifier, String

from pizzeria.domain import pizzeria


@pizzeria.event(part_of="InventoryItem")
class InventoryItemAdded:
    __version__ = 1

    item_id = Identifier(required=True)
    name = String(required=True)
    category = String(required=True)
    current_stock = Float()


@pizzeria.event(part_of="InventoryItem")
class StockAdjusted:
    """A movement was applied to the ledger (restock, consumption, wastage, adjustment)."""

    __version__ = 1

    item_id = Identifier(required=True)
    name = String(required=True)
    action = String(required=True)
    quantity = Float(required=True)
    previous_stock = Float(required=True)
    new_stock = Float(required=True)
    previous_status = String()
    new_status = String()
    order_ref = String()
    adjusted_at = DateTime(required=True)


@pizzeria.event(part_of="InventoryItem")
class LowStockDetected:
    """Stock fell to or below the minimum level from a healthy level."""

    __version__ = 1

    item_id = Identifier(required=True)
    name = String(required=True)
    current_stock = Float()
    min_stock_level = Float()
    status = String(required=True)
