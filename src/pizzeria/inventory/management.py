"""Inventory administration: item lifecycle and stock-adjustment commands."""

import json

from protean import handle
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from pizzeria.domain import logger, pizzeria
from pizzeria.inventory.item import InventoryItem
from pizzeria.shared.errors import DuplicateEntry
from pizzeria.shared.query import fetch


@pizzeria.command(part_of="InventoryItem")
class AddInventoryItem:
    name = String(required=True, max_length=100)
    category = String(required=True, max_length=20)
    unit = String(required=True, max_length=20)
    current_stock = Float(default=0.0)
    min_stock_level = Float(default=10.0)
    max_stock_level = Float(default=100.0)
    price_per_unit = Float(default=0.0)
    supplier = Text()  # JSON: {name, contact, email}
    expiry_date = DateTime()


@pizzeria.command(part_of="InventoryItem")
class UpdateInventoryItem:
    item_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: partial field dict


@pizzeria.command(part_of="InventoryItem")
class AdjustStock:
    item_id = Identifier(required=True)
    action = String(required=True, max_length=20)
    quantity = Float(required=True)
    reason = Text()
    actor = String(max_length=100)
    order_ref = String(max_length=30)


@pizzeria.command(part_of="InventoryItem")
class DeactivateInventoryItem:
    item_id = Identifier(required=True)


@pizzeria.command(part_of="InventoryItem")
class MarkLowStockAlertSent:
    item_id = Identifier(required=True)


def find_by_name(name, exclude_id=None):
    """Case-insensitive lookup among all items, active or not."""
    needle = name.strip().lower()
    for item in fetch(InventoryItem):
        if item.name.lower() == needle and str(item.id) != str(exclude_id):
            return item
    return None


@pizzeria.command_handler(part_of=InventoryItem)
class InventoryCommandHandler:
    @handle(AddInventoryItem)
    def add_item(self, command):
        if find_by_name(command.name):
            raise DuplicateEntry(f"Inventory item '{command.name}' already exists")

        item = InventoryItem.create(
            name=command.name,
            category=command.category,
            unit=command.unit,
            current_stock=command.current_stock,
            min_stock_level=command.min_stock_level,
            max_stock_level=command.max_stock_level,
            price_per_unit=command.price_per_unit,
            supplier=json.loads(command.supplier) if command.supplier else None,
            expiry_date=command.expiry_date,
        )
        current_domain.repository_for(InventoryItem).add(item)
        logger.info("inventory_item_added", item_id=str(item.id), name=item.name)
        return str(item.id)

    @handle(UpdateInventoryItem)
    def update_item(self, command):
        changes = json.loads(command.changes)
        if "name" in changes and find_by_name(changes["name"], exclude_id=command.item_id):
            raise DuplicateEntry(f"Inventory item '{changes['name']}' already exists")

        repo = current_domain.repository_for(InventoryItem)
        item = repo.get(command.item_id)
        item.update_details(**changes)
        repo.add(item)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        """Returns ``(previous_status, new_status)`` so callers can react to threshold crossings."""
        repo = current_domain.repository_for(InventoryItem)
        item = repo.get(command.item_id)
        previous_status = item.stock_status
        item.adjust_stock(
            command.action,
            command.quantity,
            reason=command.reason,
            actor=command.actor,
            order_ref=command.order_ref,
        )
        repo.add(item)
        return previous_status, item.stock_status

    @handle(DeactivateInventoryItem)
    def deactivate(self, command):
        repo = current_domain.repository_for(InventoryItem)
        item = repo.get(command.item_id)
        item.deactivate()
        repo.add(item)
        logger.info("inventory_item_deactivated", item_id=str(item.id))

    @handle(MarkLowStockAlertSent)
    def mark_alert_sent(self, command):
        repo = current_domain.repository_for(InventoryItem)
        item = repo.get(command.item_id)
        item.mark_alert_sent()
        repo.add(item)
