"""Inventory ledger services.

Every stock change goes through ``adjust_stock``, which serializes work on
one item, processes the ``AdjustStock`` command and sends a low-stock alert
when the adjustment pushed the item into an alert status.
"""

import json
from collections import defaultdict
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from pizzeria.catalog.management import load_catalog
from pizzeria.domain import logger
from pizzeria.inventory.item import ALERT_STATUSES, InventoryItem, StockAction, StockStatus
from pizzeria.inventory.management import AdjustStock, MarkLowStockAlertSent
from pizzeria.notifications import dispatcher
from pizzeria.pricing.engine import SELECTION_GROUPS
from pizzeria.shared.errors import NotFound, PizzeriaError
from pizzeria.shared.locks import hold
from pizzeria.shared.query import fetch

RECENT_MOVEMENTS = 20


def get_item(item_id):
    try:
        return current_domain.repository_for(InventoryItem).get(item_id)
    except ObjectNotFoundError:
        raise NotFound("Inventory item not found") from None


def adjust_stock(item_id, action, quantity, reason=None, actor=None, order_ref=None, alert=True):
    """Apply one movement to an item and return the reloaded item.

    With ``alert=False`` the caller takes over alerting, usually by running
    ``send_low_stock_alerts`` once after a batch of adjustments.
    """
    with hold("inventory", str(item_id)):
        get_item(item_id)
        previous_status, new_status = current_domain.process(
            AdjustStock(
                item_id=str(item_id),
                action=action,
                quantity=quantity,
                reason=reason,
                actor=actor,
                order_ref=order_ref,
            ),
            asynchronous=False,
        )
        item = get_item(item_id)

    logger.info(
        "stock_adjusted",
        item_id=str(item_id),
        action=action,
        quantity=quantity,
        new_stock=item.current_stock,
        status=new_status,
    )

    if alert and new_status in ALERT_STATUSES and previous_status not in ALERT_STATUSES:
        _alert_for([item])
    return item


def _alert_for(items):
    """Send one alert email for ``items`` and mark them. Failures are logged only."""
    try:
        if not dispatcher.notify_low_stock(items):
            return False
        for item in items:
            current_domain.process(MarkLowStockAlertSent(item_id=str(item.id)), asynchronous=False)
        logger.info("low_stock_alert_sent", items=[item.name for item in items])
        return True
    except Exception:
        logger.exception("low_stock_alert_failed", items=[item.name for item in items])
        return False


def send_low_stock_alerts():
    """Alert on every active item at or below its minimum that hasn't been alerted yet."""
    pending = [item for item in fetch(InventoryItem, is_active=True) if item.needs_alert]
    if not pending:
        return []
    if not _alert_for(pending):
        return []
    return pending


def bulk_adjust(updates, actor=None):
    """Apply several adjustments. One failure doesn't stop the rest."""
    successful, failed = [], []
    for update in updates:
        item_id = update.get("item_id")
        try:
            previous = get_item(item_id).current_stock
            item = adjust_stock(
                item_id,
                update.get("action"),
                update.get("quantity"),
                reason=update.get("reason") or "Bulk update",
                actor=actor,
            )
            successful.append(
                {
                    "item_id": str(item.id),
                    "item_name": item.name,
                    "action": update.get("action"),
                    "quantity": update.get("quantity"),
                    "previous_stock": previous,
                    "new_stock": item.current_stock,
                    "success": True,
                }
            )
        except NotFound:
            failed.append({"item_id": item_id, "error": "Item not found"})
        except (PizzeriaError, ValidationError) as exc:
            failed.append({"item_id": item_id, "error": _error_text(exc)})
    return {"successful": successful, "failed": failed}


def _error_text(exc):
    if isinstance(exc, ValidationError):
        return "; ".join(f"{field}: {', '.join(map(str, msgs))}" for field, msgs in exc.messages.items())
    return str(exc)


# ---------------------------------------------------------------------------
# Order consumption
# ---------------------------------------------------------------------------
def _resolved_option_names(customizations):
    """Yield ``(group, option name)`` for every option captured on an order item."""
    for key, (group, many) in SELECTION_GROUPS.items():
        value = customizations.get(key)
        if not value:
            continue
        entries = value if many else [value]
        for entry in entries:
            name = entry.get("name") if isinstance(entry, dict) else entry
            if name:
                yield group, name


def consume_for_order(order, catalog=None):
    """Draw down the ingredients of every item in ``order``.

    An option consumes the inventory item it is linked to, or failing a link,
    the item whose name matches the option's name. Unmatched options are skipped.
    Returns the number of movements written.
    """
    if catalog is None:
        catalog = load_catalog()

    by_name = {item.name.lower(): item for item in fetch(InventoryItem, is_active=True)}
    reason = f"Used in order {order.order_number}"
    written = 0

    for order_item in order.items:
        customizations = json.loads(order_item.customizations) if order_item.customizations else {}
        for group, name in _resolved_option_names(customizations):
            option = catalog.find(group, name)
            linked = (option.inventory_item if option and option.inventory_item else name).lower()
            item = by_name.get(linked)
            if item is None:
                logger.debug("ingredient_not_tracked", option=name, order_number=order.order_number)
                continue
            try:
                adjust_stock(
                    item.id,
                    StockAction.CONSUMPTION.value,
                    order_item.quantity,
                    reason=reason,
                    actor="system",
                    order_ref=order.order_number,
                    alert=False,
                )
                written += 1
            except Exception:
                logger.exception("ingredient_consumption_failed", item_id=str(item.id), order_number=order.order_number)
    return written


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------
def item_view(item, now=None, include_history=False):
    now = now or datetime.now(UTC)
    predicted = item.predict_stock_out_date(now)
    view = item.to_dict()
    if not include_history:
        view.pop("stock_history", None)
    view.update(
        {
            "stock_status": item.stock_status,
            "stock_value": item.stock_value,
            "consumption_rate": round(item.consumption_rate(now), 4),
            "predicted_stock_out_date": predicted.isoformat() if predicted else None,
        }
    )
    return view


def list_items(category=None, status=None):
    filters = {"is_active": True}
    if category:
        filters["category"] = category
    items = sorted(fetch(InventoryItem, **filters), key=lambda i: (i.category, i.name.lower()))
    if status:
        items = [item for item in items if item.stock_status == status]
    return items


def history(item_id, action=None):
    """Movements of one item, newest first."""
    item = get_item(item_id)
    movements = [m for m in item.stock_history if action is None or m.action == action]
    return sorted(movements, key=lambda m: m.timestamp, reverse=True)


def movement_view(movement, item=None):
    view = {
        "action": movement.action,
        "quantity": movement.quantity,
        "previous_stock": movement.previous_stock,
        "new_stock": movement.new_stock,
        "reason": movement.reason,
        "actor": movement.actor,
        "order_ref": movement.order_ref,
        "timestamp": movement.timestamp.isoformat() if movement.timestamp else None,
    }
    if item is not None:
        view["item_id"] = str(item.id)
        view["item_name"] = item.name
    return view


def low_stock_items():
    return [item for item in fetch(InventoryItem, is_active=True) if item.stock_status in ALERT_STATUSES]


def stats_overview():
    items = fetch(InventoryItem, is_active=True)
    distribution = {status.value: 0 for status in StockStatus}
    categories = defaultdict(lambda: {"count": 0, "value": 0.0, "low_stock": 0})
    recent = []

    for item in items:
        status = item.stock_status
        distribution[status] += 1
        bucket = categories[item.category]
        bucket["count"] += 1
        bucket["value"] = round(bucket["value"] + item.stock_value, 2)
        if status in ALERT_STATUSES:
            bucket["low_stock"] += 1
        latest = sorted(item.stock_history, key=lambda m: m.timestamp, reverse=True)[:5]
        recent.extend((m, item) for m in latest)

    recent.sort(key=lambda pair: pair[0].timestamp, reverse=True)
    return {
        "statistics": {
            "total_items": len(items),
            "total_value": round(sum(item.stock_value for item in items), 2),
            "low_stock_items": distribution[StockStatus.LOW.value] + distribution[StockStatus.CRITICAL.value],
            "critical_stock_items": distribution[StockStatus.CRITICAL.value],
            "overstocked_items": distribution[StockStatus.OVERSTOCKED.value],
            "category_breakdown": dict(categories),
            "stock_status_distribution": distribution,
        },
        "recent_movements": [movement_view(m, item) for m, item in recent[:RECENT_MOVEMENTS]],
    }


def stock_lookup():
    """Lower-cased item name -> whether any stock is left. Inactive items count as out of stock."""
    return {item.name.lower(): bool(item.is_active and item.current_stock > 0) for item in fetch(InventoryItem)}
