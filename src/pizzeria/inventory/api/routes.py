"""FastAPI endpoints for the ingredient inventory. Admins only."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from pizzeria.identity.access import require_role
from pizzeria.identity.user import Role, User
from pizzeria.inventory import ledger
from pizzeria.inventory.api.schemas import (
    AddItemRequest,
    BulkStockUpdateRequest,
    StockAdjustmentRequest,
    UpdateItemRequest,
)
from pizzeria.inventory.management import AddInventoryItem, DeactivateInventoryItem, UpdateInventoryItem
from pizzeria.shared.api import DEFAULT_PAGE_SIZE, Envelope, ok, paginate
from pizzeria.shared.errors import ValidationFailure

admin = require_role(Role.ADMIN.value)

router = APIRouter(prefix="/api/inventory", tags=["inventory"], dependencies=[Depends(admin)])


@router.get("", response_model=Envelope, response_model_exclude_none=True)
def list_items(
    category: str | None = None,
    status: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
) -> Envelope:
    items = ledger.list_items(category=category, status=status)
    window, pagination = paginate(items, page, limit)
    return ok({"items": [ledger.item_view(i) for i in window]}, pagination=pagination)


@router.get("/alerts/low-stock", response_model=Envelope, response_model_exclude_none=True)
def low_stock() -> Envelope:
    items = ledger.low_stock_items()
    return ok({"items": [ledger.item_view(i) for i in items], "count": len(items)})


@router.post("/alerts/send-low-stock", response_model=Envelope, response_model_exclude_none=True)
def send_low_stock_alerts() -> Envelope:
    alerted = ledger.send_low_stock_alerts()
    if not alerted:
        return ok({"items_count": 0}, "No pending low stock alerts")
    return ok({"items_count": len(alerted)}, f"Low stock alert sent for {len(alerted)} items")


@router.get("/stats/overview", response_model=Envelope, response_model_exclude_none=True)
def stats_overview() -> Envelope:
    return ok(ledger.stats_overview())


@router.put("/bulk/stock-update", response_model=Envelope, response_model_exclude_none=True)
def bulk_stock_update(body: BulkStockUpdateRequest, user: User = Depends(admin)) -> Envelope:
    results = ledger.bulk_adjust([u.model_dump() for u in body.updates], actor=str(user.id))
    message = f"Bulk update completed: {len(results['successful'])} successful, {len(results['failed'])} failed"
    return ok(results, message)


@router.get("/{item_id}", response_model=Envelope, response_model_exclude_none=True)
def get_item(item_id: str) -> Envelope:
    return ok({"item": ledger.item_view(ledger.get_item(item_id), include_history=True)})


@router.post("", status_code=201, response_model=Envelope, response_model_exclude_none=True)
def add_item(body: AddItemRequest) -> Envelope:
    command = AddInventoryItem(
        name=body.name,
        category=body.category,
        unit=body.unit,
        current_stock=body.current_stock,
        min_stock_level=body.min_stock_level,
        max_stock_level=body.max_stock_level,
        price_per_unit=body.price_per_unit,
        supplier=body.supplier.model_dump_json(exclude_none=True) if body.supplier else None,
        expiry_date=body.expiry_date,
    )
    item_id = current_domain.process(command, asynchronous=False)
    return ok({"item": ledger.item_view(ledger.get_item(item_id))}, "Inventory item created successfully")


@router.put("/{item_id}", response_model=Envelope, response_model_exclude_none=True)
def update_item(item_id: str, body: UpdateItemRequest) -> Envelope:
    ledger.get_item(item_id)
    changes = body.model_dump_json(exclude_unset=True)
    if changes == "{}":
        raise ValidationFailure("No changes supplied")
    current_domain.process(UpdateInventoryItem(item_id=item_id, changes=changes), asynchronous=False)
    return ok({"item": ledger.item_view(ledger.get_item(item_id))}, "Inventory item updated successfully")


@router.put("/{item_id}/stock", response_model=Envelope, response_model_exclude_none=True)
def adjust_stock(item_id: str, body: StockAdjustmentRequest, user: User = Depends(admin)) -> Envelope:
    item = ledger.adjust_stock(item_id, body.action, body.quantity, reason=body.reason, actor=str(user.id))
    return ok({"item": ledger.item_view(item)}, "Stock updated successfully")


@router.get("/{item_id}/history", response_model=Envelope, response_model_exclude_none=True)
def stock_history(
    item_id: str,
    action: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
) -> Envelope:
    item = ledger.get_item(item_id)
    movements = ledger.history(item_id, action)
    window, pagination = paginate(movements, page, limit)
    return ok(
        {"item": {"id": str(item.id), "name": item.name}, "history": [ledger.movement_view(m) for m in window]},
        pagination=pagination,
    )


@router.delete("/{item_id}", response_model=Envelope, response_model_exclude_none=True)
def deactivate_item(item_id: str) -> Envelope:
    ledger.get_item(item_id)
    current_domain.process(DeactivateInventoryItem(item_id=item_id), asynchronous=False)
    return ok(message="Inventory item deleted successfully")
