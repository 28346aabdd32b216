"""FastAPI endpoints for the menu and the customization catalog."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from pizzeria.catalog import queries
from pizzeria.catalog.api.schemas import (
    AddPizzaRequest,
    CalculatePriceRequest,
    UpdateCustomizationRequest,
    UpdatePizzaRequest,
)
from pizzeria.catalog.management import (
    AddCustomizationOption,
    AddPizza,
    RetirePizza,
    UpdateCustomizationOption,
    UpdatePizza,
    load_catalog,
)
from pizzeria.identity.access import require_role
from pizzeria.identity.user import Role
from pizzeria.pricing.engine import compute_line_price
from pizzeria.shared.api import DEFAULT_PAGE_SIZE, Envelope, ok, paginate
from pizzeria.shared.errors import ValidationFailure

router = APIRouter(prefix="/api/pizza", tags=["pizza"])

admin_only = Depends(require_role(Role.ADMIN.value))


def _json(value):
    return json.dumps(value) if value is not None else None


@router.get("", response_model=Envelope, response_model_exclude_none=True)
def list_pizzas(
    category: str | None = None,
    search: str | None = None,
    sort: str = "newest",
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
) -> Envelope:
    pizzas = queries.list_pizzas(category=category, search=search, sort=sort)
    window, pagination = paginate(pizzas, page, limit)
    return ok({"pizzas": [queries.pizza_view(p) for p in window]}, pagination=pagination)


@router.get("/options/customization", response_model=Envelope, response_model_exclude_none=True)
def customization_options() -> Envelope:
    return ok(queries.customization_menu())


@router.put(
    "/options/customization",
    response_model=Envelope,
    response_model_exclude_none=True,
    dependencies=[admin_only],
)
def update_customization_options(body: UpdateCustomizationRequest) -> Envelope:
    catalog = load_catalog()
    for entry in body.options:
        if catalog.find(entry.group, entry.name) is None:
            if entry.price is None:
                raise ValidationFailure(f"Price is required for new option {entry.name}")
            command = AddCustomizationOption(
                group=entry.group,
                name=entry.name,
                price=entry.price,
                inventory_item=entry.inventory_item,
            )
        else:
            command = UpdateCustomizationOption(
                group=entry.group,
                name=entry.name,
                price=entry.price,
                is_available=entry.is_available,
                inventory_item=entry.inventory_item,
            )
        current_domain.process(command, asynchronous=False)
    return ok(queries.customization_menu(), "Customization options updated successfully")


@router.post("/calculate-price", response_model=Envelope, response_model_exclude_none=True)
def calculate_price(body: CalculatePriceRequest) -> Envelope:
    pizza = queries.get_pizza(body.pizza_id)
    selection = body.customizations.model_dump() if body.customizations else None
    line = compute_line_price(pizza, body.size, selection, load_catalog(), body.quantity)
    return ok(
        {
            "pizza_id": str(pizza.id),
            "size": body.size,
            "quantity": body.quantity,
            "unit_price": line.unit_price,
            "customization_cost": line.customization_cost,
            "total_price": line.line_total,
            "customizations": line.customizations,
        }
    )


@router.get("/featured/recommendations", response_model=Envelope, response_model_exclude_none=True)
def featured() -> Envelope:
    return ok({"pizzas": [queries.pizza_view(p) for p in queries.featured_pizzas()]})


@router.get("/categories/list", response_model=Envelope, response_model_exclude_none=True)
def categories() -> Envelope:
    return ok({"categories": queries.category_summary()})


@router.get("/{pizza_id}", response_model=Envelope, response_model_exclude_none=True)
def get_pizza(pizza_id: str) -> Envelope:
    return ok({"pizza": queries.pizza_view(queries.get_pizza(pizza_id))})


@router.post("", status_code=201, response_model=Envelope, response_model_exclude_none=True, dependencies=[admin_only])
def add_pizza(body: AddPizzaRequest) -> Envelope:
    command = AddPizza(
        name=body.name,
        description=body.description,
        category=body.category,
        base_price=body.base_price,
        sizes=_json([s.model_dump() for s in body.sizes] if body.sizes is not None else None),
        image=body.image,
        is_customizable=body.is_customizable,
        preparation_time=body.preparation_time,
        ingredients=_json(body.ingredients),
        nutritional_info=body.nutritional_info.model_dump_json(exclude_none=True) if body.nutritional_info else None,
    )
    pizza_id = current_domain.process(command, asynchronous=False)
    return ok({"pizza": queries.pizza_view(queries.get_pizza(pizza_id))}, "Pizza created successfully")


@router.put("/{pizza_id}", response_model=Envelope, response_model_exclude_none=True, dependencies=[admin_only])
def update_pizza(pizza_id: str, body: UpdatePizzaRequest) -> Envelope:
    queries.get_pizza(pizza_id, include_unavailable=True)
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationFailure("No changes supplied")
    current_domain.process(UpdatePizza(pizza_id=pizza_id, changes=_json(changes)), asynchronous=False)
    pizza = queries.get_pizza(pizza_id, include_unavailable=True)
    return ok({"pizza": queries.pizza_view(pizza)}, "Pizza updated successfully")


@router.delete("/{pizza_id}", response_model=Envelope, response_model_exclude_none=True, dependencies=[admin_only])
def retire_pizza(pizza_id: str) -> Envelope:
    queries.get_pizza(pizza_id)
    current_domain.process(RetirePizza(pizza_id=pizza_id), asynchronous=False)
    return ok(message="Pizza deleted successfully")
