"""Domain events for the catalog: pizzas and customization options."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from pizzeria.domain import pizzeria


@pizzeria.event(part_of="Pizza")
class PizzaAdded:
    __version__ = 1

    pizza_id = Identifier(required=True)
    name = String(required=True)
    category = String(required=True)
    base_price = Float(required=True)


@pizzeria.event(part_of="Pizza")
class PizzaUpdated:
    __version__ = 1

    pizza_id = Identifier(required=True)
    changed_fields = String()  # comma separated


@pizzeria.event(part_of="Pizza")
class PizzaRetired:
    __version__ = 1

    pizza_id = Identifier(required=True)
    retired_at = DateTime(required=True)


@pizzeria.event(part_of="CustomizationCatalog")
class CustomizationOptionChanged:
    """An option was added, repriced or switched on/off."""

    __version__ = 1

    catalog_id = Identifier(required=True)
    group = String(required=True)
    name = String(required=True)
    price = Float(required=True)
    is_available = Boolean()
