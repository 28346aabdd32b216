"""Catalog administration: pizza and customization-option commands."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from pizzeria.catalog.customization import CATALOG_ID, CustomizationCatalog
from pizzeria.catalog.pizza import Pizza
from pizzeria.domain import logger, pizzeria


# ---------------------------------------------------------------------------
# Pizza commands
# ---------------------------------------------------------------------------
@pizzeria.command(part_of="Pizza")
class AddPizza:
    name = String(required=True, max_length=100)
    description = Text(required=True)
    category = String(required=True, max_length=30)
    base_price = Float(required=True, min_value=0.0)
    sizes = Text()  # JSON: list of {"size", "price_multiplier"}
    image = String(max_length=255)
    is_customizable = Boolean(default=True)
    preparation_time = Integer(default=15)
    ingredients = Text()  # JSON: list of strings
    nutritional_info = Text()  # JSON: dict


@pizzeria.command(part_of="Pizza")
class UpdatePizza:
    pizza_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: partial field dict


@pizzeria.command(part_of="Pizza")
class RetirePizza:
    pizza_id = Identifier(required=True)


def _loads(value):
    if value is None or value == "":
        return None
    return json.loads(value) if isinstance(value, str) else value


@pizzeria.command_handler(part_of=Pizza)
class PizzaCommandHandler:
    @handle(AddPizza)
    def add_pizza(self, command):
        attributes = {
            "is_customizable": command.is_customizable,
            "preparation_time": command.preparation_time,
            "ingredients": _loads(command.ingredients) or [],
            "nutritional_info": _loads(command.nutritional_info),
        }
        if command.image:
            attributes["image"] = command.image

        pizza = Pizza.create(
            name=command.name,
            description=command.description,
            category=command.category,
            base_price=command.base_price,
            sizes=_loads(command.sizes),
            **attributes,
        )
        current_domain.repository_for(Pizza).add(pizza)
        logger.info("pizza_added", pizza_id=str(pizza.id), name=pizza.name)
        return str(pizza.id)

    @handle(UpdatePizza)
    def update_pizza(self, command):
        repo = current_domain.repository_for(Pizza)
        pizza = repo.get(command.pizza_id)
        pizza.update_details(**_loads(command.changes))
        repo.add(pizza)

    @handle(RetirePizza)
    def retire_pizza(self, command):
        repo = current_domain.repository_for(Pizza)
        pizza = repo.get(command.pizza_id)
        pizza.retire()
        repo.add(pizza)
        logger.info("pizza_retired", pizza_id=str(pizza.id))


# ---------------------------------------------------------------------------
# Customization catalog commands
# ---------------------------------------------------------------------------
@pizzeria.command(part_of="CustomizationCatalog")
class SeedCustomizationCatalog:
    catalog_id = Identifier(default=CATALOG_ID)


@pizzeria.command(part_of="CustomizationCatalog")
class AddCustomizationOption:
    group = String(required=True, max_length=20)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    inventory_item = String(max_length=100)


@pizzeria.command(part_of="CustomizationCatalog")
class UpdateCustomizationOption:
    group = String(required=True, max_length=20)
    name = String(required=True, max_length=100)
    price = Float(min_value=0.0)
    is_available = Boolean()
    inventory_item = String(max_length=100)


@pizzeria.command_handler(part_of=CustomizationCatalog)
class CustomizationCatalogHandler:
    @handle(SeedCustomizationCatalog)
    def seed(self, _command):
        repo = current_domain.repository_for(CustomizationCatalog)
        try:
            repo.get(CATALOG_ID)
            return False
        except ObjectNotFoundError:
            repo.add(CustomizationCatalog.create_default())
            logger.info("customization_catalog_seeded")
            return True

    @handle(AddCustomizationOption)
    def add_option(self, command):
        repo = current_domain.repository_for(CustomizationCatalog)
        catalog = repo.get(CATALOG_ID)
        catalog.add_option(command.group, command.name, command.price, command.inventory_item)
        repo.add(catalog)

    @handle(UpdateCustomizationOption)
    def update_option(self, command):
        repo = current_domain.repository_for(CustomizationCatalog)
        catalog = repo.get(CATALOG_ID)
        catalog.update_option(
            command.group,
            command.name,
            price=command.price,
            is_available=command.is_available,
            inventory_item=command.inventory_item,
        )
        repo.add(catalog)


def load_catalog():
    """Return the singleton catalog, seeding the defaults on first use."""
    repo = current_domain.repository_for(CustomizationCatalog)
    try:
        return repo.get(CATALOG_ID)
    except ObjectNotFoundError:
        current_domain.process(SeedCustomizationCatalog(), asynchronous=False)
        return repo.get(CATALOG_ID)
