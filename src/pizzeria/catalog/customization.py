"""CustomizationCatalog aggregate: the process-wide set of pizza toppings.

There is exactly one catalog, stored under the identity ``default``. Each
option belongs to a group (base, sauce, cheese, vegetable, meat) and may link
to the inventory item it draws stock from.
"""

from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, HasMany, String

from pizzeria.catalog.events import CustomizationOptionChanged
from pizzeria.domain import pizzeria

CATALOG_ID = "default"


class OptionGroup(Enum):
    BASE = "base"
    SAUCE = "sauce"
    CHEESE = "cheese"
    VEGETABLE = "vegetable"
    MEAT = "meat"


# Keys used by clients, both for selections and for the served menu
GROUP_KEYS = {
    OptionGroup.BASE.value: "bases",
    OptionGroup.SAUCE.value: "sauces",
    OptionGroup.CHEESE.value: "cheeses",
    OptionGroup.VEGETABLE.value: "vegetables",
    OptionGroup.MEAT.value: "meats",
}

DEFAULT_OPTIONS = {
    OptionGroup.BASE.value: [
        ("Thin Crust", 0),
        ("Thick Crust", 50),
        ("Cheese Burst", 100),
        ("Whole Wheat", 30),
        ("Gluten Free", 80),
    ],
    OptionGroup.SAUCE.value: [
        ("Tomato Sauce", 0),
        ("White Sauce", 40),
        ("Pesto Sauce", 60),
        ("BBQ Sauce", 50),
        ("Spicy Sauce", 30),
    ],
    OptionGroup.CHEESE.value: [
        ("Mozzarella", 0),
        ("Cheddar", 40),
        ("Parmesan", 60),
        ("Goat Cheese", 80),
        ("Vegan Cheese", 70),
    ],
    OptionGroup.VEGETABLE.value: [
        ("Bell Peppers", 30),
        ("Mushrooms", 40),
        ("Onions", 20),
        ("Tomatoes", 25),
        ("Olives", 35),
        ("Spinach", 30),
        ("Corn", 25),
        ("Jalapeños", 30),
    ],
    OptionGroup.MEAT.value: [
        ("Pepperoni", 80),
        ("Chicken", 100),
        ("Sausage", 90),
        ("Ham", 85),
        ("Bacon", 95),
    ],
}


@pizzeria.entity(part_of="CustomizationCatalog")
class CustomizationOption:
    group = String(required=True, choices=OptionGroup)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    is_available = Boolean(default=True)
    inventory_item = String(max_length=100)  # name of the InventoryItem consumed, if tracked

    def as_menu_entry(self, in_stock=True):
        return {
            "name": self.name,
            "price": self.price,
            "is_available": bool(self.is_available and in_stock),
        }


@pizzeria.aggregate
class CustomizationCatalog:
    catalog_id = String(identifier=True, max_length=50)
    options = HasMany(CustomizationOption)

    @classmethod
    def create_default(cls):
        catalog = cls(catalog_id=CATALOG_ID)
        for group, entries in DEFAULT_OPTIONS.items():
            for name, price in entries:
                catalog.add_options(CustomizationOption(group=group, name=name, price=price, inventory_item=name))
        return catalog

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------
    def options_in(self, group):
        return [o for o in self.options if o.group == group]

    def find(self, group, name):
        """Exact-name lookup within a group; returns None for unknown names."""
        return next((o for o in self.options if o.group == group and o.name == name), None)

    def find_available(self, group, name):
        option = self.find(group, name)
        return option if option is not None and option.is_available else None

    def menu(self, stock_check=None):
        """Group options by client key. ``stock_check(option)`` masks out-of-stock options."""
        return {
            key: [o.as_menu_entry(in_stock=stock_check(o) if stock_check else True) for o in self.options_in(group)]
            for group, key in GROUP_KEYS.items()
        }

    # -------------------------------------------------------------------
    # Admin edits
    # -------------------------------------------------------------------
    def add_option(self, group, name, price, inventory_item=None):
        if self.find(group, name) is not None:
            raise ValidationError({"name": [f"Option {name} already exists in {group}"]})
        option = CustomizationOption(
            group=group,
            name=name,
            price=price,
            inventory_item=inventory_item or name,
        )
        self.add_options(option)
        self._option_changed(option)
        return option

    def update_option(self, group, name, price=None, is_available=None, inventory_item=None):
        option = self.find(group, name)
        if option is None:
            raise ValidationError({"name": [f"Option {name} not found in {group}"]})

        if price is not None:
            option.price = price
        if is_available is not None:
            option.is_available = is_available
        if inventory_item is not None:
            option.inventory_item = inventory_item

        self._option_changed(option)
        return option

    def _option_changed(self, option):
        self.raise_(
            CustomizationOptionChanged(
                catalog_id=self.catalog_id,
                group=option.group,
                name=option.name,
                price=option.price,
                is_available=option.is_available,
            )
        )
