"""Tests for the Pizza aggregate and the customization catalog."""

import pytest
from protean.exceptions import ValidationError

from pizzeria.catalog.customization import CustomizationCatalog
from pizzeria.catalog.events import CustomizationOptionChanged, PizzaAdded, PizzaRetired
from pizzeria.catalog.pizza import Pizza


def _pizza(**overrides):
    attributes = {"name": "Margherita", "description": "Classic", "category": "vegetarian", "base_price": 299}
    attributes.update(overrides)
    return Pizza.create(**attributes)


class TestPizzaCreation:
    def test_standard_sizes_by_default(self):
        pizza = _pizza()
        assert pizza.offered_sizes == ["small", "medium", "large", "extra-large"]
        assert pizza.multiplier_for("extra-large") == 1.6

    def test_raises_pizza_added(self):
        pizza = _pizza()
        assert isinstance(pizza._events[-1], PizzaAdded)
        assert pizza._events[-1].base_price == 299.0

    def test_unknown_category_is_rejected(self):
        with pytest.raises(ValidationError):
            _pizza(category="dessert")

    def test_duplicate_sizes_are_rejected(self):
        sizes = [{"size": "small", "price_multiplier": 0.8}, {"size": "small", "price_multiplier": 0.9}]
        with pytest.raises(ValidationError) as exc:
            _pizza(sizes=sizes)
        assert "sizes" in exc.value.messages

    def test_empty_size_list_is_rejected(self):
        with pytest.raises(ValidationError):
            _pizza(sizes=[])

    def test_multiplier_for_missing_size_is_none(self):
        pizza = _pizza(sizes=[{"size": "medium", "price_multiplier": 1.0}])
        assert pizza.multiplier_for("large") is None


class TestPizzaEdits:
    def test_update_replaces_sizes(self):
        pizza = _pizza()
        pizza.update_details(sizes=[{"size": "large", "price_multiplier": 1.5}], base_price=320)
        assert pizza.offered_sizes == ["large"]
        assert pizza.base_price == 320

    def test_retire_takes_pizza_off_the_menu(self):
        pizza = _pizza()
        pizza.retire()
        assert pizza.is_available is False
        assert isinstance(pizza._events[-1], PizzaRetired)

    def test_retiring_twice_is_rejected(self):
        pizza = _pizza()
        pizza.retire()
        with pytest.raises(ValidationError):
            pizza.retire()


class TestCustomizationCatalog:
    def test_defaults_cover_every_group(self):
        catalog = CustomizationCatalog.create_default()
        menu = catalog.menu()
        assert set(menu) == {"bases", "sauces", "cheeses", "vegetables", "meats"}
        assert {"name": "Cheese Burst", "price": 100, "is_available": True} in menu["bases"]

    def test_options_link_to_inventory_by_name(self):
        catalog = CustomizationCatalog.create_default()
        assert catalog.find("cheese", "Cheddar").inventory_item == "Cheddar"

    def test_adding_an_existing_option_is_rejected(self):
        catalog = CustomizationCatalog.create_default()
        with pytest.raises(ValidationError):
            catalog.add_option("meat", "Ham", 90)

    def test_update_raises_option_changed(self):
        catalog = CustomizationCatalog.create_default()
        catalog.update_option("sauce", "BBQ Sauce", price=55)
        event = catalog._events[-1]
        assert isinstance(event, CustomizationOptionChanged)
        assert (event.name, event.price) == ("BBQ Sauce", 55)

    def test_updating_unknown_option_is_rejected(self):
        catalog = CustomizationCatalog.create_default()
        with pytest.raises(ValidationError):
            catalog.update_option("sauce", "Mayonnaise", price=10)

    def test_stock_check_masks_options(self):
        catalog = CustomizationCatalog.create_default()
        menu = catalog.menu(stock_check=lambda option: option.name != "Olives")
        olives = next(o for o in menu["vegetables"] if o["name"] == "Olives")
        assert olives["is_available"] is False
