"""Tests for the sample data loader."""

from pizzeria.catalog import queries
from pizzeria.inventory import ledger
from pizzeria.seed import SAMPLE_INVENTORY, SAMPLE_PIZZAS, seed


class TestSeed:
    def test_loads_menu_and_pantry(self):
        counts = seed()
        assert counts == {"pizzas": len(SAMPLE_PIZZAS), "inventory_items": len(SAMPLE_INVENTORY)}
        assert len(queries.list_pizzas()) == len(SAMPLE_PIZZAS)
        assert len(ledger.list_items()) == len(SAMPLE_INVENTORY)

    def test_is_idempotent(self):
        seed()
        assert seed() == {"pizzas": 0, "inventory_items": 0}

    def test_seeded_toppings_draw_from_the_pantry(self):
        seed()
        menu = queries.customization_menu()
        assert all(option["is_available"] for option in menu["cheeses"])
