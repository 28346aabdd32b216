"""Pizza aggregate: a product on the menu.

A pizza has a base price and a list of sizes, each with a price multiplier.
Pizzas are never deleted; retiring one flips ``is_available`` so historical
orders keep a valid reference.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, List, String, Text, ValueObject

from pizzeria.catalog.events import PizzaAdded, PizzaRetired, PizzaUpdated
from pizzeria.domain import pizzeria


class PizzaCategory(Enum):
    VEGETARIAN = "vegetarian"
    NON_VEGETARIAN = "non-vegetarian"
    VEGAN = "vegan"
    SPECIALTY = "specialty"


class PizzaSize(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra-large"


# Multipliers used when a pizza is added without an explicit size list
STANDARD_SIZES = [
    (PizzaSize.SMALL.value, 0.8),
    (PizzaSize.MEDIUM.value, 1.0),
    (PizzaSize.LARGE.value, 1.3),
    (PizzaSize.EXTRA_LARGE.value, 1.6),
]


@pizzeria.entity(part_of="Pizza")
class SizeOption:
    size = String(required=True, choices=PizzaSize)
    price_multiplier = Float(required=True, min_value=0.1)


@pizzeria.value_object(part_of="Pizza")
class NutritionalInfo:
    calories = Integer(min_value=0)
    protein = Integer(min_value=0)
    carbs = Integer(min_value=0)
    fat = Integer(min_value=0)
    fiber = Integer(min_value=0)


@pizzeria.aggregate
class Pizza:
    name = String(required=True, max_length=100)
    description = Text(required=True)
    image = String(max_length=255, default="default-pizza.jpg")
    category = String(required=True, choices=PizzaCategory)
    base_price = Float(required=True, min_value=0.0)
    sizes = HasMany(SizeOption)
    is_available = Boolean(default=True)
    is_customizable = Boolean(default=True)
    rating = Float(default=4.5, min_value=0.0, max_value=5.0)
    num_of_reviews = Integer(default=0, min_value=0)
    preparation_time = Integer(default=15, min_value=10)
    ingredients = List(content_type=String)
    nutritional_info = ValueObject(NutritionalInfo)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, description, category, base_price, sizes=None, **attributes):
        """Build a new pizza. ``sizes`` is a list of ``{"size", "price_multiplier"}`` dicts."""
        sizes = sizes if sizes is not None else [{"size": s, "price_multiplier": m} for s, m in STANDARD_SIZES]
        if not sizes:
            raise ValidationError({"sizes": ["At least one size is required"]})

        seen = set()
        for entry in sizes:
            if entry["size"] in seen:
                raise ValidationError({"sizes": [f"Size {entry['size']} listed more than once"]})
            seen.add(entry["size"])

        nutrition = attributes.pop("nutritional_info", None)
        now = datetime.now(UTC)
        pizza = cls(
            name=name,
            description=description,
            category=category,
            base_price=base_price,
            nutritional_info=NutritionalInfo(**nutrition) if nutrition else None,
            created_at=now,
            updated_at=now,
            **attributes,
        )
        for entry in sizes:
            pizza.add_sizes(SizeOption(size=entry["size"], price_multiplier=entry["price_multiplier"]))

        pizza.raise_(
            PizzaAdded(
                pizza_id=str(pizza.id),
                name=pizza.name,
                category=pizza.category,
                base_price=pizza.base_price,
            )
        )
        return pizza

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def multiplier_for(self, size):
        """Return the price multiplier for ``size``, or None when the size is not offered."""
        option = next((s for s in self.sizes if s.size == size), None)
        return option.price_multiplier if option else None

    @property
    def offered_sizes(self):
        return [s.size for s in self.sizes]

    # -------------------------------------------------------------------
    # Admin edits
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply an admin edit. Only the keys present in ``changes`` are touched."""
        sizes = changes.pop("sizes", None)
        nutrition = changes.pop("nutritional_info", None)

        for field_name, value in changes.items():
            setattr(self, field_name, value)

        if nutrition is not None:
            self.nutritional_info = NutritionalInfo(**nutrition)

        if sizes is not None:
            if not sizes:
                raise ValidationError({"sizes": ["At least one size is required"]})
            for existing in list(self.sizes):
                self.remove_sizes(existing)
            for entry in sizes:
                self.add_sizes(SizeOption(size=entry["size"], price_multiplier=entry["price_multiplier"]))

        self.updated_at = datetime.now(UTC)
        self.raise_(
            PizzaUpdated(
                pizza_id=str(self.id),
                changed_fields=",".join(sorted([*changes.keys(), *(["sizes"] if sizes else [])])),
            )
        )

    def retire(self):
        """Take the pizza off the menu (soft delete)."""
        if not self.is_available:
            raise ValidationError({"is_available": ["Pizza is already unavailable"]})
        self.is_available = False
        self.updated_at = datetime.now(UTC)
        self.raise_(PizzaRetired(pizza_id=str(self.id), retired_at=self.updated_at))
