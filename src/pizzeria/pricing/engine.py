"""Pricing engine: pure functions from a pizza, a size and a topping selection to money.

Nothing here touches a repository. Callers pass in the pizza and the
customization catalog they loaded, so the same inputs always price the same.

Selections use the client shape::

    {"base": "Thin Crust", "sauce": "Pesto Sauce",
     "cheese": ["Cheddar"], "vegetables": ["Olives"], "meats": []}

Names the catalog does not know, or marks unavailable, are dropped without an
error.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from pizzeria.shared.errors import InvalidSize

TAX_RATE = Decimal("0.05")
DELIVERY_FEE = 50
DEFAULT_PREPARATION_MINUTES = 30
MINIMUM_PREPARATION_MINUTES = 30
DELIVERY_MINUTES = 30

# selection key -> (catalog group, takes a list)
SELECTION_GROUPS = {
    "base": ("base", False),
    "sauce": ("sauce", False),
    "cheese": ("cheese", True),
    "vegetables": ("vegetable", True),
    "meats": ("meat", True),
}


def round_half_up(value) -> int:
    """Round to whole currency units, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_money(value) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class LinePrice:
    unit_price: float
    line_total: float
    customization_cost: float
    customizations: dict = field(default_factory=dict)


@dataclass(frozen=True)
class OrderPricingSummary:
    subtotal: float
    delivery_fee: float
    tax: float
    discount: float
    total: float

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "delivery_fee": self.delivery_fee,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.total,
        }


def empty_customizations() -> dict:
    return {key: ([] if many else None) for key, (_, many) in SELECTION_GROUPS.items()}


def resolve_customizations(selection, catalog) -> tuple[dict, float]:
    """Snapshot the selected options with their current prices.

    Returns the resolved selection (names and prices captured now) and its total cost.
    """
    resolved = empty_customizations()
    cost = 0.0
    if not selection:
        return resolved, cost

    for key, (group, many) in SELECTION_GROUPS.items():
        requested = selection.get(key)
        if not requested:
            continue

        names = requested if many else [requested]
        if isinstance(names, str):
            names = [names]

        for name in names:
            option = catalog.find_available(group, name)
            if option is None:
                continue
            entry = {"name": option.name, "price": option.price}
            if many:
                resolved[key].append(entry)
            else:
                resolved[key] = entry
            cost += option.price

    return resolved, cost


def compute_line_price(pizza, size, selection, catalog, quantity=1) -> LinePrice:
    multiplier = pizza.multiplier_for(size)
    if multiplier is None:
        raise InvalidSize(f"Size {size} not available for {pizza.name}")

    resolved, cost = resolve_customizations(selection, catalog)
    unit_price = to_money(pizza.base_price * multiplier + cost)
    return LinePrice(
        unit_price=unit_price,
        line_total=to_money(unit_price * quantity),
        customization_cost=to_money(cost),
        customizations=resolved,
    )


def compute_order_pricing(line_totals, discount=0) -> OrderPricingSummary:
    subtotal = to_money(sum(line_totals))
    tax = round_half_up(Decimal(str(subtotal)) * TAX_RATE)
    total = to_money(subtotal + tax + DELIVERY_FEE - discount)
    return OrderPricingSummary(
        subtotal=subtotal,
        delivery_fee=float(DELIVERY_FEE),
        tax=float(tax),
        discount=float(discount),
        total=total,
    )


def estimate_delivery_time(preparation_times, now: datetime) -> datetime:
    """Kitchen time for the whole order (at least 30 minutes) plus the drive."""
    kitchen = sum(minutes or DEFAULT_PREPARATION_MINUTES for minutes in preparation_times)
    return now + timedelta(minutes=max(kitchen, MINIMUM_PREPARATION_MINUTES) + DELIVERY_MINUTES)
