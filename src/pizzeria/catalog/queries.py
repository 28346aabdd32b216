"""Read side of the catalog: menu listing, featured pizzas, category summary."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from pizzeria.catalog.customization import GROUP_KEYS
from pizzeria.catalog.management import load_catalog
from pizzeria.catalog.pizza import Pizza, PizzaCategory
from pizzeria.shared.errors import NotFound
from pizzeria.shared.query import fetch

SORT_KEYS = {
    "price_low": (lambda p: p.base_price, False),
    "price_high": (lambda p: p.base_price, True),
    "rating": (lambda p: p.rating or 0.0, True),
    "popular": (lambda p: p.num_of_reviews or 0, True),
    "newest": (lambda p: p.created_at.timestamp() if p.created_at else 0.0, True),
}


def _all_pizzas(include_unavailable=False):
    if include_unavailable:
        return fetch(Pizza)
    return fetch(Pizza, is_available=True)


def list_pizzas(category=None, search=None, sort="newest", include_unavailable=False):
    pizzas = _all_pizzas(include_unavailable)

    if category:
        pizzas = [p for p in pizzas if p.category == category]

    if search:
        needle = search.strip().lower()
        pizzas = [
            p
            for p in pizzas
            if needle in p.name.lower()
            or needle in (p.description or "").lower()
            or any(needle in ingredient.lower() for ingredient in (p.ingredients or []))
        ]

    key, reverse = SORT_KEYS.get(sort, SORT_KEYS["newest"])
    return sorted(pizzas, key=key, reverse=reverse)


def featured_pizzas(limit=6):
    """Highly rated pizzas (rating >= 4), best first."""
    rated = [p for p in _all_pizzas() if (p.rating or 0) >= 4]
    return sorted(rated, key=lambda p: (p.rating, p.num_of_reviews or 0), reverse=True)[:limit]


def category_summary():
    summary = []
    pizzas = _all_pizzas()
    for category in PizzaCategory:
        members = [p for p in pizzas if p.category == category.value]
        if not members:
            continue
        prices = [p.base_price for p in members]
        summary.append(
            {
                "category": category.value,
                "count": len(members),
                "avg_price": round(sum(prices) / len(prices), 2),
                "min_price": min(prices),
                "max_price": max(prices),
            }
        )
    return summary


def customization_menu():
    """Options grouped for clients, masking options whose ingredient is out of stock."""
    # Imported here: inventory depends on the catalog, not the other way round
    from pizzeria.inventory.ledger import stock_lookup

    in_stock = stock_lookup()
    catalog = load_catalog()

    def _stock_check(option):
        linked = (option.inventory_item or option.name).lower()
        # Untracked ingredients are treated as always in stock
        return in_stock.get(linked, True)

    menu = catalog.menu(stock_check=_stock_check)
    return {key: menu[key] for key in GROUP_KEYS.values()}


def get_pizza(pizza_id, include_unavailable=False):
    try:
        pizza = current_domain.repository_for(Pizza).get(pizza_id)
    except ObjectNotFoundError:
        pizza = None
    if pizza is None or not (pizza.is_available or include_unavailable):
        raise NotFound("Pizza not found")
    return pizza


def pizza_view(pizza):
    data = pizza.to_dict()
    data["sizes"] = [{"size": s.size, "price_multiplier": s.price_multiplier} for s in pizza.sizes]
    return data
