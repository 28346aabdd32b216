"""Sample menu and pantry for a fresh installation.

``seed()`` is idempotent: pizzas and inventory items that already exist (by
name) are left alone, so it can run on every deploy.
"""

from protean.utils.globals import current_domain

from pizzeria.catalog.management import load_catalog
from pizzeria.catalog.pizza import Pizza
from pizzeria.domain import logger
from pizzeria.identity.auth import ensure_admin
from pizzeria.inventory.item import InventoryItem
from pizzeria.inventory.management import find_by_name
from pizzeria.shared.query import fetch

SAMPLE_PIZZAS = [
    {
        "name": "Margherita",
        "description": "Classic Italian pizza with fresh tomatoes, mozzarella cheese, and basil leaves",
        "image": "margherita.jpg",
        "category": "vegetarian",
        "base_price": 299,
        "rating": 4.5,
        "num_of_reviews": 150,
        "preparation_time": 15,
        "ingredients": ["Tomato Sauce", "Mozzarella Cheese", "Fresh Basil", "Olive Oil"],
        "nutritional_info": {"calories": 250, "protein": 12, "carbs": 30, "fat": 10, "fiber": 2},
    },
    {
        "name": "Pepperoni Supreme",
        "description": "Loaded with pepperoni, extra cheese, and a blend of Italian herbs",
        "image": "pepperoni-supreme.jpg",
        "category": "non-vegetarian",
        "base_price": 399,
        "rating": 4.7,
        "num_of_reviews": 200,
        "preparation_time": 18,
        "ingredients": ["Tomato Sauce", "Mozzarella Cheese", "Pepperoni", "Italian Herbs"],
        "nutritional_info": {"calories": 320, "protein": 16, "carbs": 28, "fat": 18, "fiber": 2},
    },
    {
        "name": "Veggie Delight",
        "description": "Fresh vegetables including bell peppers, mushrooms, onions, and olives",
        "image": "veggie-delight.jpg",
        "category": "vegetarian",
        "base_price": 349,
        "rating": 4.3,
        "num_of_reviews": 120,
        "preparation_time": 16,
        "ingredients": ["Tomato Sauce", "Mozzarella Cheese", "Bell Peppers", "Mushrooms", "Onions", "Olives"],
        "nutritional_info": {"calories": 230, "protein": 10, "carbs": 32, "fat": 8, "fiber": 4},
    },
    {
        "name": "BBQ Chicken",
        "description": "Grilled chicken with BBQ sauce, red onions, and cilantro",
        "image": "bbq-chicken.jpg",
        "category": "non-vegetarian",
        "base_price": 449,
        "rating": 4.6,
        "num_of_reviews": 180,
        "preparation_time": 20,
        "ingredients": ["BBQ Sauce", "Mozzarella Cheese", "Grilled Chicken", "Red Onions", "Cilantro"],
        "nutritional_info": {"calories": 350, "protein": 20, "carbs": 30, "fat": 16, "fiber": 2},
    },
    {
        "name": "Hawaiian Paradise",
        "description": "Ham and pineapple with extra cheese on a tomato base",
        "image": "hawaiian.jpg",
        "category": "non-vegetarian",
        "base_price": 429,
        "rating": 4.2,
        "num_of_reviews": 95,
        "preparation_time": 17,
        "ingredients": ["Tomato Sauce", "Mozzarella Cheese", "Ham", "Pineapple"],
        "nutritional_info": {"calories": 310, "protein": 15, "carbs": 35, "fat": 12, "fiber": 2},
    },
    {
        "name": "Vegan Special",
        "description": "Plant-based cheese with fresh vegetables and vegan-friendly toppings",
        "image": "vegan-special.jpg",
        "category": "vegan",
        "base_price": 379,
        "rating": 4.4,
        "num_of_reviews": 75,
        "preparation_time": 16,
        "ingredients": ["Tomato Sauce", "Vegan Cheese", "Bell Peppers", "Mushrooms", "Spinach", "Cherry Tomatoes"],
        "nutritional_info": {"calories": 220, "protein": 8, "carbs": 30, "fat": 9, "fiber": 5},
    },
    {
        "name": "Meat Lovers",
        "description": "Loaded with pepperoni, sausage, ham, and bacon",
        "image": "meat-lovers.jpg",
        "category": "non-vegetarian",
        "base_price": 499,
        "rating": 4.8,
        "num_of_reviews": 220,
        "preparation_time": 22,
        "ingredients": ["Tomato Sauce", "Mozzarella Cheese", "Pepperoni", "Sausage", "Ham", "Bacon"],
        "nutritional_info": {"calories": 420, "protein": 22, "carbs": 28, "fat": 25, "fiber": 2},
    },
    {
        "name": "Four Cheese",
        "description": "A blend of mozzarella, cheddar, parmesan, and goat cheese",
        "image": "four-cheese.jpg",
        "category": "specialty",
        "base_price": 459,
        "rating": 4.5,
        "num_of_reviews": 110,
        "preparation_time": 18,
        "ingredients": ["White Sauce", "Mozzarella Cheese", "Cheddar Cheese", "Parmesan Cheese", "Goat Cheese"],
        "nutritional_info": {"calories": 380, "protein": 18, "carbs": 25, "fat": 22, "fiber": 1},
    },
]

# (name, category, current, min, max, unit, price per unit)
SAMPLE_INVENTORY = [
    ("Thin Crust", "base", 100, 20, 200, "pieces", 15),
    ("Thick Crust", "base", 80, 15, 150, "pieces", 20),
    ("Cheese Burst", "base", 50, 10, 100, "pieces", 35),
    ("Whole Wheat", "base", 60, 15, 120, "pieces", 18),
    ("Gluten Free", "base", 30, 10, 80, "pieces", 25),
    ("Tomato Sauce", "sauce", 50, 10, 100, "liters", 150),
    ("White Sauce", "sauce", 30, 8, 60, "liters", 200),
    ("Pesto Sauce", "sauce", 20, 5, 40, "liters", 300),
    ("BBQ Sauce", "sauce", 25, 6, 50, "liters", 250),
    ("Spicy Sauce", "sauce", 35, 8, 70, "liters", 180),
    ("Mozzarella", "cheese", 25, 5, 50, "kg", 400),
    ("Cheddar", "cheese", 15, 3, 30, "kg", 500),
    ("Parmesan", "cheese", 10, 2, 20, "kg", 800),
    ("Goat Cheese", "cheese", 8, 2, 15, "kg", 1000),
    ("Vegan Cheese", "cheese", 12, 3, 25, "kg", 600),
    ("Bell Peppers", "vegetable", 20, 5, 40, "kg", 80),
    ("Mushrooms", "vegetable", 15, 3, 30, "kg", 120),
    ("Onions", "vegetable", 30, 8, 60, "kg", 40),
    ("Tomatoes", "vegetable", 25, 6, 50, "kg", 60),
    ("Olives", "vegetable", 10, 2, 20, "kg", 300),
    ("Spinach", "vegetable", 8, 2, 15, "kg", 100),
    ("Corn", "vegetable", 12, 3, 25, "kg", 70),
    ("Jalapeños", "vegetable", 5, 1, 10, "kg", 200),
    ("Pepperoni", "meat", 8, 2, 15, "kg", 800),
    ("Chicken", "meat", 12, 3, 25, "kg", 300),
    ("Sausage", "meat", 10, 2, 20, "kg", 600),
    ("Ham", "meat", 6, 2, 12, "kg", 700),
    ("Bacon", "meat", 7, 2, 15, "kg", 900),
]


def seed():
    """Load the admin account, customization catalog, sample pizzas and pantry. Returns counts."""
    ensure_admin()
    load_catalog()

    pizza_repo = current_domain.repository_for(Pizza)
    known_pizzas = {p.name.lower() for p in fetch(Pizza)}
    pizzas_added = 0
    for entry in SAMPLE_PIZZAS:
        if entry["name"].lower() in known_pizzas:
            continue
        attributes = dict(entry)
        pizza_repo.add(
            Pizza.create(
                attributes.pop("name"),
                attributes.pop("description"),
                attributes.pop("category"),
                attributes.pop("base_price"),
                **attributes,
            )
        )
        pizzas_added += 1

    item_repo = current_domain.repository_for(InventoryItem)
    items_added = 0
    for name, category, current, minimum, maximum, unit, price in SAMPLE_INVENTORY:
        if find_by_name(name):
            continue
        item_repo.add(
            InventoryItem.create(
                name=name,
                category=category,
                unit=unit,
                current_stock=current,
                min_stock_level=minimum,
                max_stock_level=maximum,
                price_per_unit=price,
            )
        )
        items_added += 1

    logger.info("seed_completed", pizzas=pizzas_added, inventory_items=items_added)
    return {"pizzas": pizzas_added, "inventory_items": items_added}
