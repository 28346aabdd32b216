"""Checkout: turn a cart into a priced, pending order."""

import json
import random
import time
from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError, TransactionError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from pizzeria.catalog.management import load_catalog
from pizzeria.catalog.pizza import Pizza
from pizzeria.domain import logger, pizzeria
from pizzeria.ordering.order import Order
from pizzeria.pricing.engine import compute_line_price, compute_order_pricing, estimate_delivery_time
from pizzeria.shared.errors import ValidationFailure

ORDER_NUMBER_ATTEMPTS = 5


def generate_order_number(now_ms=None):
    """``PZ`` + last six digits of the millisecond clock + three random digits."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"PZ{str(now_ms)[-6:]}{random.randint(0, 999):03d}"


def is_order_number_clash(exc) -> bool:
    """True when saving an order failed because its number is already taken.

    The repository's own unique check reports a ValidationError keyed by the
    field; a race lost inside the database surfaces as a failed commit.
    """
    if isinstance(exc, ValidationError):
        return isinstance(exc.messages, dict) and "order_number" in exc.messages
    if isinstance(exc, TransactionError):
        info = exc.extra_info or {}
        return info.get("original_exception") == "IntegrityError" and "order_number" in info.get("original_message", "")
    return False


@pizzeria.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{pizza_id, size, quantity, customizations}]
    delivery_address = Text(required=True)  # JSON: address dict
    contact_phone = String(required=True, max_length=10)
    payment_method = String(required=True, max_length=20)
    order_notes = Text()


@pizzeria.command(part_of="Order")
class AttachGatewayOrder:
    order_id = Identifier(required=True)
    gateway_order_id = String(required=True, max_length=100)


@pizzeria.command(part_of="Order")
class DiscardOrder:
    """Remove an order that never got a payable gateway order."""

    order_id = Identifier(required=True)


def _price_items(requested):
    catalog = load_catalog()
    pizza_repo = current_domain.repository_for(Pizza)
    lines, pizzas = [], []

    for entry in requested:
        try:
            pizza = pizza_repo.get(entry["pizza_id"])
        except ObjectNotFoundError:
            pizza = None
        if pizza is None or not pizza.is_available:
            raise ValidationFailure(f"Pizza {entry['pizza_id']} is not available")

        quantity = int(entry.get("quantity", 1))
        line = compute_line_price(pizza, entry["size"], entry.get("customizations"), catalog, quantity)
        lines.append(
            {
                "pizza_id": str(pizza.id),
                "name": pizza.name,
                "quantity": quantity,
                "size": entry["size"],
                "customizations": json.dumps(line.customizations),
                "item_price": line.unit_price,
                "total_item_price": line.line_total,
            }
        )
        pizzas.append(pizza)
    return lines, pizzas


@pizzeria.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        requested = json.loads(command.items)
        if not requested:
            raise ValidationFailure("Order must contain at least one item")

        lines, pizzas = _price_items(requested)
        summary = compute_order_pricing([line["total_item_price"] for line in lines])
        now = datetime.now(UTC)
        # Kitchen time counts each pizza once per line
        eta = estimate_delivery_time([p.preparation_time for p in pizzas], now)

        order = Order.place(
            order_number=generate_order_number(),
            user_id=command.user_id,
            items=lines,
            delivery_address=json.loads(command.delivery_address),
            contact_phone=command.contact_phone,
            payment_method=command.payment_method,
            pricing=summary.as_dict(),
            estimated_delivery_time=eta,
            order_notes=command.order_notes,
            now=now,
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            total=order.pricing.total,
            payment_method=order.payment_method,
        )
        return str(order.id)

    @handle(AttachGatewayOrder)
    def attach_gateway_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.attach_gateway_order(command.gateway_order_id)
        repo.add(order)

    @handle(DiscardOrder)
    def discard(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        repo._dao.delete(order)
        logger.info("order_discarded", order_id=str(order.id), order_number=order.order_number)
