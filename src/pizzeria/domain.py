"""Pizzeria domain: catalog, pricing, inventory, ordering and identity.

A single Protean domain holds every aggregate. Adapters (payment gateway,
email, real-time broadcast) live beside the domain code behind ports and are
swapped through small registries.
"""

import logging

from protean.domain import Domain

from pizzeria.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

logging.getLogger("protean").setLevel(logging.WARNING)

pizzeria = Domain(name="pizzeria")
