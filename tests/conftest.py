import json
import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def _pizzeria_domain(request):
    """Initialize the pizzeria domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from pizzeria.domain import pizzeria

    pizzeria.init()
    return pizzeria


@pytest.fixture(scope="session", autouse=True)
def setup_db(_pizzeria_domain):
    from pizzeria.utils.db import drop_db, setup_db

    setup_db(_pizzeria_domain)

    yield

    drop_db(_pizzeria_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_pizzeria_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _pizzeria_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    ctx.pop()


# ---------------------------------------------------------------------------
# Adapters and process-wide state
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _fresh_state():
    from pizzeria.config import reset_settings
    from pizzeria.identity.ratelimit import reset_limiters
    from pizzeria.shared.locks import reset_locks

    reset_settings()
    reset_limiters()
    reset_locks()
    yield
    reset_limiters()
    reset_locks()
    reset_settings()


@pytest.fixture(autouse=True)
def gateway():
    from pizzeria.payments.gateway import reset_gateway, set_gateway
    from pizzeria.payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def mailbox():
    from pizzeria.notifications.channel import reset_channels, set_channel
    from pizzeria.notifications.channel.fake_email import FakeEmailAdapter
    from pizzeria.notifications.types import NotificationChannel

    fake = FakeEmailAdapter()
    set_channel(NotificationChannel.EMAIL.value, fake)
    yield fake
    reset_channels()


@pytest.fixture(autouse=True)
def broadcasts():
    from pizzeria.realtime import reset_broadcaster, set_broadcaster
    from pizzeria.realtime.fake_broadcaster import FakeBroadcaster

    fake = FakeBroadcaster()
    set_broadcaster(fake)
    yield fake
    reset_broadcaster()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
DELIVERY_ADDRESS = {"street": "12 MG Road", "city": "Bengaluru", "state": "KA", "zip_code": "560001"}


@pytest.fixture()
def make_user():
    from protean import current_domain

    from pizzeria.identity.user import Role, User

    def _make(name="Asha Rao", email="asha@example.com", password="s3cret!", role=Role.USER.value, verified=True):
        user, _ = User.register(name=name, email=email, password=password, phone="9876543210", role=role)
        user.is_email_verified = verified
        current_domain.repository_for(User).add(user)
        return current_domain.repository_for(User).get(user.id)

    return _make


@pytest.fixture()
def customer(make_user):
    return make_user()


@pytest.fixture()
def other_customer(make_user):
    return make_user(name="Ravi Kumar", email="ravi@example.com")


@pytest.fixture()
def admin(make_user):
    from pizzeria.identity.user import Role

    return make_user(name="Admin", email="admin@pizzadelivery.com", password="admin123", role=Role.ADMIN.value)


@pytest.fixture()
def make_pizza():
    from protean import current_domain

    from pizzeria.catalog.management import AddPizza

    def _make(name="Margherita", base_price=299.0, category="vegetarian", preparation_time=15, **extra):
        command = AddPizza(
            name=name,
            description=f"{name} pizza",
            category=category,
            base_price=base_price,
            preparation_time=preparation_time,
            ingredients=json.dumps(extra.pop("ingredients", ["Tomato Sauce", "Mozzarella"])),
            **extra,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def margherita(make_pizza):
    """Id of a 299 rupee pizza offered in the four standard sizes."""
    return make_pizza()


@pytest.fixture()
def make_item():
    from protean import current_domain

    from pizzeria.inventory.management import AddInventoryItem

    def _make(name, current_stock=50.0, min_stock_level=10.0, max_stock_level=100.0, category="cheese", unit="kg"):
        command = AddInventoryItem(
            name=name,
            category=category,
            unit=unit,
            current_stock=current_stock,
            min_stock_level=min_stock_level,
            max_stock_level=max_stock_level,
            price_per_unit=100.0,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def place_order(customer, margherita):
    """Place an order for ``customer``; defaults to 2 medium margheritas paid online."""
    from pizzeria.ordering import workflows

    def _place(payment_method="razorpay", user=None, items=None):
        items = items or [{"pizza_id": margherita, "size": "medium", "quantity": 2, "customizations": None}]
        return workflows.place_order(
            user or customer,
            items=items,
            delivery_address=DELIVERY_ADDRESS,
            contact_phone="9876543210",
            payment_method=payment_method,
        )

    return _place


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
@pytest.fixture()
def client(_pizzeria_domain):
    """All routers mounted on a bare app, without the production lifespan."""
    from fastapi import FastAPI, Request
    from fastapi.testclient import TestClient

    from pizzeria.admin.api import router as admin_router
    from pizzeria.catalog.api import router as pizza_router
    from pizzeria.identity.api import router as auth_router
    from pizzeria.inventory.api import router as inventory_router
    from pizzeria.ordering.api import router as orders_router
    from pizzeria.shared.api import register_error_handlers

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with _pizzeria_domain.domain_context():
            return await call_next(request)

    register_error_handlers(app)
    for router in (auth_router, pizza_router, orders_router, admin_router, inventory_router):
        app.include_router(router)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def bearer():
    """``bearer(user)`` -> Authorization header for ``user``."""
    from pizzeria.identity.tokens import issue_token

    def _header(user):
        return {"Authorization": f"Bearer {issue_token(str(user.id))}"}

    return _header
