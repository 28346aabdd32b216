"""Pizzeria FastAPI application.

Every HTTP request runs inside the pizzeria domain context. The lifespan
seeds the customization catalog and the admin account, binds the WebSocket
hub to the running loop and starts the rate-limit sweeper.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 5000 --reload
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pizzeria.config import get_settings
from pizzeria.domain import logger, pizzeria

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay from domain.toml (memory by default,
# PostgreSQL under "production").
pizzeria.init()

from pizzeria.admin.api import router as admin_router  # noqa: E402
from pizzeria.catalog.api import router as pizza_router  # noqa: E402
from pizzeria.catalog.management import load_catalog  # noqa: E402
from pizzeria.identity.api import router as auth_router  # noqa: E402
from pizzeria.identity.auth import ensure_admin  # noqa: E402
from pizzeria.identity.ratelimit import sweep_periodically  # noqa: E402
from pizzeria.inventory.api import router as inventory_router  # noqa: E402
from pizzeria.ordering.api import router as orders_router  # noqa: E402
from pizzeria.realtime import hub  # noqa: E402
from pizzeria.realtime.routes import router as realtime_router  # noqa: E402
from pizzeria.shared.api import register_error_handlers  # noqa: E402


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    with pizzeria.domain_context():
        load_catalog()
        _, created = ensure_admin()
        if created:
            logger.warning("default_admin_created", email=settings.admin_email)

    hub.bind_loop(asyncio.get_running_loop())
    sweeper = asyncio.create_task(sweep_periodically(settings.rate_limit_sweep_seconds))
    logger.info("application_started", env=settings.env)
    try:
        yield
    finally:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        logger.info("application_stopped")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Pizzeria API",
    description="Pizza ordering: menu, checkout, payments, delivery tracking and back office",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the pizzeria domain context for each request."""
    with pizzeria.domain_context():
        return await call_next(request)


register_error_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_router)
app.include_router(pizza_router)
app.include_router(orders_router)
app.include_router(admin_router)
app.include_router(inventory_router)
app.include_router(realtime_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "success": True,
            "message": "Pizza Delivery API is running",
            "data": {"env": get_settings().env, "domain": pizzeria.name},
        }
    )
