"""
FastAPI app entry point aggregating per-domain routers under atelier/routes.
Keep as `uvicorn atelier.api:app`.
"""
from __future__ import annotations

import logging
import sqlite3

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .db import Store
from .errors import SchemaError
from .logs import setup_logging
from .providers.notifier import LogNotifier
from .services.schema_svc import initialize_schema

logger = logging.getLogger(__name__)

app = FastAPI(title="atelier-api", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8081",
        "http://127.0.0.1:8081",
        "http://localhost:19006",
        "http://127.0.0.1:19006",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def init_state(target: FastAPI, store: Store) -> None:
    """Attach the store and run schema setup; a schema failure leaves the app in degraded mode."""
    target.state.store = store
    target.state.schema_error = None
    if getattr(target.state, "notifier", None) is None:
        target.state.notifier = LogNotifier()
    try:
        initialize_schema(store)
    except SchemaError as e:
        logger.error("schema initialisation failed, running degraded: %s", e)
        target.state.schema_error = str(e)


@app.on_event("startup")
def on_startup():
    setup_logging()
    if getattr(app.state, "store", None) is not None:
        return
    try:
        store = Store()
    except sqlite3.Error as e:
        logger.error("cannot open database, running degraded: %s", e)
        app.state.store = None
        app.state.schema_error = str(e)
        return
    init_state(app, store)


@app.on_event("shutdown")
def on_shutdown():
    store = getattr(app.state, "store", None)
    if store is not None:
        store.close()
        app.state.store = None


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import orders as orders_routes
from .routes import notifications as notifications_routes
from .routes import maintenance as maintenance_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(orders_routes.router)
app.include_router(notifications_routes.router)
app.include_router(maintenance_routes.router)
app.include_router(logs_routes.router)
