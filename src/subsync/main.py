from __future__ import annotations

from typing import Optional

import stripe
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from subsync.api.v1.routers.health import router as health_router
from subsync.api.v1.routers.stripe_webhook import router as stripe_router
from subsync.api.v1.routers.subscription_status import router as subscription_router
from subsync.core.config import Settings, settings as default_settings
from subsync.core.logging import configure_logging
from subsync.services.event_router import EventRouter
from subsync.services.reconciler import Reconciler
from subsync.services.record_store import RecordStore


def validate_settings(settings: Settings) -> None:
    if settings.env == "local" and not settings.db_password and not settings.database_url_override:
        raise RuntimeError("DB_PASSWORD is missing. Check your .env file.")
    if settings.env != "test" and not settings.webhook_secret:
        raise RuntimeError("STRIPE_WEBHOOK_SECRET is missing. Check your .env file.")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    if settings.stripe_api_key:
        stripe.api_key = settings.stripe_api_key.get_secret_value()

    if store is None:
        from subsync.db.session import get_session_factory

        store = RecordStore(get_session_factory())

    reconciler = Reconciler(store, dedupe_payments=settings.dedupe_payments)

    app = FastAPI(title="subsync", version="0.1.0")
    app.state.settings = settings
    app.state.store = store
    app.state.event_router = EventRouter(reconciler, lookup_miss_policy=settings.lookup_miss_policy)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(stripe_router)
    app.include_router(subscription_router)

    @app.on_event("startup")
    def check_settings() -> None:
        validate_settings(settings)

    return app
