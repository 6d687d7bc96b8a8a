"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from api import health_router, router, set_store
from logging_config import configure_logging
from store import SessionStore

logger = logging.getLogger(__name__)


def create_app(
    store: SessionStore | None = None,
    setup_logging: bool = True,
) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts an optional store for testing; creates a fresh one if omitted.
    """
    if setup_logging:
        configure_logging()

    if store is None:
        store = SessionStore()

    set_store(store)

    app = FastAPI(
        title="Keypad Calculator API",
        description=(
            "Headless keypad calculator sessions. Each session holds a "
            "display and an evaluation core that stores one pending "
            "operator; keys are pressed in order exactly as on the keypad."
        ),
        version="0.1.0",
    )
    app.include_router(router)
    app.include_router(health_router)
    logger.info("Keypad calculator API ready (max_sessions=%d)", store.max_sessions)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
