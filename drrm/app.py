"""
FastAPI application entry point for the preparedness backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from drrm.config import Settings, get_settings
from drrm.dependencies import build_storage
from drrm.routes import router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # A missing backend is fatal here, before any request is served.
        storage = build_storage(settings)
        if settings.seed_on_startup:
            seeded = storage.initialize_reference_data()
            logger.info("Reference data initialized: %s", seeded)
        app.state.storage = storage
        try:
            yield
        finally:
            storage.close()

    app = FastAPI(
        title="DRRM Preparedness Backend (FastAPI)", version="0.1.0", lifespan=lifespan
    )
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
