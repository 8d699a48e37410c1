from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from datastore.record_store import build_default_store
from logging_config import configure_logging
from services.ingestion import build_default_ingestion
from services.queries import build_default_query

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    store = build_default_store()
    logger.info(
        "Telemetry store ready",
        extra={"collection": f"{store.sensors.name},{store.accidents.name}"},
    )
    try:
        yield
    finally:
        build_default_ingestion.cache_clear()
        build_default_query.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="SafeDrive Telemetry",
        description="Ingestion and query service for vehicle-safety telemetry.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
