"""Entry point for the HubSpot owner to Aircall user call-routing service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.aircall_routes import router as aircall_router
from api.routes import router as api_router
from config.settings import get_settings
from routing.factory import build_routing_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    routing = build_routing_service(settings)
    app.state.routing_service = routing
    routing.trigger_initial_build()
    if settings.mapping_refresh_policy == "background":
        routing.schedule_periodic_refresh(settings.mapping_refresh_interval_seconds)
    try:
        yield
    finally:
        await routing.shutdown()


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Owner Call Router",
    description="Routes inbound Aircall calls to the HubSpot owner of the calling contact.",
    lifespan=lifespan,
)
app.include_router(api_router, prefix="/api")
app.include_router(aircall_router, prefix="/api")
