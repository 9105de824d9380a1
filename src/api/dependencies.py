"""Shared FastAPI dependencies.

Separated to avoid circular imports between route modules.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from integrations.hubspot_client import HubSpotContactSearch
from routing.factory import build_contact_search
from routing.service import CallRoutingService


def get_routing_service(request: Request) -> CallRoutingService:
    # Created and owned by the application lifespan.
    return request.app.state.routing_service


@lru_cache(maxsize=1)
def _contact_search_factory() -> HubSpotContactSearch:
    return build_contact_search()


def get_contact_search() -> HubSpotContactSearch:
    return _contact_search_factory()
