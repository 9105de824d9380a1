"""FastAPI routes exposing the state of the owner mapping."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_routing_service
from api.schemas import RoutingStatusResponse
from routing.service import CallRoutingService

router = APIRouter()


@router.get("/routing/status", response_model=RoutingStatusResponse)
async def routing_status(
    routing: CallRoutingService = Depends(get_routing_service),
) -> RoutingStatusResponse:
    cache = routing.cache
    state = cache.snapshot
    return RoutingStatusResponse(
        policy=cache.policy,
        mapped_owners=len(state.mapping),
        owner_count=state.owner_count,
        user_count=state.user_count,
        last_refreshed_at=state.last_refreshed_at,
        stale=cache.is_stale(),
        refresh_in_flight=cache.refresh_in_flight,
    )
