"""API-facing Pydantic models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RoutingStatusResponse(BaseModel):
    policy: str
    mapped_owners: int = Field(description="Owners currently mapped to a telephony user.")
    owner_count: int
    user_count: int
    last_refreshed_at: datetime | None
    stale: bool
    refresh_in_flight: bool
