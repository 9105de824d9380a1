"""Host-facing facade over the owner mapping cache."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from routing.cache import MappingCache
from routing.resolver import resolve_route
from routing.schemas import RouteDecision

LOGGER = logging.getLogger(__name__)


class CallRoutingService:
    """Owns the refresh lifecycle of a MappingCache and answers routing lookups."""

    def __init__(self, cache: MappingCache) -> None:
        self._cache = cache
        self._initial_build: asyncio.Task[None] | None = None
        self._periodic: asyncio.Task[None] | None = None

    @property
    def cache(self) -> MappingCache:
        return self._cache

    def trigger_initial_build(self) -> asyncio.Task[None]:
        """Start the first mapping build in the background. Safe to call repeatedly."""

        if self._initial_build is None:
            self._initial_build = asyncio.create_task(self._build_initial_mapping(), name="owner-mapping-initial")
        return self._initial_build

    def schedule_periodic_refresh(self, interval: float) -> asyncio.Task[None]:
        """Register the background refresh task; later calls return the running task."""

        if self._periodic is not None and not self._periodic.done():
            return self._periodic
        self._periodic = asyncio.create_task(
            self._refresh_periodically(interval),
            name="owner-mapping-periodic",
        )
        LOGGER.info("user_map_refresh_scheduled interval_seconds=%s", interval)
        return self._periodic

    async def resolve_route(self, owner_id: str | None, **log_fields: object) -> RouteDecision:
        """Route a call for ``owner_id``; ``log_fields`` describe the call in miss logs."""

        mapping = await self._cache.get_mapping()
        return resolve_route(owner_id, mapping, **log_fields)

    async def shutdown(self) -> None:
        for task in (self._periodic, self._initial_build):
            if task is None or task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._cache.aclose()

    async def _build_initial_mapping(self) -> None:
        try:
            await self._cache.refresh(event="user_map_initial_build")
        except Exception:
            # Logged by the cache, which keeps serving an empty mapping; the next refresh retries.
            return

    async def _refresh_periodically(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self._cache.refresh()
            except Exception:
                # Logged by the cache; the next tick retries.
                continue
