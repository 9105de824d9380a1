"""In-memory owner mapping with single-flight refresh and staleness policy."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal

from routing.builder import EMPTY_MAPPING, OwnerMapping, build_owner_mapping
from routing.errors import RoutingError
from routing.fetcher import DirectoryFetcher
from routing.schemas import OwnerRecord, TelephonyUserRecord

LOGGER = logging.getLogger(__name__)

RefreshPolicy = Literal["background", "on_demand"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheState:
    """Immutable snapshot of the mapping; replaced as a whole, never edited."""

    mapping: OwnerMapping = field(default_factory=lambda: EMPTY_MAPPING)
    last_refreshed_at: datetime | None = None
    owner_count: int = 0
    user_count: int = 0


class MappingCache:
    """Owns the current owner mapping and mediates every read and rebuild.

    At most one refresh runs at a time: a refresh requested while another is in
    flight awaits that run's outcome instead of fetching the directories again.
    A failed refresh leaves the previous snapshot in place.
    """

    def __init__(
        self,
        owners: DirectoryFetcher[OwnerRecord],
        users: DirectoryFetcher[TelephonyUserRecord],
        *,
        policy: RefreshPolicy = "background",
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._owners = owners
        self._users = users
        self._policy = policy
        self._ttl = ttl
        self._clock = clock
        self._state = CacheState()
        self._inflight: asyncio.Task[CacheState] | None = None

    @property
    def policy(self) -> RefreshPolicy:
        return self._policy

    @property
    def snapshot(self) -> CacheState:
        return self._state

    @property
    def refresh_in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def is_stale(self) -> bool:
        state = self._state
        if not state.mapping or state.last_refreshed_at is None:
            return True
        return self._clock() - state.last_refreshed_at > self._ttl

    async def refresh(self, *, event: str = "user_map_refresh") -> CacheState:
        """Rebuild the mapping, or join the rebuild already running.

        ``event`` prefixes the start/success/failed log events of a new run.
        """

        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._run_refresh(event), name="owner-mapping-refresh")
            task.add_done_callback(self._refresh_done)
            self._inflight = task
        else:
            LOGGER.info("user_map_refresh_joined")
        # A cancelled waiter must not cancel the run other callers share.
        return await asyncio.shield(task)

    async def get_mapping(self) -> OwnerMapping:
        if self._policy == "on_demand" and self.is_stale():
            LOGGER.info("user_map_stale last_refreshed_at=%s", self._state.last_refreshed_at)
            try:
                await self.refresh()
            except Exception:
                # Failure is already logged by the refresh; keep serving what we have.
                pass
        return self._state.mapping

    async def aclose(self) -> None:
        """Cancel a refresh that is still running, e.g. on process shutdown."""

        task = self._inflight
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run_refresh(self, event: str) -> CacheState:
        LOGGER.info("%s_start", event)
        try:
            owners, users = await self._collect_directories()
            result = build_owner_mapping(owners, users)
        except RoutingError as exc:
            LOGGER.error("%s_failed error=%s", event, exc)
            raise
        except Exception as exc:
            LOGGER.exception("%s_failed error=%s", event, exc)
            raise

        state = CacheState(
            mapping=result.mapping,
            last_refreshed_at=self._clock(),
            owner_count=result.owner_count,
            user_count=result.user_count,
        )
        self._state = state
        LOGGER.info("%s_success owner_count=%d", event, len(state.mapping))
        return state

    async def _collect_directories(self) -> tuple[list[OwnerRecord], list[TelephonyUserRecord]]:
        # Both directories are fetched concurrently; the join needs both complete.
        owners, users = await asyncio.gather(
            self._owners.collect(),
            self._users.collect(),
            return_exceptions=True,
        )
        for outcome in (owners, users):
            if isinstance(outcome, BaseException):
                raise outcome
        return owners, users

    def _refresh_done(self, task: asyncio.Task[CacheState]) -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            # Mark the outcome as retrieved even when every waiter went away.
            task.exception()
