"""Aircall user directory."""

from __future__ import annotations

from typing import Any

import httpx

from routing.errors import DirectoryFetchError
from routing.fetcher import DirectoryFetcher, DirectoryPage
from routing.schemas import TelephonyUserRecord

DEFAULT_BASE_URL = "https://api.aircall.io"
USERS_PATH = "/v1/users"


class AircallUserDirectory(DirectoryFetcher[TelephonyUserRecord]):
    """All Aircall users.

    Aircall paginates with a full ``meta.next_page_link`` URL, which is used
    verbatim as the cursor for the following request.
    """

    name = "aircall_users"
    record_model = TelephonyUserRecord

    def __init__(
        self,
        api_id: str | None,
        api_token: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        page_size: int = 50,
        page_timeout: float = 8.0,
        max_pages: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(page_timeout=page_timeout, max_pages=max_pages, transport=transport)
        self._api_id = api_id
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size

    def _client_options(self) -> dict[str, Any]:
        if not self._api_id or not self._api_token:
            raise DirectoryFetchError(self.name, "AIRCALL_API_ID/AIRCALL_API_TOKEN are not configured")
        return {"base_url": self._base_url, "auth": (self._api_id, self._api_token)}

    async def _fetch_page(self, client: httpx.AsyncClient, cursor: str | None) -> DirectoryPage:
        if cursor:
            response = await client.get(cursor)
        else:
            response = await client.get(USERS_PATH, params={"per_page": self._page_size})
        data = self._json_object(response)

        next_link = self._object_field(data, "meta").get("next_page_link")
        return DirectoryPage(
            items=list(self._list_field(data, "users")),
            next_cursor=str(next_link) if next_link else None,
        )
