"""HubSpot CRM: owner directory and contact search by phone number."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from routing.errors import ContactSearchError, DirectoryFetchError
from routing.fetcher import DirectoryFetcher, DirectoryPage
from routing.schemas import ContactMatch, OwnerRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.hubapi.com"
OWNERS_PATH = "/crm/v3/owners/"
CONTACT_SEARCH_PATH = "/crm/v3/objects/contacts/search"
OWNER_PROPERTY = "hubspot_owner_id"


def _bearer_headers(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


class HubSpotOwnerDirectory(DirectoryFetcher[OwnerRecord]):
    """All HubSpot owners, paginated by the ``paging.next.after`` cursor."""

    name = "hubspot_owners"
    record_model = OwnerRecord

    def __init__(
        self,
        access_token: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        page_size: int = 100,
        page_timeout: float = 8.0,
        max_pages: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(page_timeout=page_timeout, max_pages=max_pages, transport=transport)
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._page_size = page_size

    def _client_options(self) -> dict[str, Any]:
        if not self._access_token:
            raise DirectoryFetchError(self.name, "HUBSPOT_ACCESS_TOKEN is not configured")
        return {"base_url": self._base_url, "headers": _bearer_headers(self._access_token)}

    async def _fetch_page(self, client: httpx.AsyncClient, cursor: str | None) -> DirectoryPage:
        params: dict[str, Any] = {"limit": self._page_size}
        if cursor:
            params["after"] = cursor
        data = self._json_object(await client.get(OWNERS_PATH, params=params))

        paging = self._object_field(data, "paging")
        next_after = self._object_field(paging, "next").get("after")
        return DirectoryPage(
            items=list(self._list_field(data, "results")),
            next_cursor=str(next_after) if next_after else None,
        )


class HubSpotContactSearch:
    """Finds the contact (and its owner) behind a caller's phone number.

    Matching uses HubSpot's ``CONTAINS_TOKEN`` operator on the ``phone``
    property, so formatting differences are HubSpot's concern.
    """

    def __init__(
        self,
        access_token: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def search_by_phone(self, phone_number: str) -> ContactMatch | None:
        if not self._access_token:
            raise ContactSearchError("HUBSPOT_ACCESS_TOKEN is not configured")

        payload = {
            "filterGroups": [
                {
                    "filters": [
                        {
                            "propertyName": "phone",
                            "operator": "CONTAINS_TOKEN",
                            "value": phone_number,
                        }
                    ]
                }
            ],
            "properties": [OWNER_PROPERTY],
            "limit": 1,
        }

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    CONTACT_SEARCH_PATH,
                    json=payload,
                    headers=_bearer_headers(self._access_token),
                )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "hubspot_search_failed status=%s body=%s",
                exc.response.status_code,
                exc.response.text,
            )
            raise ContactSearchError(f"HubSpot search error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            LOGGER.error("hubspot_search_failed error=%r", exc)
            raise ContactSearchError(f"HubSpot search failed: {exc!r}") from exc
        except ValueError as exc:
            raise ContactSearchError("HubSpot search returned an invalid body") from exc

        if not isinstance(data, dict):
            raise ContactSearchError("HubSpot search returned an invalid body")
        results = data.get("results") or []
        if not results:
            return None

        contact = results[0]
        owner_id = (contact.get("properties") or {}).get(OWNER_PROPERTY)
        return ContactMatch(
            contact_id=str(contact.get("id") or ""),
            owner_id=str(owner_id) if owner_id else None,
        )
