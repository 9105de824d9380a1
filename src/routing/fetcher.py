"""Cursor-paginated collection of a remote user directory."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx
from pydantic import ValidationError

from routing.errors import DirectoryFetchError, MapBuildError
from routing.schemas import DirectoryRecord

LOGGER = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=DirectoryRecord)


@dataclass(frozen=True)
class DirectoryPage:
    items: list[dict[str, Any]] = field(default_factory=list)
    next_cursor: str | None = None


class DirectoryFetcher(ABC, Generic[RecordT]):
    """Collects every record of one directory, page by page.

    The whole directory is materialized before returning. A failure on any page
    aborts the collection; callers never see a partial directory.
    """

    name: str = "directory"
    record_model: type[RecordT]

    def __init__(
        self,
        *,
        page_timeout: float = 8.0,
        max_pages: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._page_timeout = page_timeout
        self._max_pages = max_pages
        self._transport = transport

    @abstractmethod
    def _client_options(self) -> dict[str, Any]:
        """Return base_url/auth/headers for the HTTP client.

        Raises DirectoryFetchError when credentials are not configured.
        """

    @abstractmethod
    async def _fetch_page(self, client: httpx.AsyncClient, cursor: str | None) -> DirectoryPage:
        """Request one page; ``cursor`` is None for the first page."""

    async def collect(self) -> list[RecordT]:
        options = self._client_options()
        records: list[RecordT] = []
        cursor: str | None = None
        pages = 0

        try:
            async with httpx.AsyncClient(
                timeout=self._page_timeout,
                transport=self._transport,
                **options,
            ) as client:
                while True:
                    if pages >= self._max_pages:
                        raise DirectoryFetchError(
                            self.name, f"still paginating after {pages} pages"
                        )
                    page = await self._fetch_page(client, cursor)
                    pages += 1
                    records.extend(self._parse(item) for item in page.items)
                    LOGGER.debug(
                        "directory_fetch_page directory=%s page=%d records=%d",
                        self.name,
                        pages,
                        len(page.items),
                    )
                    if not page.next_cursor:
                        break
                    cursor = page.next_cursor
        except httpx.TimeoutException as exc:
            LOGGER.error("directory_fetch_failed directory=%s page=%d cause=timeout", self.name, pages + 1)
            raise DirectoryFetchError(self.name, f"timeout on page {pages + 1}: {exc!r}") from exc
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "directory_fetch_failed directory=%s page=%d status=%s body=%s",
                self.name,
                pages + 1,
                exc.response.status_code,
                exc.response.text,
            )
            raise DirectoryFetchError(
                self.name, f"HTTP {exc.response.status_code} on page {pages + 1}"
            ) from exc
        except httpx.HTTPError as exc:
            LOGGER.error("directory_fetch_failed directory=%s page=%d cause=%s", self.name, pages + 1, exc)
            raise DirectoryFetchError(self.name, exc) from exc
        except ValueError as exc:
            # Body was not JSON, or not shaped like a directory page.
            LOGGER.error("directory_fetch_failed directory=%s page=%d cause=invalid_body", self.name, pages + 1)
            raise DirectoryFetchError(self.name, f"invalid response body on page {pages + 1}: {exc}") from exc

        LOGGER.info("directory_fetch_complete directory=%s pages=%d records=%d", self.name, pages, len(records))
        return records

    def _parse(self, item: Any) -> RecordT:
        try:
            return self.record_model.model_validate(item)
        except ValidationError as exc:
            raise MapBuildError(f"{self.name} returned a malformed record: {exc.errors()}") from exc

    @staticmethod
    def _object_field(data: dict[str, Any], key: str) -> dict[str, Any]:
        value = data.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError(f"Expected '{key}' to be a JSON object.")
        return value

    @staticmethod
    def _list_field(data: dict[str, Any], key: str) -> list[Any]:
        value = data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError(f"Expected '{key}' to be a JSON array.")
        return value

    @staticmethod
    def _json_object(response: httpx.Response) -> dict[str, Any]:
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object.")
        return data
