"""Domain-specific exceptions for the owner mapping and call routing.

These exceptions are safe to import from API layers without pulling in HTTP clients.
"""

from __future__ import annotations


class RoutingError(Exception):
    default_detail: str = "Routing error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class DirectoryFetchError(RoutingError):
    """A directory could not be collected completely."""

    default_detail = "Directory fetch failed."

    def __init__(self, directory: str, cause: str | BaseException) -> None:
        self.directory = directory
        self.cause = cause
        super().__init__(f"{directory}: {cause}")


class MapBuildError(RoutingError):
    """A directory returned a record the mapping cannot be built from."""

    default_detail = "Malformed directory record."


class ContactSearchError(RoutingError):
    default_detail = "CRM contact search failed."
