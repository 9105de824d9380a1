"""Factories wiring the configured HubSpot and Aircall adapters into the routing core."""

from __future__ import annotations

from datetime import timedelta

from config.settings import Settings, get_settings
from integrations.aircall_client import AircallUserDirectory
from integrations.hubspot_client import HubSpotContactSearch, HubSpotOwnerDirectory
from routing.cache import MappingCache
from routing.service import CallRoutingService


def build_mapping_cache(settings: Settings | None = None) -> MappingCache:
    settings = settings or get_settings()
    owners = HubSpotOwnerDirectory(
        settings.hubspot_access_token,
        base_url=settings.hubspot_base_url,
        page_size=settings.hubspot_owners_page_size,
        page_timeout=settings.directory_page_timeout_seconds,
        max_pages=settings.directory_max_pages,
    )
    users = AircallUserDirectory(
        settings.aircall_api_id,
        settings.aircall_api_token,
        base_url=settings.aircall_base_url,
        page_size=settings.aircall_users_page_size,
        page_timeout=settings.directory_page_timeout_seconds,
        max_pages=settings.directory_max_pages,
    )
    return MappingCache(
        owners,
        users,
        policy=settings.mapping_refresh_policy,
        ttl=timedelta(seconds=settings.mapping_ttl_seconds),
    )


def build_routing_service(settings: Settings | None = None) -> CallRoutingService:
    """Instantiate the routing service for the configured directories."""

    return CallRoutingService(build_mapping_cache(settings))


def build_contact_search(settings: Settings | None = None) -> HubSpotContactSearch:
    settings = settings or get_settings()
    return HubSpotContactSearch(
        settings.hubspot_access_token,
        base_url=settings.hubspot_base_url,
        timeout=settings.contact_search_timeout_seconds,
    )
