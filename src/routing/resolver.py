from __future__ import annotations

import logging

from routing.builder import OwnerMapping
from routing.schemas import RouteDecision

LOGGER = logging.getLogger(__name__)


def resolve_route(owner_id: str | None, mapping: OwnerMapping, **log_fields: object) -> RouteDecision:
    """Translate a CRM owner id into a routing decision.

    Misses are never errors: an absent or unmapped owner yields the no-route
    decision so the telephony platform applies its default handling.
    ``log_fields`` (caller number, call id...) are appended to the miss log line.
    """

    if not owner_id:
        return RouteDecision.no_route()

    telephony_user_id = mapping.get(owner_id)
    if telephony_user_id is None:
        context = "".join(f" {key}={value}" for key, value in log_fields.items())
        LOGGER.warning(
            "hubspot_owner_not_mapped_to_aircall_user hubspot_owner_id=%s mapped_owners=%d%s",
            owner_id,
            len(mapping),
            context,
        )
        return RouteDecision.no_route()

    return RouteDecision.to_user(telephony_user_id)
