"""Aircall call-routing webhook.

Aircall asks this endpoint where an inbound call should go. The caller's number
is looked up in HubSpot, the contact owner is translated into an Aircall user
through the owner mapping, and the answer names that user as the target.

Every outcome is an HTTP 200. An empty body tells Aircall to apply its own
default routing, which is what happens on any miss or internal failure.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_contact_search, get_routing_service
from config.settings import get_settings
from routing.schemas import RouteDecision

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/aircall", tags=["aircall"])


def _target_id(telephony_user_id: str) -> int | str:
    # Aircall expects numeric user ids as JSON numbers.
    if telephony_user_id.isascii() and telephony_user_id.isdigit():
        return int(telephony_user_id)
    return telephony_user_id


def render_route_response(decision: RouteDecision, shape: str) -> dict[str, Any]:
    """Render a routing decision in the configured webhook answer shape."""

    if not decision.is_routed:
        return {}

    target_id = _target_id(decision.telephony_user_id)
    if shape == "flat":
        return {"target_type": "user", "target_id": target_id}
    if shape == "token":
        return {"target": f"user:{target_id}"}
    return {"data": {"target_type": "user", "target_id": target_id}}


async def _read_payload(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post("/route")
async def aircall_route_webhook(
    request: Request,
    routing=Depends(get_routing_service),
    contacts=Depends(get_contact_search),
) -> dict[str, Any]:
    payload = await _read_payload(request)
    caller_number = str(payload.get("callerNumber") or "").strip()
    call_uuid = payload.get("callUUID")

    LOGGER.info("incoming_call caller_number=%s call_uuid=%s", caller_number, call_uuid)

    if not caller_number:
        LOGGER.warning("caller_number_missing_in_payload call_uuid=%s", call_uuid)
        return {}

    try:
        LOGGER.info("hubspot_search_start caller_number=%s call_uuid=%s", caller_number, call_uuid)
        contact = await contacts.search_by_phone(caller_number)
        LOGGER.info(
            "hubspot_search_complete caller_number=%s call_uuid=%s result_count=%d",
            caller_number,
            call_uuid,
            0 if contact is None else 1,
        )

        if contact is None:
            LOGGER.info("hubspot_contact_not_found_for_number caller_number=%s call_uuid=%s", caller_number, call_uuid)
            return {}

        if not contact.owner_id:
            LOGGER.info(
                "hubspot_contact_has_no_owner caller_number=%s call_uuid=%s hubspot_contact_id=%s",
                caller_number,
                call_uuid,
                contact.contact_id,
            )
            return {}

        decision = await routing.resolve_route(
            contact.owner_id,
            caller_number=caller_number,
            call_uuid=call_uuid,
            hubspot_contact_id=contact.contact_id,
        )
        if not decision.is_routed:
            return {}

        LOGGER.info(
            "call_routing_success caller_number=%s call_uuid=%s hubspot_contact_id=%s "
            "hubspot_owner_id=%s aircall_user_id=%s",
            caller_number,
            call_uuid,
            contact.contact_id,
            contact.owner_id,
            decision.telephony_user_id,
        )
        return render_route_response(decision, get_settings().routing_response_shape)
    except Exception as exc:
        LOGGER.exception(
            "call_routing_exception caller_number=%s call_uuid=%s error=%s",
            caller_number,
            call_uuid,
            exc,
        )
        return {}
