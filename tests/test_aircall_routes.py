from __future__ import annotations

import logging

from conftest import FakeContactSearch, StaticDirectory
from fastapi.testclient import TestClient

from api.aircall_routes import render_route_response
from routing.cache import MappingCache
from routing.errors import ContactSearchError
from routing.schemas import ContactMatch, OwnerRecord, RouteDecision, TelephonyUserRecord
from routing.service import CallRoutingService

OWNERS = [OwnerRecord(id="o1", email="a@x.com")]
USERS = [TelephonyUserRecord(id="123456", email="A@X.com")]


def _routing_service(owners=OWNERS, users=USERS) -> CallRoutingService:
    # On-demand: the first lookup builds the mapping inside the app's event loop.
    return CallRoutingService(MappingCache(StaticDirectory(owners), StaticDirectory(users), policy="on_demand"))


def _client(app, contacts: FakeContactSearch, routing: CallRoutingService | None = None) -> TestClient:
    import api.dependencies as deps

    app.dependency_overrides[deps.get_contact_search] = lambda: contacts
    app.dependency_overrides[deps.get_routing_service] = lambda: routing or _routing_service()
    return TestClient(app)


def test_known_caller_is_routed_to_owner(app):
    contacts = FakeContactSearch(ContactMatch(contact_id="501", owner_id="o1"))

    with _client(app, contacts) as client:
        resp = client.post("/api/aircall/route", json={"callerNumber": "+41791234567", "callUUID": "call-1"})
    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {"data": {"target_type": "user", "target_id": 123456}}
    assert contacts.searched == ["+41791234567"]


def test_missing_caller_number_returns_empty_answer(app, caplog):
    caplog.set_level(logging.WARNING, logger="api.aircall_routes")
    contacts = FakeContactSearch()

    with _client(app, contacts) as client:
        resp = client.post("/api/aircall/route", json={"callUUID": "call-1"})
    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {}
    assert contacts.searched == []
    assert any("caller_number_missing_in_payload" in r.getMessage() for r in caplog.records)


def test_unknown_caller_returns_empty_answer(app):
    with _client(app, FakeContactSearch(None)) as client:
        resp = client.post("/api/aircall/route", json={"callerNumber": "+41790000000"})
    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {}


def test_contact_without_owner_returns_empty_answer(app):
    with _client(app, FakeContactSearch(ContactMatch(contact_id="501"))) as client:
        resp = client.post("/api/aircall/route", json={"callerNumber": "+41791234567"})
    app.dependency_overrides.clear()

    assert resp.json() == {}


def test_unmapped_owner_returns_empty_answer(app, caplog):
    caplog.set_level(logging.WARNING, logger="routing.resolver")
    contacts = FakeContactSearch(ContactMatch(contact_id="501", owner_id="o2"))

    with _client(app, contacts) as client:
        resp = client.post("/api/aircall/route", json={"callerNumber": "+41791234567", "callUUID": "call-7"})
    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {}
    unmapped = [r.getMessage() for r in caplog.records if "hubspot_owner_not_mapped_to_aircall_user" in r.getMessage()]
    assert len(unmapped) == 1
    assert "hubspot_owner_id=o2" in unmapped[0]
    assert "caller_number=+41791234567" in unmapped[0]
    assert "call_uuid=call-7" in unmapped[0]
    assert "hubspot_contact_id=501" in unmapped[0]


def test_search_failure_fails_open(app, caplog):
    caplog.set_level(logging.ERROR, logger="api.aircall_routes")
    contacts = FakeContactSearch(error=ContactSearchError("HubSpot search error: 500"))

    with _client(app, contacts) as client:
        resp = client.post("/api/aircall/route", json={"callerNumber": "+41791234567"})
    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {}
    assert any("call_routing_exception" in r.getMessage() for r in caplog.records)


def test_non_json_body_returns_empty_answer(app):
    with _client(app, FakeContactSearch()) as client:
        resp = client.post(
            "/api/aircall/route",
            content=b"callerNumber=123",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {}


def test_response_shapes():
    decision = RouteDecision.to_user("123456")

    assert render_route_response(decision, "nested") == {"data": {"target_type": "user", "target_id": 123456}}
    assert render_route_response(decision, "flat") == {"target_type": "user", "target_id": 123456}
    assert render_route_response(decision, "token") == {"target": "user:123456"}


def test_non_numeric_user_id_is_kept_as_string():
    assert render_route_response(RouteDecision.to_user("usr_9"), "flat") == {"target_type": "user", "target_id": "usr_9"}


def test_no_route_renders_empty_answer_in_every_shape():
    for shape in ("nested", "flat", "token"):
        assert render_route_response(RouteDecision.no_route(), shape) == {}


def test_non_ascii_digit_user_id_is_kept_as_string():
    assert render_route_response(RouteDecision.to_user("²"), "nested") == {"data": {"target_type": "user", "target_id": "²"}}
