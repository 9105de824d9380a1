"""Pydantic schemas for directory records and routing decisions."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class DirectoryRecord(BaseModel):
    """One entry of a remote user directory, reduced to what the join needs."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    email: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, value: Any) -> Any:
        # Aircall ids are integers, HubSpot ids are strings.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def normalized_email(self) -> str:
        return normalize_email(self.email)


class OwnerRecord(DirectoryRecord):
    """CRM contact owner."""


class TelephonyUserRecord(DirectoryRecord):
    """Telephony platform user that calls can be routed to."""


class ContactMatch(BaseModel):
    """Result of a CRM contact search by phone number."""

    contact_id: str
    owner_id: str | None = None


class RouteDecision(BaseModel):
    """Outcome of a routing lookup.

    A decision without a target is the neutral no-route answer: the telephony
    platform falls back to its own default call handling.
    """

    model_config = ConfigDict(frozen=True)

    telephony_user_id: str | None = None

    @classmethod
    def no_route(cls) -> RouteDecision:
        return cls()

    @classmethod
    def to_user(cls, telephony_user_id: str) -> RouteDecision:
        return cls(telephony_user_id=telephony_user_id)

    @property
    def is_routed(self) -> bool:
        return self.telephony_user_id is not None


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()
