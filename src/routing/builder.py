"""Join of CRM owners and telephony users into the owner mapping."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from routing.errors import MapBuildError
from routing.schemas import OwnerRecord, TelephonyUserRecord

LOGGER = logging.getLogger(__name__)

OwnerMapping = Mapping[str, str]

EMPTY_MAPPING: OwnerMapping = MappingProxyType({})


@dataclass(frozen=True)
class MappingBuildResult:
    mapping: OwnerMapping
    owner_count: int
    user_count: int

    @property
    def matched_count(self) -> int:
        return len(self.mapping)


def index_users_by_email(users: Iterable[TelephonyUserRecord]) -> dict[str, TelephonyUserRecord]:
    """Index users by normalized email.

    When several users share an email the last one wins.
    """

    index: dict[str, TelephonyUserRecord] = {}
    for user in users:
        if not user.id.strip():
            raise MapBuildError("Telephony user record without an id.")
        email = user.normalized_email
        if not email:
            continue
        previous = index.get(email)
        if previous is not None and previous.id != user.id:
            LOGGER.warning(
                "telephony_user_email_duplicate email=%s replaced_user_id=%s user_id=%s",
                email,
                previous.id,
                user.id,
            )
        index[email] = user
    return index


def build_owner_mapping(
    owners: Iterable[OwnerRecord],
    users: Iterable[TelephonyUserRecord],
) -> MappingBuildResult:
    owners = list(owners)
    users = list(users)
    by_email = index_users_by_email(users)

    mapping: dict[str, str] = {}
    for owner in owners:
        if not owner.id.strip():
            raise MapBuildError("Owner record without an id.")
        user = by_email.get(owner.normalized_email) if owner.normalized_email else None
        if user is None:
            continue
        mapping[owner.id] = user.id

    result = MappingBuildResult(
        mapping=MappingProxyType(mapping),
        owner_count=len(owners),
        user_count=len(users),
    )
    LOGGER.info(
        "user_map_build_complete owners=%d users=%d matched=%d",
        result.owner_count,
        result.user_count,
        result.matched_count,
    )
    return result
