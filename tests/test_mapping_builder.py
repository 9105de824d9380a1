from __future__ import annotations

import pytest

from routing.builder import build_owner_mapping, index_users_by_email
from routing.errors import MapBuildError
from routing.schemas import OwnerRecord, TelephonyUserRecord


def _owners(*pairs):
    return [OwnerRecord(id=owner_id, email=email) for owner_id, email in pairs]


def _users(*pairs):
    return [TelephonyUserRecord(id=user_id, email=email) for user_id, email in pairs]


def test_matches_owner_to_user_case_insensitively():
    result = build_owner_mapping(_owners(("o1", "a@x.com")), _users(("u1", "A@X.com")))

    assert dict(result.mapping) == {"o1": "u1"}
    assert result.matched_count == 1


def test_email_whitespace_is_ignored():
    result = build_owner_mapping(_owners(("o1", "  Sales@Example.com ")), _users(("u1", "sales@example.com")))

    assert dict(result.mapping) == {"o1": "u1"}


def test_owners_without_email_or_match_are_left_out():
    owners = _owners(("o1", "a@x.com"), ("o2", None), ("o3", "   "), ("o4", "nobody@x.com"))
    users = _users(("u1", "a@x.com"), ("u2", ""), ("u3", None))

    result = build_owner_mapping(owners, users)

    assert dict(result.mapping) == {"o1": "u1"}
    assert "o2" not in result.mapping
    assert None not in result.mapping.values()
    assert (result.owner_count, result.user_count, result.matched_count) == (4, 3, 1)


def test_last_user_with_duplicate_email_wins():
    users = _users(("u1", "shared@x.com"), ("u2", "SHARED@x.com"))

    assert index_users_by_email(users)["shared@x.com"].id == "u2"
    assert dict(build_owner_mapping(_owners(("o1", "shared@x.com")), users).mapping) == {"o1": "u2"}


def test_build_is_deterministic():
    owners = _owners(("o1", "a@x.com"), ("o2", "b@x.com"), ("o3", "c@x.com"))
    users = _users(("u3", "c@x.com"), ("u1", "a@x.com"))

    first = build_owner_mapping(owners, users)
    second = build_owner_mapping(owners, users)

    assert dict(first.mapping) == dict(second.mapping) == {"o1": "u1", "o3": "u3"}


def test_mapping_is_read_only():
    result = build_owner_mapping(_owners(("o1", "a@x.com")), _users(("u1", "a@x.com")))

    with pytest.raises(TypeError):
        result.mapping["o2"] = "u2"  # type: ignore[index]


def test_blank_owner_id_is_rejected():
    with pytest.raises(MapBuildError):
        build_owner_mapping(_owners(("  ", "a@x.com")), _users(("u1", "a@x.com")))


def test_integer_ids_are_normalized_to_strings():
    user = TelephonyUserRecord.model_validate({"id": 123456, "email": "a@x.com"})

    assert user.id == "123456"
