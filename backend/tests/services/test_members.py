"""Member names, field translation and member operations."""

from datetime import date, datetime, timezone

import pytest

from pastoral.core.errors import CareValidationError, NotFoundError
from pastoral.schemas import MemberCreate, MemberUpdate
from pastoral.schemas.member import member_to_storage
from pastoral.services import members
from pastoral.services.member_names import (
    calculate_age,
    format_member_name,
    member_initials,
    parse_member_name,
    search_members,
    sort_members_by_name,
)


def test_parse_member_name_splits_last_first():
    parsed = parse_member_name("SMITH, JOHN")
    assert parsed.last_name == "Smith"
    assert parsed.first_name == "John"


def test_format_and_initials():
    assert format_member_name("John", "Smith") == "SMITH, JOHN"
    assert member_initials("SMITH, JOHN") == "JS"


def test_calculate_age_counts_completed_years():
    birthday = datetime(1980, 6, 20, tzinfo=timezone.utc)
    assert calculate_age(birthday, date(2024, 6, 19)) == 43
    assert calculate_age(birthday, date(2024, 6, 20)) == 44


def test_member_to_storage_translates_fields():
    stored = member_to_storage(
        {"name": "SMITH, JOHN", "contact": "555-0100", "suburb": "Hillview", "member_since": "1999"}
    )
    assert stored["first_name"] == "John"
    assert stored["last_name"] == "Smith"
    assert stored["display_name"] == "SMITH, JOHN"
    assert stored["phone"] == "555-0100"
    assert stored["city"] == "Hillview"
    assert stored["notes"] == "1999"


def test_create_member_assigns_audit_fields(store, notices, identity):
    member = members.create_member(
        store,
        notices,
        identity,
        MemberCreate(name="SMITH, JOHN", contact="555-0100", created_by="someone-else"),
    )
    assert member.name == "SMITH, JOHN"
    assert member.contact == "555-0100"
    assert member.created_by == "pastor-1"
    assert member.updated_by == "pastor-1"
    assert notices.notices[-1].message == "Member added successfully"


def test_blank_member_name_is_rejected(store, notices, identity):
    with pytest.raises(CareValidationError):
        members.create_member(store, notices, identity, MemberCreate(name="  "))


def test_update_member_is_partial(store, notices, identity):
    member = members.create_member(
        store, notices, identity, MemberCreate(name="SMITH, JOHN", suburb="Hillview")
    )
    updated = members.update_member(
        store, notices, identity, member.id, MemberUpdate(contact="555-0199")
    )
    assert updated.contact == "555-0199"
    assert updated.suburb == "Hillview"
    assert updated.name == "SMITH, JOHN"


def test_update_missing_member_raises_not_found(store, notices, identity):
    with pytest.raises(NotFoundError):
        members.update_member(store, notices, identity, "missing", MemberUpdate(contact="1"))


def test_list_members_sorted_and_searchable(store, notices, identity):
    for name, suburb in (("WILSON, AMY", "Eastwood"), ("BROWN, ZOE", "Hillview"), ("BROWN, ADAM", "")):
        members.create_member(store, notices, identity, MemberCreate(name=name, suburb=suburb))
    assert [m.name for m in members.list_members(store)] == [
        "BROWN, ADAM",
        "BROWN, ZOE",
        "WILSON, AMY",
    ]
    assert [m.name for m in members.list_members(store, "hillview")] == ["BROWN, ZOE"]


def test_sort_and_search_helpers_work_on_read_models(store, notices, identity):
    created = [
        members.create_member(store, notices, identity, MemberCreate(name=name))
        for name in ("ZED, ANN", "ABLE, BOB")
    ]
    assert [m.name for m in sort_members_by_name(created)] == ["ABLE, BOB", "ZED, ANN"]
    assert [m.name for m in search_members(created, "ann")] == ["ZED, ANN"]


def test_delete_member(store, notices, identity):
    member = members.create_member(store, notices, identity, MemberCreate(name="SMITH, JOHN"))
    assert members.delete_member(store, notices, identity, member.id) is True
    with pytest.raises(NotFoundError):
        members.get_member(store, member.id)
