"""Calendar filter state: defaults, shallow merge and validation."""

import pytest

from pastoral.core.errors import CareValidationError
from pastoral.schemas.calendar import CalendarFilters, default_visible_types
from pastoral.services.filter_state import CalendarFilterState


def test_defaults_hide_only_care_updates():
    filters = CalendarFilterState().filters
    assert filters.selected_member_id is None
    assert filters.search_query == ""
    assert filters.show_completed_reminders is False
    assert filters.visible_types == default_visible_types()
    assert filters.visible_types["care-update"] is False


def test_empty_update_is_a_no_op():
    state = CalendarFilterState()
    state.update_filters({"search_query": "picnic", "selected_member_id": "m1"})
    before = state.filters
    assert state.update_filters({}) == before
    assert state.filters is before


def test_unspecified_keys_are_preserved():
    state = CalendarFilterState()
    state.update_filters({"selected_member_id": "m1"})
    state.update_filters({"search_query": "visit"})
    assert state.filters.selected_member_id == "m1"
    assert state.filters.search_query == "visit"


def test_visibility_map_replaces_whole_map():
    state = CalendarFilterState()
    replacement = {key: False for key in default_visible_types()}
    replacement["care-reminder"] = True
    state.update_filters({"visible_types": replacement})
    assert state.filters.visible_types == replacement


def test_partial_visibility_map_is_rejected():
    state = CalendarFilterState()
    with pytest.raises(CareValidationError):
        state.update_filters({"visible_types": {"care-reminder": False}})
    assert state.filters.visible_types == default_visible_types()


def test_unknown_keys_are_rejected():
    with pytest.raises(CareValidationError):
        CalendarFilterState().update_filters({"colour": "blue"})


def test_search_query_is_not_validated():
    state = CalendarFilterState()
    state.update_filters({"search_query": "   "})
    assert state.filters.search_query == "   "


def test_update_accepts_a_filters_partial():
    state = CalendarFilterState()
    state.update_filters({"search_query": "choir"})
    state.update_filters(CalendarFilters(show_completed_reminders=True))
    assert state.filters.show_completed_reminders is True
    assert state.filters.search_query == "choir"


def test_reset_restores_defaults():
    state = CalendarFilterState()
    state.update_filters({"selected_member_id": "m1"})
    assert state.reset() == CalendarFilters()
