from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from pastoral.core.errors import CareValidationError
from pastoral.schemas.calendar import CalendarFilters

logger = logging.getLogger(__name__)


class CalendarFilterState:
    """
    View-local calendar filters.

    ``update_filters`` is a shallow merge: keys left out keep their value and
    a supplied ``visible_types`` map replaces the whole map.
    """

    def __init__(self, filters: Optional[CalendarFilters] = None):
        self._filters = filters or CalendarFilters()

    @property
    def filters(self) -> CalendarFilters:
        return self._filters

    def update_filters(self, partial: Mapping[str, Any] | CalendarFilters) -> CalendarFilters:
        if isinstance(partial, CalendarFilters):
            updates = partial.model_dump(exclude_unset=True)
        else:
            updates = dict(partial)
        if not updates:
            return self._filters

        unknown = set(updates) - set(CalendarFilters.model_fields)
        if unknown:
            raise CareValidationError(f"Unknown filter keys: {', '.join(sorted(unknown))}")

        merged = {**self._filters.model_dump(), **updates}
        try:
            self._filters = CalendarFilters.model_validate(merged)
        except ValidationError as exc:
            raise CareValidationError(f"Invalid calendar filters: {exc}") from exc
        logger.debug(f"Calendar filters updated: {sorted(updates)}")
        return self._filters

    def reset(self) -> CalendarFilters:
        self._filters = CalendarFilters()
        return self._filters
