from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, List, Optional

from pastoral.core.config import settings
from pastoral.core.timeutils import local_day
from pastoral.models import Member
from pastoral.schemas.calendar import MemberMilestone
from pastoral.schemas.member import storage_name
from pastoral.services.member_names import short_display_name

logger = logging.getLogger(__name__)

UNKNOWN_MEMBER = "Unknown Member"


def _same_day_in_year(original: date, year: int) -> date:
    try:
        return original.replace(year=year)
    except ValueError:
        # 29 February outside a leap year rolls over to 1 March
        return date(year, 2, 28) + timedelta(days=1)


def _milestone_title(member_name: str, label: str) -> str:
    return f"{short_display_name(member_name)} {label}".strip()


def member_milestones(
    members: Iterable[Member],
    year: int,
    tz: Optional[tzinfo] = None,
) -> List[MemberMilestone]:
    """Birthday and anniversary events for ``year``, at local midnight."""
    tz = tz or settings.local_tz
    milestones: List[MemberMilestone] = []

    for member in members:
        member_name = storage_name(member) or UNKNOWN_MEMBER
        for kind, stored, label in (
            ("birthday", member.birthday, "Birthday"),
            ("anniversary", member.anniversary_date, "Anniversary"),
        ):
            if stored is None:
                continue
            day = _same_day_in_year(local_day(stored, tz), year)
            milestones.append(
                MemberMilestone(
                    id=f"{kind}-{member.id}-{year}",
                    title=_milestone_title(member_name, label),
                    date=datetime.combine(day, time.min, tzinfo=tz),
                    member_id=member.id,
                    member_name=member_name,
                    milestone_type=kind,
                )
            )

    logger.debug(f"Derived {len(milestones)} member milestones for {year}")
    return milestones
