# campus_portal/utils/conflict.py
from dataclasses import dataclass
from datetime import time
from enum import Enum
from typing import Iterable, Optional

from campus_portal.models.enums import Day
from campus_portal.utils.times import set_fixed_date


class ConflictReason(str, Enum):
    NO_CONFLICT = "NO_CONFLICT"
    ROOM_CONFLICT = "ROOM_CONFLICT"
    FACULTY_CONFLICT = "FACULTY_CONFLICT"


CONFLICT_MESSAGES = {
    ConflictReason.FACULTY_CONFLICT: "Faculty is not available at this time",
    ConflictReason.ROOM_CONFLICT: "Room is not available at this time",
}


@dataclass(frozen=True)
class SectionSlot:
    """
    The part of a section the checker looks at.
    Section ORM rows have the same attributes and can be passed directly.
    """
    day: Day
    start_time: time
    end_time: time
    room_id: Optional[int] = None
    faculty_id: Optional[int] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class ConflictResult:
    reason: ConflictReason = ConflictReason.NO_CONFLICT
    # the existing section that clashes
    section_id: Optional[int] = None

    @property
    def has_conflict(self) -> bool:
        return self.reason != ConflictReason.NO_CONFLICT

    @property
    def message(self) -> Optional[str]:
        return CONFLICT_MESSAGES.get(self.reason)


def intervals_overlap(start, end, other_start, other_end) -> bool:
    """
    Compared by time-of-day only. Boundaries are inclusive, so 09:00-10:00
    and 10:00-11:00 overlap.
    """
    s, e = set_fixed_date(start), set_fixed_date(end)
    os_, oe = set_fixed_date(other_start), set_fixed_date(other_end)

    # an endpoint of the candidate lands inside the other interval
    if os_ <= s <= oe or os_ <= e <= oe:
        return True
    # the other interval sits entirely inside the candidate
    return s <= os_ and oe <= e


def _first_clash(candidate, existing, key: str):
    value = getattr(candidate, key)
    if value is None:
        return None

    for sec in existing:
        if getattr(sec, key) != value:
            continue
        if candidate.id is not None and sec.id == candidate.id:
            continue
        if sec.day != candidate.day:
            continue
        if intervals_overlap(candidate.start_time, candidate.end_time, sec.start_time, sec.end_time):
            return sec
    return None


def find_conflict(candidate, existing: Iterable) -> ConflictResult:
    """
    candidate: SectionSlot or Section (id is None for a new section)
    existing: sections already scheduled

    Faculty is checked before room; the first clash found is reported.
    Start < end is validated upstream and not re-checked here.
    """
    existing = list(existing)

    clash = _first_clash(candidate, existing, "faculty_id")
    if clash is not None:
        return ConflictResult(ConflictReason.FACULTY_CONFLICT, clash.id)

    clash = _first_clash(candidate, existing, "room_id")
    if clash is not None:
        return ConflictResult(ConflictReason.ROOM_CONFLICT, clash.id)

    return ConflictResult()


def find_schedule_clash(candidate, enrolled: Iterable):
    """
    Student timetable check: first enrolled section that meets on the same
    day as the candidate with an overlapping time, or None.
    """
    for sec in enrolled:
        if sec.id == candidate.id or sec.day != candidate.day:
            continue
        if intervals_overlap(candidate.start_time, candidate.end_time, sec.start_time, sec.end_time):
            return sec
    return None
