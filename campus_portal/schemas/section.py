from datetime import time
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from campus_portal.models.enums import Day
from campus_portal.schemas.course import CourseOut
from campus_portal.schemas.room import RoomOut
from campus_portal.schemas.user import UserBrief
from campus_portal.utils.conflict import ConflictReason
from campus_portal.utils.times import parse_time_of_day, set_fixed_date


class SectionTimeIn(BaseModel):
    """
    Either day/start_time/end_time, or a time_slot_id whose values are
    copied onto the section.
    """
    time_slot_id: Optional[int] = None
    day: Optional[Day] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _coerce_time(cls, v):
        if v is None or v == "":
            return None
        return parse_time_of_day(v)

    @field_validator("end_time")
    @classmethod
    def _end_after_start(cls, v, info):
        # a picked time slot replaces these times, see _require_time
        if info.data.get("time_slot_id") is not None:
            return v
        start = info.data.get("start_time")
        if v is not None and start is not None and set_fixed_date(start) >= set_fixed_date(v):
            raise ValueError("Start time must be less than end time")
        return v

    @model_validator(mode="after")
    def _require_time(self):
        if self.time_slot_id is not None:
            return self
        missing = [
            label for label, value in (
                ("Day", self.day),
                ("Start time", self.start_time),
                ("End time", self.end_time),
            ) if value is None
        ]
        if missing:
            raise ValueError(f"{', '.join(missing)} required (or pick a time slot)")
        return self


class SectionIn(SectionTimeIn):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=32)
    course_id: int
    room_id: int
    faculty_id: int


class SectionCheckIn(SectionTimeIn):
    # set when editing, so the section is not compared with itself
    section_id: Optional[int] = None
    room_id: Optional[int] = None
    faculty_id: Optional[int] = None


class ConflictCheckOut(BaseModel):
    reason: ConflictReason
    has_conflict: bool
    message: Optional[str] = None
    section_id: Optional[int] = None


class SectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    day: Day
    start_time: time
    end_time: time
    time_slot_id: Optional[int] = None

    course: CourseOut
    room: RoomOut
    faculty: UserBrief


class SectionWithCountOut(SectionOut):
    enrolled_count: int = 0
