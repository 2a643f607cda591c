from datetime import time

from pydantic import BaseModel, ConfigDict, Field, field_validator

from campus_portal.models.enums import Day
from campus_portal.utils.times import parse_time_of_day, set_fixed_date


class TimeSlotIn(BaseModel):
    label: str = Field(..., min_length=1, max_length=50)
    day: Day
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _coerce_time(cls, v):
        return parse_time_of_day(v)

    @field_validator("end_time")
    @classmethod
    def _end_after_start(cls, v, info):
        start = info.data.get("start_time")
        if start is not None and set_fixed_date(start) >= set_fixed_date(v):
            raise ValueError("Start time must be less than end time")
        return v


class TimeSlotOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    label: str
    day: Day
    start_time: time
    end_time: time
