from datetime import date, datetime, time
from typing import Union

# every time-of-day is compared on this date
REFERENCE_DATE = date(2000, 1, 1)

_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M:%S %p")


def set_fixed_date(value: Union[datetime, time]) -> datetime:
    """
    09:30 on any day -> 2000-01-01 09:30
    Only hour/minute/second/microsecond survive; date and tzinfo are dropped.
    """
    if isinstance(value, datetime):
        value = value.time()
    return datetime.combine(REFERENCE_DATE, value.replace(tzinfo=None))


def parse_time_of_day(value) -> time:
    """
    Accepts a time, a datetime, "HH:MM[:SS]", "hh:mm AM" or an ISO datetime
    string such as "2023-05-28T09:00:00.000Z" (what browser time pickers post).
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value.time().replace(tzinfo=None)
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str):
        raise ValueError(f"Invalid time: {value!r}")

    s = value.strip()
    if not s:
        raise ValueError("Time is required")

    if "T" in s or (" " in s and "-" in s):
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(s).time().replace(tzinfo=None)
        except ValueError:
            raise ValueError(f"Invalid time: {value!r}")

    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(s.upper(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time: {value!r}")


def format_time(value: Union[datetime, time]) -> str:
    # 09:00 -> "09:00 AM"
    return set_fixed_date(value).strftime("%I:%M %p")
