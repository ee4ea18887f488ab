"""Turn window specifications into absolute ``since``/``until`` boundaries.

Two shapes are supported:

* :class:`RecurringWindow` repeats every week and is anchored to day names.
  It resolves to the most recent occurrence whose end is not in the future.
* :class:`DateWindow` is anchored to explicit calendar dates and resolves
  verbatim.

Boundaries are built on calendar dates and carry the requested wall-clock
time in the zone of ``now``. Across a DST change a weekly window therefore
spans seven calendar days, which is 167 or 169 real hours.

Example:
    >>> spec = build_window_spec("Monday", "10:00", "Friday", "17:00")
    >>> window = resolve_window(spec, datetime(2026, 2, 25, 12, 0))
    >>> window.since, window.until
    (datetime.datetime(2026, 2, 16, 10, 0), datetime.datetime(2026, 2, 20, 17, 0))
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Mapping, Optional

from .exceptions import ConfigurationError, InvalidInputError
from .models import DateWindow, RecurringWindow, ResolvedWindow, WindowSpec

DAY_NUMBERS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$", re.ASCII)
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)


def parse_day_name(name: str) -> int:
    """Return the ``datetime.weekday()`` number for a case-insensitive day name."""
    number = DAY_NUMBERS.get(name.strip().lower())
    if number is None:
        raise InvalidInputError("day name", name, "expected Monday through Sunday")
    return number


def parse_time_of_day(value: str) -> time:
    """Parse a 24-hour ``HH:MM`` string."""
    match = _TIME_RE.match(value.strip())
    if not match:
        raise InvalidInputError("time of day", value, "expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidInputError("time of day", value, "hour or minute out of range")
    return time(hour, minute)


def parse_date(value: str) -> date:
    if not is_date(value):
        raise InvalidInputError("date", value, "expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidInputError("date", value, str(e)) from e


def is_date(value: str) -> bool:
    return bool(_DATE_RE.match(value.strip()))


def build_window_spec(start: str, start_time: str, end: str, end_time: str) -> WindowSpec:
    """Build a window from boundaries that are each a day name or a ``YYYY-MM-DD`` date."""
    start_is_date, end_is_date = is_date(start), is_date(end)
    if start_is_date != end_is_date:
        raise ConfigurationError(
            "Time window must use either both day names or both specific dates, not mixed",
            details={"start": start, "end": end},
        )
    if start_is_date:
        return DateWindow(
            start_date=parse_date(start),
            start_time=parse_time_of_day(start_time),
            end_date=parse_date(end),
            end_time=parse_time_of_day(end_time),
        )
    return RecurringWindow(
        start_day=parse_day_name(start),
        start_time=parse_time_of_day(start_time),
        end_day=parse_day_name(end),
        end_time=parse_time_of_day(end_time),
    )


def window_spec_from_mapping(entry: Mapping[str, str]) -> WindowSpec:
    """Build a window from a config entry.

    Accepted shapes are ``{startDay, startTime, endDay, endTime}``,
    ``{startDate, startTime, endDate, endTime}`` and the single-day
    ``{day, startTime, endTime}``.
    """
    day_keys = {"day", "startDay", "endDay"} & entry.keys()
    date_keys = {"startDate", "endDate"} & entry.keys()
    if day_keys and date_keys:
        raise ConfigurationError(
            "Time window must use either both day names or both specific dates, not mixed",
            details={"keys": ", ".join(sorted(day_keys | date_keys))},
        )
    if "day" in day_keys and len(day_keys) > 1:
        raise ConfigurationError(
            "Time window must use either day or startDay/endDay, not both",
            details={"keys": ", ".join(sorted(day_keys))},
        )

    if "day" in entry:
        start = end = entry["day"]
    elif date_keys:
        start, end = _require(entry, "startDate"), _require(entry, "endDate")
    else:
        start, end = _require(entry, "startDay"), _require(entry, "endDay")

    return build_window_spec(
        start, _require(entry, "startTime"), end, _require(entry, "endTime")
    )


def _require(entry: Mapping[str, str], key: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Time window is missing {key}", details={"key": key})
    return value


def _at(day: date, at: time, tz: Optional[tzinfo]) -> datetime:
    return datetime.combine(day, at, tzinfo=tz)


def resolve_window(spec: WindowSpec, now: datetime) -> ResolvedWindow:
    """Resolve ``spec`` to absolute boundaries relative to ``now``.

    For a recurring window this is the latest occurrence whose end is not
    after ``now``. Same-day windows whose end time precedes their start time
    span a full week.
    """
    tz = now.tzinfo

    if isinstance(spec, DateWindow):
        # No ordering check; an inverted window is the caller's concern.
        return ResolvedWindow(
            since=_at(spec.start_date, spec.start_time, tz),
            until=_at(spec.end_date, spec.end_time, tz),
        )

    if not isinstance(spec, RecurringWindow):
        raise ConfigurationError(
            "Unsupported window specification", details={"type": type(spec).__name__}
        )

    days_back = (now.weekday() - spec.end_day) % 7
    end_day = now.date() - timedelta(days=days_back)
    if _at(end_day, spec.end_time, tz) > now:
        end_day -= timedelta(days=7)

    day_diff = (spec.end_day - spec.start_day) % 7
    if day_diff == 0 and spec.end_time < spec.start_time:
        day_diff = 7

    start_day = end_day - timedelta(days=day_diff)
    return ResolvedWindow(
        since=_at(start_day, spec.start_time, tz),
        until=_at(end_day, spec.end_time, tz),
    )
