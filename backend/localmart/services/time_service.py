from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
ONLINE_STATUS = "online"
_HHMM_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")

Clock = Callable[[], datetime]


def system_clock(timezone_name: str) -> Clock:
    """Clock returning the current wall time in ``timezone_name`` (UTC if the zone is unknown)."""
    try:
        zone = ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")

    def _now() -> datetime:
        return datetime.now(timezone.utc).astimezone(zone)

    return _now


def _parse_hhmm(value: Any) -> int | None:
    if not isinstance(value, str):
        return None
    match = _HHMM_PATTERN.match(value.strip())
    if match is None:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def weekday_index(now: datetime) -> int:
    # datetime.weekday() is Monday=0; schedules are keyed Sunday=0.
    return (now.weekday() + 1) % 7


def lookup_day_schedule(schedule: Mapping[Any, Any], day_index: int) -> Any | None:
    day_name = DAY_NAMES[day_index]
    for key in (str(day_index), day_index, day_name, day_name[:3]):
        if key in schedule:
            return schedule[key]
    return None


def open_now_status(
    schedule: Mapping[Any, Any] | None,
    realtime_status: str | None,
    now: datetime,
) -> tuple[bool, str | None]:
    """Evaluate a weekly schedule plus live status at ``now``.

    Returns ``(is_open, data_quality_issue)``. The issue is a short description when
    the schedule could not be read and the permissive fallback (open) was used, so the
    caller can log it. Never raises for malformed schedule data.
    """
    if realtime_status != ONLINE_STATUS:
        return False, None

    if not schedule:
        return True, None
    if not isinstance(schedule, Mapping):
        return True, f"schedule is {type(schedule).__name__}, expected mapping"

    day_index = weekday_index(now)
    day = lookup_day_schedule(schedule, day_index)
    if day is None:
        return False, None
    if not isinstance(day, Mapping):
        return True, f"{DAY_NAMES[day_index]} entry is {type(day).__name__}, expected mapping"
    if day.get("closed"):
        return False, None

    open_minutes = _parse_hhmm(day.get("open"))
    close_minutes = _parse_hhmm(day.get("close"))
    if open_minutes is None or close_minutes is None:
        return True, f"unparseable hours open={day.get('open')!r} close={day.get('close')!r}"

    current = now.hour * 60 + now.minute
    if close_minutes < open_minutes:
        # Overnight span, e.g. 22:00 - 06:00.
        return current >= open_minutes or current <= close_minutes, None
    return open_minutes <= current <= close_minutes, None


def is_open_now(schedule: Mapping[Any, Any] | None, realtime_status: str | None, now: datetime) -> bool:
    is_open, _issue = open_now_status(schedule, realtime_status, now)
    return is_open
