"""nginx $time_local parsing and resolution of configured window bounds."""

import re
from datetime import date, datetime, time, timedelta, timezone

# DD/Mon/YYYY:HH:MM:SS +HHMM, e.g. 25/Jun/2014:06:26:42 +0200
TIME_LOCAL_PATTERN = re.compile(
    r"(\d{2})/([A-Za-z]{3})/(\d{4}):(\d{2}):(\d{2}):(\d{2}) ([+-])(\d{2})(\d{2})"
)

MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

RELATIVE_PATTERN = re.compile(r"(\d+)\s*([mhdw])(?:\s+ago)?")

RELATIVE_UNITS = {"m": "minutes", "h": "hours", "d": "days", "w": "weeks"}


class TimeParseError(Exception):
    """Raised when a value is not a valid timestamp."""


def parse_time_local(text: str) -> datetime:
    """Parse nginx $time_local text into an offset-aware datetime.

    The wall-clock value is kept as logged; the offset is attached, not
    applied, so the result compares correctly against any other aware time.
    """
    match = TIME_LOCAL_PATTERN.fullmatch(text.strip())
    if not match:
        raise TimeParseError(f"{text!r} is not a valid nginx $time_local value")

    day, mon, year, hour, minute, second, sign, off_h, off_m = match.groups()
    month = MONTHS.get(mon)
    if month is None:
        raise TimeParseError(f"Unknown month abbreviation {mon!r} in {text!r}")

    offset = (1 if sign == "+" else -1) * (int(off_h) * 60 + int(off_m))
    try:
        tz = timezone(timedelta(minutes=offset))
        return datetime(int(year), month, int(day), int(hour), int(minute), int(second), tzinfo=tz)
    except ValueError as exc:
        raise TimeParseError(f"{text!r} is out of range: {exc}") from exc


def _aware(value: datetime) -> datetime:
    # naive values are local wall-clock time
    return value if value.tzinfo is not None else value.astimezone()


def parse_bound(value, now: datetime | None = None) -> datetime | None:
    """Resolve a configured window bound into an aware datetime.

    Accepts None, datetime/date objects (as produced by YAML), nginx
    $time_local text, ISO 8601 text, ``now``, ``today``, ``yesterday`` and
    relative offsets such as ``24h``, ``30m ago`` or ``7d``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _aware(value)
    if isinstance(value, date):
        return _aware(datetime.combine(value, time()))
    if not isinstance(value, str):
        raise TimeParseError(f"Unsupported time value {value!r}")

    text = value.strip().lower()
    current = _aware(now) if now is not None else datetime.now().astimezone()

    if text == "now":
        return current
    if text in ("today", "yesterday"):
        midnight = current.replace(hour=0, minute=0, second=0, microsecond=0)
        return midnight if text == "today" else midnight - timedelta(days=1)

    relative = RELATIVE_PATTERN.fullmatch(text)
    if relative:
        amount, unit = relative.groups()
        return current - timedelta(**{RELATIVE_UNITS[unit]: int(amount)})

    try:
        return parse_time_local(value)
    except TimeParseError:
        pass

    try:
        return _aware(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError as exc:
        raise TimeParseError(f"Cannot interpret {value!r} as a point in time") from exc
