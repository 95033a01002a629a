"""Frontmatter value helpers shared by the scanner, detector and write-back."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

DURATION_FIELD = "duration_minutes"
DURATION_FALLBACK_FIELD = "duration"
LINKS_FIELD = "viewday_links"

# A date/time separator followed by a clock time: "2024-03-01T09:00" or "2024-03-01 9:00"
_TIME_SEPARATOR = re.compile(r"\d[Tt ]\d{1,2}:\d{2}")
_PLAIN_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_empty(value: Any) -> bool:
    """True for None, blank strings and empty lists."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def date_value_to_str(value: Any) -> str | None:
    """Normalize a frontmatter date value to an ISO string.

    YAML turns unquoted dates into ``date``/``datetime`` objects; strings
    pass through stripped. Returns None for empty values.

    Raises ValueError for mappings and lists, which cannot hold a date.
    """
    if is_empty(value):
        return None
    if isinstance(value, datetime):
        if value.second == 0 and value.microsecond == 0:
            return value.isoformat(timespec="minutes")
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple, bool)):
        raise ValueError(f"not a date value: {value!r}")
    return str(value).strip()


def is_all_day(value: str) -> bool:
    """A plain date with no time component is an all-day value."""
    return not _TIME_SEPARATOR.search(value)


def is_plain_date(value: str) -> bool:
    return bool(_PLAIN_DATE.match(value))


def parse_minutes(value: Any) -> int | float | None:
    """Parse a duration in minutes. Non-numeric values give None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def duration_field(metadata: dict[str, Any]) -> str:
    """Name of the duration field a document uses."""
    if metadata.get(DURATION_FIELD) is None and DURATION_FALLBACK_FIELD in metadata:
        return DURATION_FALLBACK_FIELD
    return DURATION_FIELD


def read_duration(metadata: dict[str, Any]) -> int | float | None:
    """Duration in minutes from the primary field, else the fallback."""
    raw = metadata.get(DURATION_FIELD)
    if raw is None:
        raw = metadata.get(DURATION_FALLBACK_FIELD)
    return parse_minutes(raw)


def parse_start(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def compute_end(start: str, minutes: int | float | None) -> str | None:
    """End of a timed event, or None if it cannot be computed.

    Naive datetime arithmetic keeps wall-clock fields: 09:00 + 90 min is
    10:30 on the same calendar day regardless of DST transitions.
    """
    if minutes is None or minutes <= 0:
        return None
    parsed = parse_start(start)
    if parsed is None:
        return None
    return (parsed + timedelta(minutes=minutes)).isoformat(timespec="minutes")


def in_scope(path: str, folder_scope: str | None) -> bool:
    """Whether a document path lies inside a folder scope (None = everywhere)."""
    if folder_scope is None:
        return True
    return path == folder_scope or path.startswith(folder_scope + "/")


def coerce_links(value: Any) -> list[str]:
    """Link field as a list of identifiers; a scalar becomes one element."""
    if is_empty(value):
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [str(v).strip() for v in value if not is_empty(v)]
