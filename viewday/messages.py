"""Messages exchanged with the Viewday calendar surface.

Inbound payloads are untrusted dictionaries. ``parse_message`` turns them
into one typed record per ``kind`` and rejects known kinds whose fields do
not validate. Unknown kinds parse to None so newer calendar versions can
send messages this version does not understand.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from urllib.parse import urlparse

from .config import load_rules
from .errors import MessageError
from .models import CalendarEvent, LinkedNotesIndex, Rule, UnscheduledItem
from .vault.metadata import parse_minutes

# Inbound kinds
CONFIGURE_RULES = "CONFIGURE_RULES"
FETCH_UNSCHEDULED = "FETCH_UNSCHEDULED"
UPDATE_LOCAL_EVENT = "UPDATE_LOCAL_EVENT"
UPDATE_NOTE_DATE = "UPDATE_NOTE_DATE"
TRIGGER_FUZZY_SEARCH = "TRIGGER_FUZZY_SEARCH"
UNLINK_DOCUMENT = "UNLINK_DOCUMENT"
CREATE_LOCAL_NOTE = "CREATE_LOCAL_NOTE"
VIEWDAY_READY = "viewday-ready"
OPEN_EXTERNAL_URL = "OPEN_EXTERNAL_URL"
CREATE_MEETING_NOTE = "create-meeting-note"
OPEN_PERIODIC_NOTE = "OPEN_PERIODIC_NOTE"

# Outbound kinds
SYNC_LOCAL_EVENTS = "SYNC_LOCAL_EVENTS"
SYNC_LINKED_NOTES = "SYNC_LINKED_NOTES"
UNSCHEDULED_RESULTS = "UNSCHEDULED_RESULTS"

PERIODS = ("day", "week", "month", "quarter", "year")
_PERIOD_ALIASES = {
    "daily": "day",
    "weekly": "week",
    "monthly": "month",
    "quarterly": "quarter",
    "yearly": "year",
}


@dataclass(frozen=True)
class ConfigureRules:
    rules: list[Rule]


@dataclass(frozen=True)
class FetchUnscheduled:
    sources: list[Rule]


@dataclass(frozen=True)
class UpdateLocalEvent:
    path: str
    property: str
    new_value: str | None
    duration: int | float | None = None


@dataclass(frozen=True)
class TriggerFuzzySearch:
    event_id: str


@dataclass(frozen=True)
class UnlinkDocument:
    event_id: str
    path: str


@dataclass(frozen=True)
class CreateLocalNote:
    title: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    folder: str | None = None


@dataclass(frozen=True)
class ViewdayReady:
    pass


@dataclass(frozen=True)
class OpenExternalUrl:
    url: str


@dataclass(frozen=True)
class CreateMeetingNote:
    title: str
    event_id: str | None = None
    start: str | None = None
    end: str | None = None
    location: str | None = None
    description: str | None = None
    html_link: str | None = None
    attendees: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OpenPeriodicNote:
    period: str
    date: date


InboundMessage = (
    ConfigureRules
    | FetchUnscheduled
    | UpdateLocalEvent
    | TriggerFuzzySearch
    | UnlinkDocument
    | CreateLocalNote
    | ViewdayReady
    | OpenExternalUrl
    | CreateMeetingNote
    | OpenPeriodicNote
)


def _require_str(data: dict[str, Any], key: str, kind: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MessageError(kind, f"'{key}' must be a non-empty string")
    return value.strip()


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _require_rules(data: dict[str, Any], key: str, kind: str) -> list[Rule]:
    raw = data.get(key)
    if not isinstance(raw, list):
        raise MessageError(kind, f"'{key}' must be a list of rules")
    return load_rules(raw)


def _attendee_name(raw: Any) -> str | None:
    if isinstance(raw, str):
        return raw.strip() or None
    if isinstance(raw, dict):
        for key in ("displayName", "name", "email"):
            value = raw.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def _parse_configure_rules(data: dict[str, Any]) -> ConfigureRules:
    return ConfigureRules(rules=_require_rules(data, "rules", CONFIGURE_RULES))


def _parse_fetch_unscheduled(data: dict[str, Any]) -> FetchUnscheduled:
    return FetchUnscheduled(sources=_require_rules(data, "sources", FETCH_UNSCHEDULED))


def _parse_update_local_event(data: dict[str, Any]) -> UpdateLocalEvent:
    kind = str(data.get("kind"))
    if "newValue" not in data:
        raise MessageError(kind, "'newValue' is required (null clears the date)")
    new_value = data["newValue"]
    if new_value is not None and not isinstance(new_value, str):
        raise MessageError(kind, "'newValue' must be a string or null")
    return UpdateLocalEvent(
        path=_require_str(data, "path", kind),
        property=_require_str(data, "property", kind),
        new_value=new_value,
        duration=parse_minutes(data.get("duration")),
    )


def _parse_trigger_fuzzy_search(data: dict[str, Any]) -> TriggerFuzzySearch:
    return TriggerFuzzySearch(event_id=_require_str(data, "eventId", TRIGGER_FUZZY_SEARCH))


def _parse_unlink_document(data: dict[str, Any]) -> UnlinkDocument:
    return UnlinkDocument(
        event_id=_require_str(data, "eventId", UNLINK_DOCUMENT),
        path=_require_str(data, "path", UNLINK_DOCUMENT),
    )


def _parse_create_local_note(data: dict[str, Any]) -> CreateLocalNote:
    fm = data.get("frontmatter")
    if fm is not None and not isinstance(fm, dict):
        raise MessageError(CREATE_LOCAL_NOTE, "'frontmatter' must be a mapping")
    return CreateLocalNote(
        title=_require_str(data, "title", CREATE_LOCAL_NOTE),
        frontmatter=dict(fm or {}),
        folder=_optional_str(data, "folder"),
    )


def _parse_viewday_ready(data: dict[str, Any]) -> ViewdayReady:
    return ViewdayReady()


def _parse_open_external_url(data: dict[str, Any]) -> OpenExternalUrl:
    url = _require_str(data, "url", OPEN_EXTERNAL_URL)
    if urlparse(url).scheme not in ("http", "https"):
        raise MessageError(OPEN_EXTERNAL_URL, f"refusing to open non-web URL {url!r}")
    return OpenExternalUrl(url=url)


def _parse_create_meeting_note(data: dict[str, Any]) -> CreateMeetingNote:
    attendees = data.get("attendees")
    names = [n for n in (_attendee_name(a) for a in attendees) if n] if isinstance(attendees, list) else []
    return CreateMeetingNote(
        title=_require_str(data, "title", CREATE_MEETING_NOTE),
        event_id=_optional_str(data, "eventId"),
        start=_optional_str(data, "start"),
        end=_optional_str(data, "end"),
        location=_optional_str(data, "location"),
        description=_optional_str(data, "description"),
        html_link=_optional_str(data, "htmlLink"),
        attendees=names,
    )


def _parse_open_periodic_note(data: dict[str, Any]) -> OpenPeriodicNote:
    period = _require_str(data, "period", OPEN_PERIODIC_NOTE).lower()
    period = _PERIOD_ALIASES.get(period, period)
    if period not in PERIODS:
        raise MessageError(OPEN_PERIODIC_NOTE, f"unknown period {period!r}")
    raw_date = _require_str(data, "date", OPEN_PERIODIC_NOTE)
    try:
        day = date.fromisoformat(raw_date[:10])
    except ValueError as e:
        raise MessageError(OPEN_PERIODIC_NOTE, f"bad date {raw_date!r}") from e
    return OpenPeriodicNote(period=period, date=day)


_PARSERS: dict[str, Callable[[dict[str, Any]], InboundMessage]] = {
    CONFIGURE_RULES: _parse_configure_rules,
    FETCH_UNSCHEDULED: _parse_fetch_unscheduled,
    UPDATE_LOCAL_EVENT: _parse_update_local_event,
    UPDATE_NOTE_DATE: _parse_update_local_event,
    TRIGGER_FUZZY_SEARCH: _parse_trigger_fuzzy_search,
    UNLINK_DOCUMENT: _parse_unlink_document,
    CREATE_LOCAL_NOTE: _parse_create_local_note,
    VIEWDAY_READY: _parse_viewday_ready,
    OPEN_EXTERNAL_URL: _parse_open_external_url,
    CREATE_MEETING_NOTE: _parse_create_meeting_note,
    OPEN_PERIODIC_NOTE: _parse_open_periodic_note,
}


def parse_message(data: Any) -> InboundMessage | None:
    """Validate an inbound payload.

    Returns None for payloads without a recognized ``kind``.

    Raises:
        MessageError: if a known kind carries invalid fields.
    """
    if not isinstance(data, dict):
        return None
    kind = data.get("kind")
    if not isinstance(kind, str):
        return None
    parser = _PARSERS.get(kind)
    if parser is None:
        return None
    return parser(data)


def sync_local_events(events: Iterable[CalendarEvent], rules: Iterable[Rule]) -> dict[str, Any]:
    return {
        "kind": SYNC_LOCAL_EVENTS,
        "events": [e.to_dict() for e in events],
        "sources": [r.to_dict() for r in rules],
    }


def sync_linked_notes(index: LinkedNotesIndex) -> dict[str, Any]:
    return {
        "kind": SYNC_LINKED_NOTES,
        "linkedNotes": {
            event_id: [note.to_dict() for note in notes] for event_id, notes in index.items()
        },
    }


def unscheduled_results(items: Iterable[UnscheduledItem]) -> dict[str, Any]:
    return {"kind": UNSCHEDULED_RESULTS, "items": [i.to_dict() for i in items]}
