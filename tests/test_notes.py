"""Tests for note creation helpers."""

from datetime import date

import pytest

from viewday.config import Settings
from viewday.messages import CreateMeetingNote
from viewday.notes import (
    create_local_note,
    create_meeting_note,
    periodic_note_name,
    resolve_periodic_note,
    sanitize_title,
    unique_path,
)
from viewday.vault.store import MemoryStore


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Weekly sync", "Weekly sync"),
        ("Q2: plan / review?", "Q2 plan review"),
        ("#tag [[link]]", "tag link"),
        ("  ...  ", "Untitled"),
    ],
)
def test_sanitize_title(title, expected):
    assert sanitize_title(title) == expected


def test_unique_path_counts_up():
    store = MemoryStore({"Plan.md": {}, "Plan 1.md": {}, "Work/Plan.md": {}})
    assert unique_path(store, None, "Plan") == "Plan 2.md"
    assert unique_path(store, "/Work/", "Plan") == "Work/Plan 1.md"
    assert unique_path(store, "Home", "Plan") == "Home/Plan.md"


def test_create_local_note():
    store = MemoryStore()
    doc = create_local_note(store, "Call Ann", {"do_date": "2024-03-04"}, "Inbox")

    assert doc.path == "Inbox/Call Ann.md"
    assert store.read_metadata(doc.path) == {"do_date": "2024-03-04"}
    assert store.read_content(doc.path) == "# Call Ann\n"


def test_meeting_note():
    store = MemoryStore()
    msg = CreateMeetingNote(
        title="Design review",
        event_id="g-1",
        start="2024-03-01T09:00",
        end="2024-03-01T10:00",
        location="Room 4",
        description="Walk through the sync flow.",
        html_link="https://calendar.example/event/1",
        attendees=["Ann", "bo@example.com"],
    )
    doc = create_meeting_note(store, Settings(meeting_notes_folder="Work/Meetings"), msg)

    assert doc.path == "Work/Meetings/2024-03-01 Design review.md"
    assert store.read_metadata(doc.path) == {
        "date": date(2024, 3, 1),
        "start": "2024-03-01T09:00",
        "end": "2024-03-01T10:00",
        "location": "Room 4",
        "attendees": ["Ann", "bo@example.com"],
        "viewday_links": ["g-1"],
    }
    body = store.read_content(doc.path)
    assert body.startswith("# Design review\n")
    assert "**When:** 2024-03-01T09:00 - 2024-03-01T10:00" in body
    assert "**Where:** Room 4" in body
    assert "[Open in calendar](https://calendar.example/event/1)" in body
    assert "## Attendees\n- Ann\n- bo@example.com\n" in body
    assert "## Agenda\nWalk through the sync flow.\n" in body
    assert "## Notes" in body


def test_meeting_note_without_start():
    store = MemoryStore()
    doc = create_meeting_note(store, Settings(), CreateMeetingNote(title="Ad hoc"))

    assert doc.path == "Meetings/Ad hoc.md"
    assert store.read_metadata(doc.path) == {}
    assert "## Agenda" not in store.read_content(doc.path)


@pytest.mark.parametrize(
    "period,day,expected",
    [
        ("day", date(2024, 3, 1), "2024-03-01"),
        ("week", date(2024, 3, 1), "2024-W09"),
        ("week", date(2021, 1, 1), "2020-W53"),
        ("month", date(2024, 3, 1), "2024-03"),
        ("quarter", date(2024, 11, 30), "2024-Q4"),
        ("year", date(2024, 3, 1), "2024"),
    ],
)
def test_periodic_note_name(period, day, expected):
    assert periodic_note_name(period, day) == expected


def test_periodic_note_name_rejects_unknown_period():
    with pytest.raises(ValueError):
        periodic_note_name("decade", date(2024, 1, 1))


def test_resolve_periodic_note_creates_once():
    store = MemoryStore()
    settings = Settings(periodic_notes_folder="Daily")

    assert resolve_periodic_note(store, settings, "day", date(2024, 3, 1)) == ("Daily/2024-03-01.md", True)
    assert resolve_periodic_note(store, settings, "day", date(2024, 3, 1)) == ("Daily/2024-03-01.md", False)
