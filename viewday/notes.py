"""Create notes on behalf of the calendar surface."""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import PurePosixPath
from typing import Any

from .config import Settings
from .messages import CreateMeetingNote
from .models import Document
from .vault.metadata import LINKS_FIELD, parse_start
from .vault.store import DocumentStore

logger = logging.getLogger(__name__)

# Characters that are not allowed in note file names
_FORBIDDEN = re.compile(r'[\\/:*?"<>|#^\[\]]')
_SPACES = re.compile(r"\s+")


def sanitize_title(title: str) -> str:
    cleaned = _SPACES.sub(" ", _FORBIDDEN.sub("", title)).strip().strip(".")
    return cleaned or "Untitled"


def unique_path(store: DocumentStore, folder: str | None, stem: str) -> str:
    """First free ``folder/stem.md``, adding `` 1``, `` 2``... when taken."""
    base = PurePosixPath(folder.strip("/")) if folder and folder.strip("/") else PurePosixPath()
    candidate = (base / f"{stem}.md").as_posix()
    n = 1
    while store.exists(candidate):
        candidate = (base / f"{stem} {n}.md").as_posix()
        n += 1
    return candidate


def create_local_note(
    store: DocumentStore,
    title: str,
    frontmatter: dict[str, Any] | None = None,
    folder: str | None = None,
) -> Document:
    path = unique_path(store, folder, sanitize_title(title))
    document = store.create(path, dict(frontmatter or {}), f"# {title.strip()}\n")
    logger.info("Created note %s", path)
    return document


def _meeting_body(msg: CreateMeetingNote) -> str:
    lines = [f"# {msg.title}", ""]
    if msg.start:
        when = f"{msg.start} - {msg.end}" if msg.end else msg.start
        lines.append(f"**When:** {when}")
    if msg.location:
        lines.append(f"**Where:** {msg.location}")
    if msg.html_link:
        lines.append(f"[Open in calendar]({msg.html_link})")
    lines.append("")

    lines.append("## Attendees")
    lines.extend(f"- {name}" for name in msg.attendees)
    lines.append("")

    if msg.description:
        lines.extend(["## Agenda", msg.description, ""])

    lines.extend(["## Notes", "", ""])
    return "\n".join(lines)


def create_meeting_note(store: DocumentStore, settings: Settings, msg: CreateMeetingNote) -> Document:
    """Create a meeting note linked to its calendar event."""
    start = parse_start(msg.start) if msg.start else None
    stem = sanitize_title(msg.title)
    if start is not None:
        stem = f"{start.date().isoformat()} {stem}"

    metadata: dict[str, Any] = {}
    if start is not None:
        metadata["date"] = start.date()
    if msg.start:
        metadata["start"] = msg.start
    if msg.end:
        metadata["end"] = msg.end
    if msg.location:
        metadata["location"] = msg.location
    if msg.attendees:
        metadata["attendees"] = list(msg.attendees)
    if msg.event_id:
        metadata[LINKS_FIELD] = [msg.event_id]

    path = unique_path(store, settings.meeting_notes_folder, stem)
    document = store.create(path, metadata, _meeting_body(msg))
    logger.info("Created meeting note %s", path)
    return document


def periodic_note_name(period: str, day: date) -> str:
    """File stem for a periodic note, following the usual vault conventions."""
    if period == "day":
        return day.isoformat()
    if period == "week":
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if period == "month":
        return day.strftime("%Y-%m")
    if period == "quarter":
        return f"{day.year}-Q{(day.month - 1) // 3 + 1}"
    if period == "year":
        return str(day.year)
    raise ValueError(f"unknown period {period!r}")


def resolve_periodic_note(store: DocumentStore, settings: Settings, period: str, day: date) -> tuple[str, bool]:
    """Path of the periodic note for ``day``, creating it if needed.

    Returns (path, created).
    """
    folder = PurePosixPath(settings.periodic_notes_folder) if settings.periodic_notes_folder else PurePosixPath()
    path = (folder / f"{periodic_note_name(period, day)}.md").as_posix()
    if store.exists(path):
        return path, False
    store.create(path, {})
    logger.info("Created %s note %s", period, path)
    return path, True
