"""Turn dated frontmatter into calendar events."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models import CalendarEvent, Document, Rule
from ..vault.metadata import (
    compute_end,
    date_value_to_str,
    in_scope,
    is_all_day,
    read_duration,
)

logger = logging.getLogger(__name__)


def event_for(document: Document, rule: Rule) -> CalendarEvent | None:
    """Build the event for one (document, rule) pair, or None if unscheduled.

    Raises ValueError when the property holds something that cannot be a date.
    """
    if not in_scope(document.path, rule.folder_scope):
        return None

    start = date_value_to_str(document.metadata.get(rule.property))
    if start is None:
        return None

    all_day = is_all_day(start)
    end = None if all_day else compute_end(start, read_duration(document.metadata))

    return CalendarEvent(
        id=CalendarEvent.make_id(document.path, rule.id),
        title=document.basename,
        start=start,
        end=end,
        all_day=all_day,
        color=rule.color,
        path=document.path,
        rule_id=rule.id,
        property=rule.property,
    )


def scan_local_events(documents: Iterable[Document], rules: Iterable[Rule]) -> list[CalendarEvent]:
    """One event per document and matching active rule.

    A bad value in one document is logged and skipped; it never aborts the scan.
    """
    active = [r for r in rules if r.active]
    if not active:
        return []

    events: list[CalendarEvent] = []
    for document in documents:
        for rule in active:
            try:
                event = event_for(document, rule)
            except (ValueError, OverflowError) as e:
                logger.debug("Skipping %s for rule %s: %s", document.path, rule.id, e)
                continue
            if event is not None:
                events.append(event)
    return events
