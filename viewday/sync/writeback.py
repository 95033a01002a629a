"""Write calendar changes back into note frontmatter.

Every operation is a single read-modify-write through
``DocumentStore.mutate_metadata`` and touches only the keys it names.
Failures are reported in the returned ``WriteResult``; nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

from ..errors import DocumentNotFoundError, StoreError
from ..vault.metadata import LINKS_FIELD, duration_field, is_empty, is_plain_date, parse_minutes
from ..vault.store import DocumentStore, Mutation

logger = logging.getLogger(__name__)

WriteStatus = Literal["ok", "not_found", "failed"]


@dataclass
class WriteResult:
    """Outcome of a write-back operation."""

    path: str
    status: WriteStatus = "ok"
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status == "ok"


def _stored_date(value: str | None) -> Any:
    """Value to persist for a date property.

    A clear (None) blanks the property instead of writing ``null``, so the
    note still shows up as unscheduled. Plain dates are stored as dates so
    YAML writes them unquoted.
    """
    if value is None:
        return ""
    value = value.strip()
    if is_plain_date(value):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return value
    return value


def _link_list(value: Any) -> list[Any]:
    if is_empty(value):
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


class WriteBack:
    """Reschedule, link and unlink operations against a document store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def _apply(self, path: str, action: str, mutate: Mutation) -> WriteResult:
        try:
            self.store.mutate_metadata(path, mutate)
        except DocumentNotFoundError as e:
            logger.warning("%s: %s", action, e)
            return WriteResult(path=path, status="not_found", error=str(e))
        except (StoreError, OSError) as e:
            logger.error("%s failed for %s: %s", action, path, e)
            return WriteResult(path=path, status="failed", error=str(e))
        logger.info("%s: %s", action, path)
        return WriteResult(path=path)

    def reschedule(
        self,
        path: str,
        property: str,
        new_value: str | None,
        duration: Any = None,
    ) -> WriteResult:
        """Set (or clear, with None) a date property, plus the duration if given."""
        stored = _stored_date(new_value)
        minutes = parse_minutes(duration)

        def mutate(metadata: dict[str, Any]) -> None:
            if minutes is not None:
                metadata[duration_field(metadata)] = minutes
            metadata[property] = stored

        return self._apply(path, "reschedule", mutate)

    def link(self, path: str, event_id: str) -> WriteResult:
        """Add an event id to the note's links. Adding it twice is a no-op."""

        def mutate(metadata: dict[str, Any]) -> None:
            links = _link_list(metadata.get(LINKS_FIELD))
            if event_id not in [str(v) for v in links]:
                links.append(event_id)
            metadata[LINKS_FIELD] = links

        return self._apply(path, "link", mutate)

    def unlink(self, path: str, event_id: str) -> WriteResult:
        """Remove an event id from the note's links. A missing field is left alone."""

        def mutate(metadata: dict[str, Any]) -> None:
            if LINKS_FIELD not in metadata:
                return
            current = metadata[LINKS_FIELD]
            if isinstance(current, (list, tuple)):
                metadata[LINKS_FIELD] = [v for v in current if str(v) != event_id]
            elif current is not None and str(current) == event_id:
                metadata[LINKS_FIELD] = []

        return self._apply(path, "unlink", mutate)
