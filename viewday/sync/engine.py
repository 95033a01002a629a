"""Run scans against the store and push the results to the calendar."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .. import messages
from ..config import Settings
from ..host import Channel
from ..models import CalendarEvent, Document, LinkedNotesIndex, Rule, UnscheduledItem
from ..vault.store import DocumentStore
from .detector import find_unscheduled
from .linked import build_linked_notes
from .scanner import scan_local_events

logger = logging.getLogger(__name__)


class SyncEngine:
    """Scanner, detector and indexer bound to a store, settings and channel."""

    def __init__(self, store: DocumentStore, settings: Settings, channel: Channel):
        self.store = store
        self.settings = settings
        self.channel = channel

    def _post(self, payload: dict[str, Any]) -> None:
        # Delivery is not acknowledged; a failed post is only logged
        try:
            self.channel.post(payload)
        except Exception as e:
            logger.warning("Failed to post %s: %s", payload.get("kind"), e)

    def push_local_events(self, documents: Iterable[Document] | None = None) -> list[CalendarEvent]:
        docs = self.store.documents() if documents is None else documents
        events = scan_local_events(docs, self.settings.rules)
        self._post(messages.sync_local_events(events, self.settings.rules))
        logger.debug("Pushed %d local events", len(events))
        return events

    def push_linked_notes(self, documents: Iterable[Document] | None = None) -> LinkedNotesIndex:
        docs = self.store.documents() if documents is None else documents
        index = build_linked_notes(docs)
        self._post(messages.sync_linked_notes(index))
        logger.debug("Pushed links for %d events", len(index))
        return index

    def refresh(self) -> None:
        """Rescan events and rebuild the link index from one store walk."""
        documents = list(self.store.documents())
        self.push_local_events(documents)
        self.push_linked_notes(documents)

    def push_unscheduled(self, rules: Iterable[Rule]) -> list[UnscheduledItem]:
        items = find_unscheduled(self.store.documents(), rules)
        self._post(messages.unscheduled_results(items))
        return items
