"""Route messages from the calendar surface to the sync engine.

The origin check is the only security boundary: a message from any origin
outside ``ALLOWED_ORIGINS`` is dropped before its payload is looked at.
Messages are handled one at a time; anything received while a message is
being handled is queued and processed afterwards, in arrival order.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Any, Literal

from . import messages
from .config import Settings, SettingsStore
from .errors import ConfigError, MessageError
from .host import Workspace
from .notes import create_local_note, create_meeting_note, resolve_periodic_note
from .sync.engine import SyncEngine
from .sync.writeback import WriteBack, WriteResult

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = frozenset({"https://viewday.app", "http://localhost:3000"})

DispatcherState = Literal["idle", "handling"]


class Dispatcher:
    def __init__(
        self,
        engine: SyncEngine,
        workspace: Workspace,
        settings_store: SettingsStore | None = None,
    ):
        self.engine = engine
        self.workspace = workspace
        self.settings_store = settings_store
        self.writeback = WriteBack(engine.store)
        self.state: DispatcherState = "idle"
        self._queue: deque[dict[str, Any]] = deque()

        self._handlers: dict[type, Callable[[Any], None]] = {
            messages.ConfigureRules: self._configure_rules,
            messages.FetchUnscheduled: self._fetch_unscheduled,
            messages.UpdateLocalEvent: self._update_local_event,
            messages.TriggerFuzzySearch: self._trigger_fuzzy_search,
            messages.UnlinkDocument: self._unlink_document,
            messages.CreateLocalNote: self._create_local_note,
            messages.ViewdayReady: self._viewday_ready,
            messages.OpenExternalUrl: self._open_external_url,
            messages.CreateMeetingNote: self._create_meeting_note,
            messages.OpenPeriodicNote: self._open_periodic_note,
        }

    @property
    def settings(self) -> Settings:
        return self.engine.settings

    def receive(self, origin: str, data: Any) -> bool:
        """Accept a message from ``origin``. Returns False if the origin is not trusted."""
        if origin not in ALLOWED_ORIGINS:
            logger.debug("Dropping message from untrusted origin %r", origin)
            return False

        self._queue.append(data)
        if self.state == "idle":
            self._drain()
        return True

    def _drain(self) -> None:
        while self._queue:
            data = self._queue.popleft()
            self.state = "handling"
            try:
                self._handle(data)
            finally:
                self.state = "idle"

    def _handle(self, data: Any) -> None:
        try:
            msg = messages.parse_message(data)
        except MessageError as e:
            logger.warning("%s", e)
            return
        if msg is None:
            kind = data.get("kind") if isinstance(data, dict) else None
            logger.debug("Ignoring message of unknown kind %r", kind)
            return

        handler = self._handlers[type(msg)]
        try:
            handler(msg)
        except Exception as e:
            # One bad message must not take the dispatcher down
            logger.exception("Failed to handle %s", type(msg).__name__)
            self.workspace.notify(f"Calendar sync failed: {e}")

    def _report(self, result: WriteResult) -> None:
        if result.status == "not_found":
            self.workspace.notify(f"Note not found: {result.path}")
        elif result.status == "failed":
            self.workspace.notify(f"Could not update {result.path}: {result.error}")

    def _after_write(self, result: WriteResult) -> None:
        self._report(result)
        if result.success:
            self.engine.refresh()

    def _configure_rules(self, msg: messages.ConfigureRules) -> None:
        self.settings.rules = list(msg.rules)
        if self.settings_store is not None:
            try:
                self.settings_store.save(self.settings)
            except ConfigError as e:
                logger.error("%s", e)
                self.workspace.notify(f"Could not save calendar rules: {e}")
        logger.info("Configured %d rules", len(msg.rules))
        self.engine.refresh()

    def _fetch_unscheduled(self, msg: messages.FetchUnscheduled) -> None:
        self.engine.push_unscheduled(msg.sources)

    def _update_local_event(self, msg: messages.UpdateLocalEvent) -> None:
        result = self.writeback.reschedule(msg.path, msg.property, msg.new_value, msg.duration)
        self._after_write(result)

    def _trigger_fuzzy_search(self, msg: messages.TriggerFuzzySearch) -> None:
        documents = list(self.engine.store.documents())
        choice = self.workspace.pick_document(documents, "Link a note to this event")
        if choice is None:
            return
        self._after_write(self.writeback.link(choice.path, msg.event_id))

    def _unlink_document(self, msg: messages.UnlinkDocument) -> None:
        self._after_write(self.writeback.unlink(msg.path, msg.event_id))

    def _create_local_note(self, msg: messages.CreateLocalNote) -> None:
        document = create_local_note(self.engine.store, msg.title, msg.frontmatter, msg.folder)
        self.workspace.open_document(document.path)
        self.engine.refresh()

    def _viewday_ready(self, msg: messages.ViewdayReady) -> None:
        self.engine.refresh()

    def _open_external_url(self, msg: messages.OpenExternalUrl) -> None:
        self.workspace.open_url(msg.url)

    def _create_meeting_note(self, msg: messages.CreateMeetingNote) -> None:
        document = create_meeting_note(self.engine.store, self.settings, msg)
        self.workspace.open_document(document.path)
        self.engine.refresh()

    def _open_periodic_note(self, msg: messages.OpenPeriodicNote) -> None:
        path, _ = resolve_periodic_note(self.engine.store, self.settings, msg.period, msg.date)
        self.workspace.open_document(path)
