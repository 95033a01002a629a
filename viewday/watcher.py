"""Watch a vault for note edits, renames and deletes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class VaultChangeHandler(FileSystemEventHandler):
    """Reports changes to Markdown notes through ``on_change``.

    Hidden files and directories are ignored, which also skips the
    temporary files written during atomic saves and the settings folder.
    """

    RELEVANT_EXTENSIONS = {".md"}

    def __init__(self, vault_path: Path, on_change: Callable[[str], None]):
        super().__init__()
        self.vault_path = vault_path.resolve()
        self.on_change = on_change

    def _is_relevant(self, path: str) -> bool:
        p = Path(path)
        try:
            rel = p.resolve().relative_to(self.vault_path)
        except ValueError:
            return False

        if any(part.startswith(".") for part in rel.parts):
            return False

        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def _changed(self, path: str) -> None:
        logger.debug("Vault change: %s", path)
        self.on_change(path)

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory and self._is_relevant(event.src_path):
            self._changed(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory and self._is_relevant(event.src_path):
            self._changed(event.src_path)

    def on_deleted(self, event: FileDeletedEvent) -> None:
        if not event.is_directory and self._is_relevant(event.src_path):
            self._changed(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:
        if event.is_directory:
            return
        # Atomic saves move a hidden temp file onto the note
        if self._is_relevant(event.dest_path):
            self._changed(event.dest_path)
        elif self._is_relevant(event.src_path):
            self._changed(event.src_path)


def watch_vault(vault_path: Path, on_change: Callable[[str], None], recursive: bool = True) -> Observer:
    """Start watching ``vault_path``. The caller must stop and join the observer."""
    handler = VaultChangeHandler(vault_path, on_change)
    observer = Observer()
    observer.schedule(handler, str(vault_path), recursive=recursive)
    observer.start()
    return observer
