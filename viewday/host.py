"""Capabilities the host provides to the sync engine.

``Channel`` posts payloads to the calendar surface. ``Workspace`` opens
notes and URLs, asks the user to pick a note, and shows notices. The
console implementations back the ``viewday serve`` command.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any, Protocol, runtime_checkable

import click
from rich.console import Console
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from .models import Document

logger = logging.getLogger(__name__)

PICKER_LIMIT = 10


@runtime_checkable
class Channel(Protocol):
    """Fire-and-forget outbound channel to the calendar surface."""

    def post(self, payload: dict[str, Any]) -> None:
        ...


@runtime_checkable
class Workspace(Protocol):
    def open_document(self, path: str) -> None:
        ...

    def open_url(self, url: str) -> None:
        ...

    def pick_document(self, documents: Sequence[Document], prompt: str) -> Document | None:
        """Let the user choose a note; None when cancelled."""
        ...

    def notify(self, message: str) -> None:
        ...


class JsonLinesChannel:
    """Writes one JSON object per line to a text stream."""

    def __init__(self, stream: IO[str]):
        self.stream = stream

    def post(self, payload: dict[str, Any]) -> None:
        self.stream.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")
        self.stream.flush()


def fuzzy_match(query: str, text: str) -> bool:
    """True when the characters of ``query`` appear in order in ``text``."""
    remaining = iter(text.lower())
    return all(ch in remaining for ch in query.lower() if not ch.isspace())


class ConsoleWorkspace:
    """Workspace backed by the terminal and the system's default apps."""

    def __init__(self, vault_path: Path, console: Console | None = None, interactive: bool = True):
        self.vault_path = vault_path
        self.console = console or Console(stderr=True)
        self.interactive = interactive

    def open_document(self, path: str) -> None:
        click.launch(str(self.vault_path / path))

    def open_url(self, url: str) -> None:
        click.launch(url)

    def notify(self, message: str) -> None:
        self.console.print(f"[bold cyan]viewday[/bold cyan] {message}", highlight=False)

    def pick_document(self, documents: Sequence[Document], prompt: str) -> Document | None:
        if not self.interactive:
            logger.warning("No interactive terminal; cannot pick a note for %s", prompt)
            return None

        query = Prompt.ask(f"{prompt} [dim](blank to cancel)[/dim]", console=self.console, default="")
        if not query.strip():
            return None

        matches = [d for d in documents if fuzzy_match(query, d.path)][:PICKER_LIMIT]
        if not matches:
            self.notify(f"No notes match '{query}'")
            return None

        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Note")
        table.add_column("Folder", style="dim")
        for i, doc in enumerate(matches, start=1):
            table.add_row(str(i), doc.basename, doc.folder)
        self.console.print(table)

        choice = IntPrompt.ask(
            "Link which note (0 to cancel)",
            console=self.console,
            choices=[str(i) for i in range(len(matches) + 1)],
            show_choices=False,
            default=0,
        )
        return matches[choice - 1] if choice else None
