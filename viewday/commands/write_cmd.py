"""Manual write-back: the same operations the calendar triggers."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..sync.writeback import WriteBack, WriteResult
from ..vault.loader import FileStore


def _report(result: WriteResult, done: str) -> int:
    console = Console(stderr=True)
    if result.success:
        console.print(f"[green]{done}[/green] {result.path}", highlight=False)
        return 0
    if result.status == "not_found":
        console.print(f"[red]Note not found:[/red] {result.path}", highlight=False)
    else:
        console.print(f"[red]Could not update {result.path}:[/red] {result.error}", highlight=False)
    return 1


def run_reschedule(
    vault_path: Path,
    path: str,
    property: str,
    value: str | None,
    duration: float | None = None,
) -> int:
    result = WriteBack(FileStore(vault_path)).reschedule(path, property, value, duration)
    return _report(result, "Cleared" if value is None else "Rescheduled")


def run_link(vault_path: Path, path: str, event_id: str) -> int:
    return _report(WriteBack(FileStore(vault_path)).link(path, event_id), "Linked")


def run_unlink(vault_path: Path, path: str, event_id: str) -> int:
    return _report(WriteBack(FileStore(vault_path)).unlink(path, event_id), "Unlinked")
