"""Tests for filtering vault filesystem events."""

from pathlib import Path

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from viewday.watcher import VaultChangeHandler


@pytest.fixture
def changes() -> list[str]:
    return []


@pytest.fixture
def handler(vault_path: Path, changes: list[str]) -> VaultChangeHandler:
    return VaultChangeHandler(vault_path, changes.append)


def test_note_edits_are_reported(handler: VaultChangeHandler, vault_path: Path, changes: list[str]):
    note = str(vault_path / "A.md")
    handler.on_modified(FileModifiedEvent(note))
    handler.on_created(FileCreatedEvent(str(vault_path / "Tasks" / "new.md")))
    handler.on_deleted(FileDeletedEvent(note))

    assert changes == [note, str(vault_path / "Tasks" / "new.md"), note]


def test_irrelevant_paths_are_ignored(handler: VaultChangeHandler, vault_path: Path, tmp_path: Path, changes: list[str]):
    handler.on_modified(FileModifiedEvent(str(vault_path / "image.png")))
    handler.on_modified(FileModifiedEvent(str(vault_path / ".obsidian" / "workspace.md")))
    handler.on_modified(FileModifiedEvent(str(vault_path / ".viewday" / "settings.json")))
    handler.on_modified(FileModifiedEvent(str(tmp_path / "elsewhere.md")))
    handler.on_modified(DirModifiedEvent(str(vault_path / "Tasks")))

    assert changes == []


def test_atomic_save_reports_the_note(handler: VaultChangeHandler, vault_path: Path, changes: list[str]):
    handler.on_moved(FileMovedEvent(str(vault_path / ".A.md.tmp"), str(vault_path / "A.md")))
    assert changes == [str(vault_path / "A.md")]


def test_move_out_of_view_reports_the_source(handler: VaultChangeHandler, vault_path: Path, changes: list[str]):
    handler.on_moved(FileMovedEvent(str(vault_path / "A.md"), str(vault_path / ".trash" / "A.md")))
    assert changes == [str(vault_path / "A.md")]
