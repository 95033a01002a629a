"""Pytest configuration and fixtures."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from viewday.config import Settings
from viewday.dispatcher import Dispatcher
from viewday.models import Document, Rule
from viewday.sync.engine import SyncEngine
from viewday.vault.loader import FileStore
from viewday.vault.store import MemoryStore

ORIGIN = "https://viewday.app"


class RecordingChannel:
    """Channel that keeps every posted payload."""

    def __init__(self):
        self.posted: list[dict[str, Any]] = []

    def post(self, payload: dict[str, Any]) -> None:
        self.posted.append(payload)

    def of_kind(self, kind: str) -> list[dict[str, Any]]:
        return [p for p in self.posted if p["kind"] == kind]


class FakeWorkspace:
    """Workspace that records what the engine asked it to do."""

    def __init__(self, pick: str | None = None):
        self.pick = pick
        self.opened: list[str] = []
        self.urls: list[str] = []
        self.notices: list[str] = []
        self.pick_prompts: list[str] = []

    def open_document(self, path: str) -> None:
        self.opened.append(path)

    def open_url(self, url: str) -> None:
        self.urls.append(url)

    def pick_document(self, documents: Sequence[Document], prompt: str) -> Document | None:
        self.pick_prompts.append(prompt)
        for doc in documents:
            if doc.path == self.pick:
                return doc
        return None

    def notify(self, message: str) -> None:
        self.notices.append(message)


def write_note(vault: Path, rel: str, text: str) -> Path:
    path = vault / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def do_date_rule() -> Rule:
    return Rule(id="do", property="do_date", name="Do date", color="#3b82f6")


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore(
        {
            "A.md": {"do_date": "2024-03-01"},
            "B.md": {"start_date": "2024-03-01T09:00", "duration_minutes": 90},
            "Tasks/x.md": {"title": "no due"},
            "Tasks/y.md": {"due": "2024-04-02"},
            "Inbox/empty.md": {"do_date": ""},
            "linked.md": {"viewday_links": "evt-1"},
        }
    )


@pytest.fixture
def settings(do_date_rule: Rule) -> Settings:
    return Settings(
        widget_id="w-123",
        rules=[
            do_date_rule,
            Rule(id="start", property="start_date", color="#10b981"),
            Rule(id="tasks", property="due", folder_scope="Tasks", color="#f59e0b", active=False),
        ],
    )


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def workspace() -> FakeWorkspace:
    return FakeWorkspace()


@pytest.fixture
def engine(memory_store: MemoryStore, settings: Settings, channel: RecordingChannel) -> SyncEngine:
    return SyncEngine(memory_store, settings, channel)


@pytest.fixture
def dispatcher(engine: SyncEngine, workspace: FakeWorkspace) -> Dispatcher:
    return Dispatcher(engine, workspace)


@pytest.fixture
def vault_path(tmp_path: Path) -> Path:
    """A small vault on disk."""
    vault = tmp_path / "vault"
    (vault / ".obsidian").mkdir(parents=True)
    write_note(vault, "A.md", "---\ndo_date: 2024-03-01\ntags: [home]\n---\n# A\n\nBody text.\n")
    write_note(
        vault,
        "B.md",
        "---\nstart_date: 2024-03-01T09:00\nduration_minutes: 90\n---\nMeeting prep.\n",
    )
    write_note(vault, "Tasks/x.md", "---\ntitle: no due\n---\nTodo.\n")
    write_note(vault, "Tasks/y.md", "---\ndue: ''\n---\n")
    write_note(vault, "plain.md", "No frontmatter here.\n")
    write_note(vault, ".trash/old.md", "---\ndo_date: 2024-01-01\n---\n")
    return vault


@pytest.fixture
def file_store(vault_path: Path) -> FileStore:
    return FileStore(vault_path)
