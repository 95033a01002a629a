"""Persisted settings and rule ingestion."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlencode

from .errors import ConfigError
from .models import Rule

logger = logging.getLogger(__name__)

SETTINGS_DIR = ".viewday"
SETTINGS_FILE = "settings.json"

EMBED_BASE_URL = "https://viewday.app/embed"
DEFAULT_MEETING_FOLDER = "Meetings"


def _coerce_str(value: Any, default: str = "") -> str:
    return value.strip() if isinstance(value, str) else default


def load_rules(raw_rules: Any) -> list[Rule]:
    """Ingest rules from their wire form.

    Invalid entries are skipped with a warning. Duplicate ids keep the
    first occurrence.
    """
    if not isinstance(raw_rules, list):
        return []

    rules: list[Rule] = []
    seen: set[str] = set()
    for raw in raw_rules:
        if not isinstance(raw, dict):
            logger.warning("Ignoring rule that is not a mapping: %r", raw)
            continue
        try:
            rule = Rule.from_dict(raw)
        except ValueError as e:
            logger.warning("Ignoring rule: %s", e)
            continue
        if rule.id in seen:
            logger.warning("Ignoring duplicate rule id %r", rule.id)
            continue
        seen.add(rule.id)
        rules.append(rule)
    return rules


@dataclass
class Settings:
    """Process-wide settings owned by the host and injected into components."""

    widget_id: str = ""
    rules: list[Rule] = field(default_factory=list)
    meeting_notes_folder: str = DEFAULT_MEETING_FOLDER
    periodic_notes_folder: str = ""

    @property
    def active_rules(self) -> list[Rule]:
        return [r for r in self.rules if r.active]

    def replace_rules(self, raw_rules: Any) -> None:
        self.rules = load_rules(raw_rules)

    def embed_url(self, dark: bool = False) -> str | None:
        """URL of the calendar widget, or None when no widget is configured."""
        if not self.widget_id:
            return None
        query = urlencode({"platform": "obsidian", "theme": "dark" if dark else "light"})
        return f"{EMBED_BASE_URL}/{quote(self.widget_id, safe='')}?{query}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "widgetId": self.widget_id,
            "rules": [r.to_dict() for r in self.rules],
            "meetingNotesFolder": self.meeting_notes_folder,
            "periodicNotesFolder": self.periodic_notes_folder,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        return cls(
            widget_id=_coerce_str(data.get("widgetId")),
            rules=load_rules(data.get("rules")),
            meeting_notes_folder=_coerce_str(data.get("meetingNotesFolder"), DEFAULT_MEETING_FOLDER).strip("/"),
            periodic_notes_folder=_coerce_str(data.get("periodicNotesFolder")).strip("/"),
        )


class SettingsStore:
    """Load/save lifecycle for the settings file inside a vault."""

    def __init__(self, vault_path: Path):
        self.path = vault_path / SETTINGS_DIR / SETTINGS_FILE

    def load(self) -> Settings:
        """Read settings, falling back to defaults when the file is missing."""
        if not self.path.exists():
            return Settings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self.path} must contain a JSON object")
        return Settings.from_dict(data)

    def save(self, settings: Settings) -> None:
        """Write settings atomically."""
        text = json.dumps(settings.to_dict(), indent=2, ensure_ascii=False) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-", suffix=".tmp")
        except OSError as e:
            raise ConfigError(f"Cannot write {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except OSError as e:
            Path(tmp).unlink(missing_ok=True)
            raise ConfigError(f"Cannot write {self.path}: {e}") from e
