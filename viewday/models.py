"""Data models for rules, documents and calendar payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

# Keys that have held the folder scope over time, most specific first
FOLDER_SCOPE_ALIASES = ("folderScope", "folderPath", "folder", "path")

EVENT_NAMESPACE = "local"


def _clean_str(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def normalize_folder_scope(raw: dict[str, Any]) -> str | None:
    """Resolve the folder scope from the first alias that holds a value.

    Blank values and ``/`` mean the whole store and normalize to None.
    """
    for key in FOLDER_SCOPE_ALIASES:
        value = _clean_str(raw.get(key))
        if not value:
            continue
        value = value.strip("/")
        return value or None
    return None


@dataclass(frozen=True)
class Rule:
    """Maps a frontmatter date property to calendar events."""

    id: str
    property: str
    name: str = ""
    folder_scope: str | None = None
    color: str = ""
    active: bool = True

    @property
    def is_scoped(self) -> bool:
        return self.folder_scope is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Rule:
        """Build a rule from its wire form.

        Raises ValueError when ``id`` or ``property`` is missing.
        """
        rule_id = _clean_str(data.get("id"))
        if not rule_id:
            raise ValueError("rule id is required")

        prop = _clean_str(data.get("property"))
        if not prop:
            raise ValueError(f"rule {rule_id!r} has no property")

        active = data.get("active", True)
        if not isinstance(active, bool):
            active = str(active).strip().lower() not in ("false", "0", "no", "off", "")

        color = data.get("color")
        return cls(
            id=rule_id,
            property=prop,
            name=_clean_str(data.get("name")) or prop,
            folder_scope=normalize_folder_scope(data),
            color=color if isinstance(color, str) else "",
            active=active,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "property": self.property,
            "folderScope": self.folder_scope,
            "color": self.color,
            "active": self.active,
        }


@dataclass
class Document:
    """A note as seen through the document store."""

    path: str  # vault-relative POSIX path, e.g. "Tasks/x.md"
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def folder(self) -> str:
        parent = PurePosixPath(self.path).parent.as_posix()
        return "/" if parent in ("", ".") else parent


@dataclass(frozen=True)
class CalendarEvent:
    """An event derived from one (document, rule) pair."""

    id: str
    title: str
    start: str
    all_day: bool
    color: str
    path: str
    rule_id: str
    property: str
    end: str | None = None

    @staticmethod
    def make_id(path: str, rule_id: str) -> str:
        return f"{EVENT_NAMESPACE}::{path}::{rule_id}"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "start": self.start,
            "allDay": self.all_day,
            "color": self.color,
            "extendedProps": {
                "kind": EVENT_NAMESPACE,
                "path": self.path,
                "ruleId": self.rule_id,
                "property": self.property,
            },
        }
        if self.end is not None:
            payload["end"] = self.end
        return payload


@dataclass(frozen=True)
class UnscheduledItem:
    """A document in a rule's scope that has no usable date."""

    path: str
    basename: str
    folder: str
    source_id: str
    property: str
    source_color: str
    duration: float | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "path": self.path,
            "basename": self.basename,
            "folder": self.folder,
            "sourceId": self.source_id,
            "property": self.property,
            "sourceColor": self.source_color,
        }
        if self.duration is not None:
            payload["duration"] = self.duration
        return payload


@dataclass(frozen=True)
class LinkedNote:
    path: str
    basename: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "basename": self.basename}


LinkedNotesIndex = dict[str, list[LinkedNote]]
