"""Find documents that belong to a rule but have no date yet.

Two matching modes, picked per rule:

- strict (no folder scope): the property key must exist and be empty.
  A document without the key is not considered part of the rule, otherwise
  every note in the vault would show up.
- relaxed (folder scope): any document inside the folder whose property is
  missing or empty.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..models import Document, Rule, UnscheduledItem
from ..vault.metadata import in_scope, is_empty, read_duration


def is_unscheduled(document: Document, rule: Rule) -> bool:
    metadata = document.metadata
    if not rule.is_scoped:
        return rule.property in metadata and is_empty(metadata[rule.property])

    if not in_scope(document.path, rule.folder_scope):
        return False
    return is_empty(metadata.get(rule.property))


def find_unscheduled(documents: Iterable[Document], rules: Iterable[Rule]) -> list[UnscheduledItem]:
    """Unscheduled documents for the given rules, active or not.

    Each document appears at most once, attributed to the first rule that
    matched it.
    """
    rules = list(rules)
    found: dict[str, UnscheduledItem] = {}

    for document in documents:
        if document.path in found:
            continue
        for rule in rules:
            if not is_unscheduled(document, rule):
                continue
            found[document.path] = UnscheduledItem(
                path=document.path,
                basename=document.basename,
                folder=document.folder,
                source_id=rule.id,
                property=rule.property,
                source_color=rule.color,
                duration=read_duration(document.metadata),
            )
            break

    return list(found.values())
