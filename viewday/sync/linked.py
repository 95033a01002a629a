"""Reverse index from calendar event ids to the notes that link them."""

from __future__ import annotations

from collections.abc import Iterable

from ..models import Document, LinkedNote, LinkedNotesIndex
from ..vault.metadata import LINKS_FIELD, coerce_links


def build_linked_notes(documents: Iterable[Document]) -> LinkedNotesIndex:
    index: LinkedNotesIndex = {}
    for document in documents:
        for event_id in dict.fromkeys(coerce_links(document.metadata.get(LINKS_FIELD))):
            index.setdefault(event_id, []).append(
                LinkedNote(path=document.path, basename=document.basename)
            )
    return index

