"""DocumentStore protocol - the contract between the engine and a vault.

The engine never owns documents. It enumerates them, reads their
frontmatter, and asks the store to apply metadata mutations as a single
read-modify-write transaction. ``FileStore`` (see ``loader``) backs the
protocol with Markdown files on disk; ``MemoryStore`` keeps everything in
memory.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from typing import Any, Protocol, runtime_checkable

from ..errors import DocumentNotFoundError
from ..models import Document

Mutation = Callable[[dict[str, Any]], None]


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for reading and mutating document metadata."""

    def documents(self) -> Iterator[Document]:
        """Yield every document, in a stable order."""
        ...

    def exists(self, path: str) -> bool:
        ...

    def read_metadata(self, path: str) -> dict[str, Any]:
        """Return a copy of a document's frontmatter.

        Raises:
            DocumentNotFoundError: if the path does not exist.
        """
        ...

    def mutate_metadata(self, path: str, mutate: Mutation) -> dict[str, Any]:
        """Apply ``mutate`` to a copy of the frontmatter and commit it.

        Either the whole mutation is persisted or nothing is. Returns the
        committed metadata.

        Raises:
            DocumentNotFoundError: if the path does not exist.
            WriteConflictError: if the document changed during the write.
        """
        ...

    def create(self, path: str, metadata: dict[str, Any], content: str = "") -> Document:
        """Create a new document.

        Raises:
            FileExistsError: if the path is taken.
        """
        ...


class MemoryStore:
    """In-memory document store."""

    def __init__(self, notes: dict[str, dict[str, Any]] | None = None):
        self._metadata: dict[str, dict[str, Any]] = {}
        self._content: dict[str, str] = {}
        for path, metadata in (notes or {}).items():
            self.create(path, metadata)

    def documents(self) -> Iterator[Document]:
        for path in sorted(self._metadata):
            yield Document(path=path, metadata=copy.deepcopy(self._metadata[path]))

    def exists(self, path: str) -> bool:
        return path in self._metadata

    def read_metadata(self, path: str) -> dict[str, Any]:
        if path not in self._metadata:
            raise DocumentNotFoundError(path)
        return copy.deepcopy(self._metadata[path])

    def read_content(self, path: str) -> str:
        if path not in self._content:
            raise DocumentNotFoundError(path)
        return self._content[path]

    def mutate_metadata(self, path: str, mutate: Mutation) -> dict[str, Any]:
        working = self.read_metadata(path)
        mutate(working)
        self._metadata[path] = working
        return copy.deepcopy(working)

    def create(self, path: str, metadata: dict[str, Any], content: str = "") -> Document:
        if path in self._metadata:
            raise FileExistsError(path)
        self._metadata[path] = copy.deepcopy(metadata)
        self._content[path] = content
        return Document(path=path, metadata=copy.deepcopy(metadata))
