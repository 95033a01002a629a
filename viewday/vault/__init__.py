"""Document store adapters and frontmatter helpers."""

from .loader import FileStore
from .store import DocumentStore, MemoryStore

__all__ = [
    "DocumentStore",
    "FileStore",
    "MemoryStore",
]
