"""Vault-to-calendar synchronization."""

from .detector import find_unscheduled
from .engine import SyncEngine
from .linked import build_linked_notes
from .scanner import scan_local_events
from .writeback import WriteBack, WriteResult

__all__ = [
    "SyncEngine",
    "WriteBack",
    "WriteResult",
    "build_linked_notes",
    "find_unscheduled",
    "scan_local_events",
]
