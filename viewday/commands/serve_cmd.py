"""Serve command - bridge the calendar surface and the vault.

Inbound messages arrive as JSON Lines on the inbox stream, one
``{"origin": ..., "data": {...}}`` object per line. Outbound payloads are
written as JSON Lines to the outbox. Vault changes are debounced into
rescans. Everything runs on the main loop; the watcher and inbox reader
threads only enqueue work.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
from pathlib import Path
from typing import IO, Any

from rich.console import Console

from ..debounce import DEBOUNCE_SECONDS, Debouncer
from ..dispatcher import Dispatcher
from ..errors import ConfigError
from ..host import ConsoleWorkspace, JsonLinesChannel
from ..sync.engine import SyncEngine
from ..watcher import watch_vault
from . import open_vault, report_config_error

logger = logging.getLogger(__name__)

POLL_SECONDS = 0.25

_CHANGE = "change"
_MESSAGE = "message"
_EOF = "eof"


def read_inbox(inbox: IO[str], work: queue.Queue) -> None:
    """Parse inbox lines into queued messages until the stream ends."""
    for line in inbox:
        line = line.strip()
        if not line:
            continue
        try:
            envelope = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed inbox line: %s", e)
            continue
        if not isinstance(envelope, dict) or not isinstance(envelope.get("origin"), str):
            logger.warning("Ignoring inbox line without an origin")
            continue
        work.put((_MESSAGE, (envelope["origin"], envelope.get("data"))))
    work.put((_EOF, None))


def run_serve(
    vault_path: Path,
    *,
    inbox: IO[str],
    outbox: IO[str],
    interactive: bool = False,
    watch: bool = True,
    cooldown: float = DEBOUNCE_SECONDS,
) -> int:
    """Run until the inbox closes or the user interrupts."""
    console = Console(stderr=True)
    try:
        store, settings_store, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)

    engine = SyncEngine(store, settings, JsonLinesChannel(outbox))
    workspace = ConsoleWorkspace(vault_path, console=console, interactive=interactive)
    dispatcher = Dispatcher(engine, workspace, settings_store)
    debouncer = Debouncer(engine.refresh, cooldown=cooldown)

    work: queue.Queue[tuple[str, Any]] = queue.Queue()
    observer = watch_vault(vault_path, lambda path: work.put((_CHANGE, path))) if watch else None
    reader = threading.Thread(target=read_inbox, args=(inbox, work), name="viewday-inbox", daemon=True)
    reader.start()

    console.print(f"[bold]Serving[/bold] {vault_path}")
    console.print(f"  Rules: {len(settings.rules)} ({len(settings.active_rules)} active)")
    console.print(f"  Watching: {'on' if observer else 'off'}")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    engine.refresh()
    handled = 0
    try:
        while True:
            try:
                kind, item = work.get(timeout=POLL_SECONDS)
            except queue.Empty:
                debouncer.flush()
                continue

            if kind == _EOF:
                break
            if kind == _CHANGE:
                debouncer.notify()
            elif kind == _MESSAGE:
                origin, data = item
                if dispatcher.receive(origin, data):
                    handled += 1
            debouncer.flush()
    except KeyboardInterrupt:
        console.print()
    finally:
        if observer is not None:
            observer.stop()
            observer.join()

    console.print(f"[bold]Stopped.[/bold] Handled {handled} messages.")
    return 0
