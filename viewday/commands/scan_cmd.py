"""Read-only views of what the engine would send to the calendar."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .. import messages
from ..errors import ConfigError
from ..sync import build_linked_notes, find_unscheduled, scan_local_events
from . import open_vault, report_config_error


def run_scan(vault_path: Path, output_json: bool = False) -> int:
    """Show the calendar events derived from the active rules."""
    console = Console()
    try:
        store, _, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)

    if not settings.active_rules:
        Console(stderr=True).print("[yellow]No active rules configured.[/yellow]")

    events = scan_local_events(store.documents(), settings.rules)

    if output_json:
        print(json.dumps(messages.sync_local_events(events, settings.rules), indent=2))
        return 0

    table = Table(title=f"Local events ({len(events)})")
    table.add_column("Note", style="cyan")
    table.add_column("Rule", style="magenta")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("All day", justify="center")
    for event in events:
        table.add_row(event.path, event.rule_id, event.start, event.end or "", "yes" if event.all_day else "")
    console.print(table)
    return 0


def run_unscheduled(
    vault_path: Path,
    rule_ids: tuple[str, ...] = (),
    output_json: bool = False,
) -> int:
    """List notes without a date for the selected rules (all rules by default)."""
    console = Console()
    err = Console(stderr=True)
    try:
        store, _, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)

    rules = settings.rules
    if rule_ids:
        known = {r.id for r in rules}
        for missing in sorted(set(rule_ids) - known):
            err.print(f"[yellow]Unknown rule: {missing}[/yellow]", highlight=False)
        rules = [r for r in rules if r.id in rule_ids]

    if not rules:
        err.print("[red]No rules to check.[/red]")
        return 1

    items = find_unscheduled(store.documents(), rules)

    if output_json:
        print(json.dumps(messages.unscheduled_results(items), indent=2))
        return 0

    table = Table(title=f"Unscheduled notes ({len(items)})")
    table.add_column("Note", style="cyan")
    table.add_column("Folder", style="dim")
    table.add_column("Rule", style="magenta")
    table.add_column("Property")
    table.add_column("Duration", justify="right")
    for item in items:
        duration = "" if item.duration is None else f"{item.duration:g} min"
        table.add_row(item.basename, item.folder, item.source_id, item.property, duration)
    console.print(table)
    return 0


def run_links(vault_path: Path, output_json: bool = False) -> int:
    """Show which notes are linked to which calendar events."""
    console = Console()
    try:
        store, _, _ = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)
    index = build_linked_notes(store.documents())

    if output_json:
        print(json.dumps(messages.sync_linked_notes(index), indent=2))
        return 0

    if not index:
        console.print("[dim]No linked notes.[/dim]")
        return 0

    table = Table(title=f"Linked events ({len(index)})")
    table.add_column("Event", style="cyan", no_wrap=True)
    table.add_column("Notes")
    for event_id, notes in index.items():
        table.add_row(event_id, "\n".join(n.path for n in notes))
    console.print(table)
    return 0
