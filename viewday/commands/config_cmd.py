"""Show and change vault settings."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..errors import ConfigError
from . import open_vault, report_config_error

SETTABLE_KEYS = {
    "widget-id": "widget_id",
    "meeting-folder": "meeting_notes_folder",
    "periodic-folder": "periodic_notes_folder",
}


def run_config_show(vault_path: Path) -> int:
    console = Console()
    try:
        _, settings_store, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)

    table = Table(title=str(settings_store.path), show_header=False)
    table.add_column("key", style="cyan")
    table.add_column("value")
    table.add_row("widget-id", settings.widget_id or "[dim](not set)[/dim]")
    table.add_row("meeting-folder", settings.meeting_notes_folder or "/")
    table.add_row("periodic-folder", settings.periodic_notes_folder or "/")
    table.add_row("rules", f"{len(settings.rules)} ({len(settings.active_rules)} active)")
    console.print(table)
    return 0


def run_config_set(vault_path: Path, key: str, value: str) -> int:
    console = Console(stderr=True)
    try:
        _, settings_store, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)

    value = value.strip()
    if key != "widget-id":
        value = value.strip("/")
    setattr(settings, SETTABLE_KEYS[key], value)

    try:
        settings_store.save(settings)
    except ConfigError as e:
        return report_config_error(e)

    console.print(f"[green]Set {key}[/green]")
    if key == "widget-id" and value:
        console.print("All set! Run [bold]viewday embed-url[/bold] to get the calendar address.")
    return 0


def run_embed_url(vault_path: Path, dark: bool = False) -> int:
    try:
        _, _, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)
    url = settings.embed_url(dark=dark)
    if url is None:
        Console(stderr=True).print('[yellow]Please set your "Widget Id" first: viewday config set widget-id <id>[/yellow]')
        return 1
    print(url)
    return 0
