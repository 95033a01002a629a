"""Inspect and replace the calendar rule set."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from ..config import load_rules
from ..errors import ConfigError
from . import open_vault, report_config_error


def read_rules_file(path: Path) -> list[dict[str, Any]]:
    """Raw rule dicts from a TOML (``[[rules]]``) or JSON file.

    JSON may hold a list of rules or an object with a ``rules`` list.
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".toml":
        data: Any = tomllib.loads(text)
    else:
        data = json.loads(text)

    if isinstance(data, dict):
        data = data.get("rules", [])
    if not isinstance(data, list):
        raise ValueError("rules must be a list")
    return data


def run_rules_list(vault_path: Path, output_json: bool = False) -> int:
    console = Console()
    try:
        _, _, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)

    if output_json:
        print(json.dumps([r.to_dict() for r in settings.rules], indent=2))
        return 0

    if not settings.rules:
        console.print("[dim]No rules configured.[/dim]")
        return 0

    table = Table(title="Rules")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("property", style="magenta")
    table.add_column("folder")
    table.add_column("color", style="dim")
    table.add_column("active", justify="center")
    for rule in settings.rules:
        table.add_row(
            rule.id,
            rule.name,
            rule.property,
            rule.folder_scope or "(entire vault)",
            rule.color,
            "yes" if rule.active else "no",
        )
    console.print(table)
    return 0


def run_rules_import(vault_path: Path, rules_file: Path) -> int:
    """Replace the vault's rule set with the rules in ``rules_file``."""
    console = Console(stderr=True)
    try:
        _, settings_store, settings = open_vault(vault_path)
    except ConfigError as e:
        return report_config_error(e)

    try:
        raw = read_rules_file(rules_file)
    except (OSError, ValueError, tomllib.TOMLDecodeError) as e:
        console.print(f"[red]Cannot read {rules_file}: {e}[/red]", highlight=False)
        return 1

    settings.rules = load_rules(raw)
    try:
        settings_store.save(settings)
    except ConfigError as e:
        return report_config_error(e)

    skipped = len(raw) - len(settings.rules)
    console.print(f"[green]Imported {len(settings.rules)} rules[/green]")
    if skipped:
        console.print(f"[yellow]Skipped {skipped} invalid or duplicate rules[/yellow]")
    return 0
