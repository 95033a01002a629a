"""Implementations behind the ``viewday`` CLI commands."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console

from ..config import Settings, SettingsStore
from ..errors import ConfigError
from ..vault.loader import FileStore


def open_vault(vault_path: Path) -> tuple[FileStore, SettingsStore, Settings]:
    """Store, settings store and loaded settings for a vault directory.

    Raises:
        ConfigError: if the settings file cannot be read.
    """
    settings_store = SettingsStore(vault_path)
    return FileStore(vault_path), settings_store, settings_store.load()


def report_config_error(error: ConfigError) -> int:
    Console(stderr=True).print(f"[red]{error}[/red]", highlight=False)
    return 1
