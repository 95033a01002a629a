"""CLI entrypoint for viewday."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import SETTINGS_DIR
from .debounce import DEBOUNCE_SECONDS

VAULT_MARKERS = (SETTINGS_DIR, ".obsidian")


def _auto_detect_vault(start: Path) -> Path | None:
    """Find the vault root by walking up from `start` to a folder with .viewday or .obsidian."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if any((p / marker).is_dir() for marker in VAULT_MARKERS):
            return p
    return None


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(__version__, prog_name="viewday")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the vault (defaults to the nearest folder with .viewday or .obsidian)",
)
@click.option("--verbose", is_flag=True, help="Log debug messages")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, verbose: bool) -> None:
    """viewday - Viewday calendar sync for Markdown vaults.

    Turns dated frontmatter into calendar events, finds unscheduled notes,
    and writes calendar changes back into your notes.
    """
    ctx.ensure_object(dict)
    _setup_logging(verbose)

    if vault is None:
        detected = _auto_detect_vault(Path.cwd())
        if detected is None:
            raise click.ClickException("Vault not found. Pass --vault /path/to/vault or run from inside one.")
        vault = detected

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    ctx.obj["vault"] = vault.resolve()


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output the SYNC_LOCAL_EVENTS payload")
@click.pass_context
def scan(ctx: click.Context, output_json: bool) -> None:
    """Show calendar events derived from note frontmatter."""
    from .commands.scan_cmd import run_scan

    sys.exit(run_scan(ctx.obj["vault"], output_json))


@cli.command()
@click.option("--rule", "rule_ids", multiple=True, metavar="RULE_ID", help="Only check this rule (repeatable)")
@click.option("--json", "output_json", is_flag=True, help="Output the UNSCHEDULED_RESULTS payload")
@click.pass_context
def unscheduled(ctx: click.Context, rule_ids: tuple[str, ...], output_json: bool) -> None:
    """List notes that match a rule but have no date yet.

    Rules without a folder only report notes where the property exists but
    is empty. Rules with a folder report every note in it without a date.
    """
    from .commands.scan_cmd import run_unscheduled

    sys.exit(run_unscheduled(ctx.obj["vault"], rule_ids, output_json))


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output the SYNC_LINKED_NOTES payload")
@click.pass_context
def links(ctx: click.Context, output_json: bool) -> None:
    """Show notes linked to calendar events."""
    from .commands.scan_cmd import run_links

    sys.exit(run_links(ctx.obj["vault"], output_json))


@cli.group()
def rules() -> None:
    """Manage calendar rules."""


@rules.command("list")
@click.option("--json", "output_json", is_flag=True, help="Output rules as JSON")
@click.pass_context
def rules_list(ctx: click.Context, output_json: bool) -> None:
    """List configured rules."""
    from .commands.rules_cmd import run_rules_list

    sys.exit(run_rules_list(ctx.obj["vault"], output_json))


@rules.command("import")
@click.argument("rules_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def rules_import(ctx: click.Context, rules_file: Path) -> None:
    """Replace all rules with those in a TOML or JSON file.

    Example TOML:

        [[rules]]
        id = "tasks"
        property = "due"
        folder = "Tasks"
        color = "#ff8800"
    """
    from .commands.rules_cmd import run_rules_import

    sys.exit(run_rules_import(ctx.obj["vault"], rules_file))


@cli.group()
def config() -> None:
    """Show or change settings."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current settings."""
    from .commands.config_cmd import run_config_show

    sys.exit(run_config_show(ctx.obj["vault"]))


@config.command("set")
@click.argument("key", type=click.Choice(["widget-id", "meeting-folder", "periodic-folder"]))
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Change a setting."""
    from .commands.config_cmd import run_config_set

    sys.exit(run_config_set(ctx.obj["vault"], key, value))


@cli.command("embed-url")
@click.option("--dark", is_flag=True, help="Use the dark theme")
@click.pass_context
def embed_url(ctx: click.Context, dark: bool) -> None:
    """Print the address of the calendar widget."""
    from .commands.config_cmd import run_embed_url

    sys.exit(run_embed_url(ctx.obj["vault"], dark))


@cli.command()
@click.argument("path")
@click.argument("property")
@click.argument("value", required=False)
@click.option("--clear", is_flag=True, help="Blank the date instead of setting it")
@click.option("--duration", type=float, default=None, help="Also set the duration in minutes")
@click.pass_context
def reschedule(
    ctx: click.Context,
    path: str,
    property: str,
    value: str | None,
    clear: bool,
    duration: float | None,
) -> None:
    """Set PROPERTY of the note at PATH to VALUE (an ISO date or datetime)."""
    from .commands.write_cmd import run_reschedule

    if clear == (value is not None):
        raise click.UsageError("Give either VALUE or --clear.")
    sys.exit(run_reschedule(ctx.obj["vault"], path, property, None if clear else value, duration))


@cli.command()
@click.argument("path")
@click.argument("event_id")
@click.pass_context
def link(ctx: click.Context, path: str, event_id: str) -> None:
    """Link the note at PATH to a calendar event."""
    from .commands.write_cmd import run_link

    sys.exit(run_link(ctx.obj["vault"], path, event_id))


@cli.command()
@click.argument("path")
@click.argument("event_id")
@click.pass_context
def unlink(ctx: click.Context, path: str, event_id: str) -> None:
    """Remove a calendar event link from the note at PATH."""
    from .commands.write_cmd import run_unlink

    sys.exit(run_unlink(ctx.obj["vault"], path, event_id))


@cli.command()
@click.option(
    "--inbox",
    type=click.Path(dir_okay=False, allow_dash=True, path_type=str),
    default="-",
    show_default=True,
    help="JSON Lines stream of inbound messages",
)
@click.option("--interactive", is_flag=True, help="Prompt on the terminal when a note has to be picked")
@click.option("--no-watch", is_flag=True, help="Do not watch the vault for changes")
@click.option(
    "--cooldown",
    type=float,
    default=DEBOUNCE_SECONDS,
    show_default=True,
    help="Seconds between rescans triggered by vault changes",
)
@click.pass_context
def serve(ctx: click.Context, inbox: str, interactive: bool, no_watch: bool, cooldown: float) -> None:
    """Exchange sync messages with the calendar over JSON Lines.

    Reads {"origin": ..., "data": {...}} lines from the inbox and writes
    outbound payloads to stdout.
    """
    from .commands.serve_cmd import run_serve

    if interactive and inbox == "-":
        raise click.UsageError("--interactive needs --inbox so the terminal is free for prompts.")

    with click.open_file(inbox, "r", encoding="utf-8") as stream:
        exit_code = run_serve(
            ctx.obj["vault"],
            inbox=stream,
            outbox=click.get_text_stream("stdout"),
            interactive=interactive,
            watch=not no_watch,
            cooldown=cooldown,
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
