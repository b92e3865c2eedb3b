"""CLI commands for configuration management."""

import json
import shutil
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from freelance_tracker.core.config import ConfigManager

console = Console()
error_console = Console(stderr=True)


def _load(ctx: click.Context) -> ConfigManager:
    """Config manager for the --config path given to the root command."""
    obj = ctx.find_root().obj or {}
    try:
        return ConfigManager(obj.get("config_path"))
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def convert_value(value: str) -> Any:
    """Convert a command-line string to bool, None, int or float where it looks like one."""
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if lowered == "null":
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


@click.group()
def config() -> None:
    """Manage Freelance Tracker configuration.

    Configuration is stored in ~/.freelance-tracker/config.yml
    """
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show all configuration settings.

    Example:
        freelance-tracker config show
        freelance-tracker config show --json
    """
    config_mgr = _load(ctx)

    if as_json:
        click.echo(json.dumps(config_mgr.to_dict(), indent=2))
        return

    table = Table(title="Freelance Tracker Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key in config_mgr.get_all_keys():
        table.add_row(key, str(config_mgr.get(key)))

    console.print(table)
    console.print(f"\nConfig file: {config_mgr.config_path}")


@config.command("get")
@click.argument("key")
@click.pass_context
def config_get(ctx: click.Context, key: str) -> None:
    """Get a specific configuration value.

    Uses dot notation to access nested values.

    Example:
        freelance-tracker config get deadlines.window_hours
    """
    config_mgr = _load(ctx)
    value = config_mgr.get(key)

    if value is None:
        error_console.print(f"[red]Error:[/red] Configuration key '{key}' not found")
        sys.exit(1)

    if isinstance(value, dict):
        click.echo(json.dumps(value, indent=2))
    else:
        click.echo(str(value))


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value.

    Values are converted to the matching type. Use 'true'/'false' for
    booleans and plain numbers for integers.

    Example:
        freelance-tracker config set deadlines.deduplicate true
        freelance-tracker config set timer.stamp_entry_at stop
    """
    config_mgr = _load(ctx)
    converted_value = convert_value(value)

    try:
        config_mgr.set(key, converted_value)
        console.print(f"[green]✓[/green] Set {key} = {converted_value}")
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


@config.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def config_reset(ctx: click.Context, yes: bool) -> None:
    """Reset configuration to defaults.

    Example:
        freelance-tracker config reset --yes
    """
    config_mgr = _load(ctx)

    if not yes:
        console.print("[yellow]Warning:[/yellow] This will reset all configuration to defaults.")
        if not click.confirm("Continue?"):
            console.print("Cancelled")
            return

    backup_path = config_mgr.config_path.with_suffix(".yml.backup")
    if config_mgr.config_path.exists():
        shutil.copy(config_mgr.config_path, backup_path)
        console.print(f"Backed up current config to {backup_path}")

    config_mgr.reset()
    console.print("[green]✓[/green] Configuration reset to defaults")
    console.print(f"Config file: {config_mgr.config_path}")


@config.command("path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Show path to configuration file."""
    click.echo(str(_load(ctx).config_path))
