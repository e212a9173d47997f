"""CLI entrypoint for the Morpho vault monitor."""

from __future__ import annotations

import asyncio
import sys
from typing import Annotated, Awaitable, Callable, Optional, TypeVar

import click
import typer

from .constants import DEFAULT_CHAIN, DEFAULT_HISTORY_DAYS
from .errors import MonitorError
from .logger import get_logger, setup_logging
from .monitor import VaultMonitor
from .report import (
    format_auto_add,
    format_check_results,
    format_discovered,
    format_status,
    print_json,
)
from .settings import MonitorSettings
from .state import AppState

T = TypeVar("T")

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=False,
    rich_markup_mode="rich",
    help="Morpho vault liquidity monitor.",
    epilog="Configuration: ~/.config/morpho-monitor/config.json "
    "(override with MORPHO_MONITOR_CONFIG_PATH)",
)


def _build_logger():
    """Build a logger instance."""
    return get_logger("morpho_monitor")


def _build_monitor() -> VaultMonitor:
    settings = MonitorSettings()
    setup_logging(settings.log_level)
    state = AppState(settings=settings, logger=_build_logger())
    return VaultMonitor.from_state(state)


def _run(operation: Callable[[VaultMonitor], Awaitable[T]]) -> T:
    """Run one monitor operation, turning expected failures into exit code 1."""
    try:
        monitor = _build_monitor()
        return asyncio.run(operation(monitor))
    except (MonitorError, ValueError) as e:
        typer.secho(f"Error: {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Track Morpho vault liquidity and alert when it drops below a threshold."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@app.command()
def add(
    vault_address: Annotated[str, typer.Argument(help="Vault address to monitor.")],
    threshold: Annotated[
        str, typer.Argument(help="Alert when liquidity drops below this amount.")
    ],
    chain: Annotated[
        str, typer.Argument(help="Chain the vault lives on.")
    ] = DEFAULT_CHAIN,
) -> None:
    """Add a vault to monitor."""
    info = _run(lambda m: m.add_vault(vault_address, threshold, chain))
    typer.secho("Vault added successfully!", fg=typer.colors.GREEN)
    print_json(info.to_dict())


@app.command()
def remove(
    vault_address: Annotated[str, typer.Argument(help="Vault address to stop monitoring.")],
) -> None:
    """Remove a vault."""
    removed = _run(lambda m: m.remove_vault(vault_address))
    if removed:
        typer.secho("Vault removed", fg=typer.colors.GREEN)
    else:
        typer.echo(f"Vault {vault_address} was not being monitored")


@app.command()
def check() -> None:
    """Check all vaults now."""
    outcome = _run(lambda m: m.check_all())
    format_check_results(outcome)


@app.command()
def status() -> None:
    """Show monitoring status."""
    snapshot = _run(lambda m: m.get_status())
    format_status(snapshot)


@app.command()
def info(
    vault_address: Annotated[str, typer.Argument(help="Vault address to inspect.")],
    chain: Annotated[
        str, typer.Argument(help="Chain the vault lives on.")
    ] = DEFAULT_CHAIN,
) -> None:
    """Get vault info."""
    vault_info = _run(lambda m: m.get_vault_info(vault_address, chain))
    print_json(vault_info.to_dict())


@app.command()
def history(
    vault_address: Annotated[str, typer.Argument(help="Vault address.")],
    days: Annotated[
        int, typer.Argument(help="Number of days of history.")
    ] = DEFAULT_HISTORY_DAYS,
) -> None:
    """View historical data."""
    stub = _run(lambda m: m.get_history(vault_address, days))
    print_json(stub.to_dict())


@app.command()
def discover(
    user_address: Annotated[str, typer.Argument(help="Account to discover vaults for.")],
    auto_add: Annotated[
        bool,
        typer.Option(
            "--auto-add", help="Automatically monitor all discovered vaults."
        ),
    ] = False,
    threshold: Annotated[
        Optional[str],
        typer.Option(
            "--threshold",
            help="Threshold for discovered vaults that currently hold no liquidity.",
        ),
    ] = None,
) -> None:
    """Discover vaults for an address."""
    if threshold is not None and not auto_add:
        typer.secho(
            "Error: --threshold only applies together with --auto-add",
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(code=1)
    if auto_add:
        outcome = _run(lambda m: m.auto_add_discovered(user_address, threshold))
        format_auto_add(outcome)
    else:
        discovery = _run(lambda m: m.discover_vaults(user_address))
        format_discovered(discovery)


def run() -> None:
    """Entrypoint used by the console script.

    Usage errors exit with status 1 rather than click's default of 2.
    """
    try:
        code = app(standalone_mode=False)
    except click.exceptions.ClickException as e:
        e.show()
        sys.exit(1)
    except click.exceptions.Abort:
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)


if __name__ == "__main__":
    run()
