"""Rich console rendering for monitor results."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..chains import CHAINS
from ..domain import (
    AutoAddOutcome,
    CheckOutcome,
    DiscoveryOutcome,
    FetchFailure,
    MonitorStatus,
)


def _format_amount(value: Decimal, places: int = 2) -> str:
    return f"{value:,.{places}f}"


def _truncate_address(address: str) -> str:
    """Truncate address for display."""
    if len(address) <= 16:
        return address
    return f"{address[:10]}...{address[-4:]}"


def _chain_name(key: str) -> str:
    chain = CHAINS.get(key.lower())
    return chain.display_name if chain else key


def print_json(data: Any, console: Console | None = None) -> None:
    console = console or Console()
    console.print_json(json.dumps(data))


def _failures_table(failures: list[FetchFailure], title: str) -> Table:
    table = Table(title=title, expand=True, title_style="bold red")
    table.add_column("Target", style="cyan", no_wrap=True)
    table.add_column("Chain")
    table.add_column("Error", style="red")
    for failure in failures:
        table.add_row(failure.target, _chain_name(failure.chain), failure.error)
    return table


def format_check_results(outcome: CheckOutcome, console: Console | None = None) -> None:
    """Print one row per checked vault plus any vaults that could not be read."""
    console = console or Console()

    table = Table(title="Liquidity Check Results", expand=True)
    table.add_column("", no_wrap=True)
    table.add_column("Vault", style="cyan")
    table.add_column("Chain")
    table.add_column("Liquidity", justify="right")
    table.add_column("Threshold", justify="right", style="dim")
    table.add_column("% of Threshold", justify="right")

    for result in outcome.results:
        asset = result.vault.asset_symbol or result.info.asset_symbol
        status = "[red]●[/]" if result.below_threshold else "[green]●[/]"
        percent_style = "red" if result.below_threshold else "green"
        table.add_row(
            status,
            f"{result.info.name} ({result.info.symbol})",
            _chain_name(result.vault.chain),
            f"{_format_amount(result.liquidity)} {asset}",
            f"{_format_amount(result.threshold)} {asset}",
            f"[{percent_style}]{result.percent_of_threshold}%[/]",
        )

    if outcome.results:
        console.print(table)
    elif not outcome.failures:
        console.print("No vaults are being monitored.")

    if outcome.failures:
        console.print(_failures_table(outcome.failures, "Vaults that could not be checked"))


def format_status(status: MonitorStatus, console: Console | None = None) -> None:
    console = console or Console()

    channels = Table(show_header=False, box=None, padding=(0, 1))
    channels.add_column("Key", style="dim")
    channels.add_column("Value", style="cyan")
    channels.add_row("Tracked Vaults", str(len(status.vaults)))
    channels.add_row("Console", "enabled" if status.alert_channels.console else "disabled")
    channels.add_row("Telegram", status.alert_channels.telegram or "not configured")
    console.print(Panel(channels, title="[bold]Monitoring Status[/]", border_style="blue"))

    if not status.vaults:
        return

    table = Table(expand=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Vault", style="cyan")
    table.add_column("Address")
    table.add_column("Chain")
    table.add_column("Threshold", justify="right")
    table.add_column("Source", style="dim")
    for i, vault in enumerate(status.vaults, start=1):
        table.add_row(
            str(i),
            f"{vault.name} ({vault.symbol})",
            vault.address,
            _chain_name(vault.chain),
            f"{_format_amount(vault.threshold)} {vault.asset_symbol}",
            "discovered" if vault.auto_discovered else "manual",
        )
    console.print(table)


def format_discovered(outcome: DiscoveryOutcome, console: Console | None = None) -> None:
    console = console or Console()

    if not outcome.vaults:
        console.print("No vaults found for this address.")
    else:
        table = Table(title="Discovered Vaults", expand=True)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Vault", style="cyan")
        table.add_column("Chain")
        table.add_column("Address")
        table.add_column("Your Shares", justify="right")
        table.add_column("Your Assets", justify="right", style="green")
        table.add_column("Liquidity", justify="right")
        for i, vault in enumerate(outcome.vaults, start=1):
            table.add_row(
                str(i),
                f"{vault.name} ({vault.symbol})",
                _chain_name(vault.chain),
                _truncate_address(vault.address),
                _format_amount(vault.user_shares, 4),
                f"{_format_amount(vault.user_assets_value)} {vault.asset_symbol}",
                f"{_format_amount(vault.liquidity)} {vault.asset_symbol}",
            )
        console.print(table)
        console.print(
            "[dim]Tip: add --auto-add to monitor all discovered vaults[/]"
        )

    if outcome.failures:
        console.print(_failures_table(outcome.failures, "Chains that could not be scanned"))


def format_auto_add(outcome: AutoAddOutcome, console: Console | None = None) -> None:
    console = console or Console()

    for tracked in outcome.added:
        console.print(
            f"[green]Added[/] {tracked.name} on {_chain_name(tracked.chain)} "
            f"(threshold {_format_amount(tracked.threshold)} {tracked.asset_symbol})"
        )
    for vault in outcome.skipped:
        console.print(f"[dim]Already monitoring[/] {vault.name} ({vault.address})")
    if outcome.failures:
        console.print(_failures_table(outcome.failures, "Chains that could not be scanned"))

    console.print(
        f"\nDiscovery complete! {len(outcome.discovered)} vault(s) discovered, "
        f"{len(outcome.added)} added to monitoring."
    )
