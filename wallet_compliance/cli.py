"""CLI entry point for the wallet compliance harness."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from wallet_compliance.checks.catalog import CATALOG, descriptors_for
from wallet_compliance.models.config import ALL_CATEGORIES, HarnessConfig
from wallet_compliance.orchestrator import Orchestrator
from wallet_compliance.provider.base import ProviderError

console = Console()

DEFAULT_CONFIG = "wallet-config.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: str) -> HarnessConfig:
    try:
        return HarnessConfig.load(path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {path}[/red]")
        console.print("Run 'wallet-compliance init' to create a default config.")
        sys.exit(1)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid config {path}:[/red] {e}")
        sys.exit(1)


def _print_results(results: dict) -> None:
    console.print("\n[bold green]Session Complete[/bold green]")
    table = Table(title="Results Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Account", results["account"])
    table.add_row("Duration", f"{results['duration']}s")
    table.add_row("Total Tests", str(results["results"]["total"]))
    table.add_row("Passed", f"[green]{results['results']['passed']}[/green]")
    table.add_row("Failed", f"[red]{results['results']['failed']}[/red]")
    table.add_row("Warnings", f"[yellow]{results['results']['warnings']}[/yellow]")
    console.print(table)
    console.print(results["summary"])

    for fmt, path in results["reports"].items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Wallet Provider Compliance Harness"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--category", "categories", multiple=True,
              type=click.Choice(ALL_CATEGORIES), help="Category to run (repeatable)")
@click.option("--test", "-t", "selectors", multiple=True,
              help="Single test as category:id (repeatable)")
def run(config: str, categories: tuple[str, ...], selectors: tuple[str, ...]) -> None:
    """Run catalog tests against the configured provider."""
    cfg = _load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        results = orchestrator.run(categories=categories or None, selectors=selectors or None)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]")
        sys.exit(1)
    except ProviderError as e:
        console.print(f"[red]Provider error:[/red] {e}")
        sys.exit(1)
    _print_results(results)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def readonly(config: str) -> None:
    """Run only the read-only suite."""
    cfg = _load_config(config)
    try:
        results = Orchestrator(cfg).run_readonly()
    except ProviderError as e:
        console.print(f"[red]Provider error:[/red] {e}")
        sys.exit(1)
    _print_results(results)


@cli.command("list")
@click.option("--category", type=click.Choice(ALL_CATEGORIES), help="Only this category")
def list_tests(category: str | None) -> None:
    """List catalog tests."""
    descriptors = descriptors_for(category) if category else list(CATALOG)
    table = Table(title="Test Catalog")
    table.add_column("Test", style="bold")
    table.add_column("Name")
    table.add_column("Method", style="cyan")
    table.add_column("Description")
    for d in descriptors:
        table.add_row(d.key, d.name, d.method, d.description)
    console.print(table)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def info(config: str) -> None:
    """Show chain, block, fee and account info from the provider."""
    cfg = _load_config(config)
    try:
        snapshot = Orchestrator(cfg).network_info()
    except ProviderError as e:
        console.print(f"[red]Provider error:[/red] {e}")
        sys.exit(1)

    table = Table(title="Network Info")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    labels = {
        "chainId": "Chain ID",
        "name": "Network",
        "blockNumber": "Block",
        "blockTimestamp": "Block Timestamp",
        "gasPrice": "Gas Price (Gwei)",
        "maxFeePerGas": "Max Fee (Gwei)",
        "maxPriorityFeePerGas": "Priority Fee (Gwei)",
        "balance": "Balance (ETH)",
        "nonce": "Nonce",
    }
    for key, label in labels.items():
        value = snapshot.get(key)
        table.add_row(label, "-" if value is None else str(value))
    console.print(table)


@cli.command()
@click.option("--rpc-url", prompt="Provider RPC URL", default="http://127.0.0.1:1248",
              help="JSON-RPC endpoint of the wallet under test")
def init(rpc_url: str) -> None:
    """Create a default configuration file."""
    config_path = Path(DEFAULT_CONFIG)
    if config_path.exists():
        if not click.confirm(f"{DEFAULT_CONFIG} already exists. Overwrite?"):
            return

    cfg = HarnessConfig(rpc_url=rpc_url)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print("  [blue]wallet-compliance run[/blue]")
    console.print("\nTransaction tests send real transactions. Use a test network.")


if __name__ == "__main__":
    cli()
