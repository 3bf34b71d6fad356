"""CLI for ckb-asset-tracker."""

import json
import logging
from collections.abc import Callable
from decimal import Decimal
from enum import StrEnum
from typing import TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.traceback import install

# Import all script standards to trigger auto-registration
from ckb_asset_tracker import standards  # noqa: F401
from ckb_asset_tracker.core import ChainAssetLookup, TransactionAssetAggregator
from ckb_asset_tracker.core.models import AssetRecord, TransactionAssetRecord
from ckb_asset_tracker.core.registry import StandardRegistry
from ckb_asset_tracker.data import get_all_supported_networks, get_network_config, get_rpc_endpoints
from ckb_asset_tracker.errors import AssetTrackerError
from ckb_asset_tracker.rpc import CkbRPCProvider, RPCCache

# Install rich traceback handler
install(show_locals=False)

app = typer.Typer(
    name="ckb-asset-tracker",
    help="Classify token and NFT events (mint, burn, transfer) in CKB transactions",
    add_completion=False,
)

console = Console()

T = TypeVar("T")

SHANNONS_PER_CKB = Decimal(10**8)


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


NetworkOption = typer.Option("mainnet", "--network", "-n", envvar="CKB_NETWORK", help="Network to query")
RpcUrlOption = typer.Option(None, "--rpc-url", envvar="CKB_RPC_URL", help="Node URL (overrides configured endpoints)")
FormatOption = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format")
DebugOption = typer.Option(False, "--debug", "-d", help="Enable debug output")


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _build_aggregator(
    network: str,
    rpc_url: str | None,
    workers: int,
) -> tuple[TransactionAssetAggregator, CkbRPCProvider]:
    """
    Wire provider, lookup and aggregator for a network.

    Parameters
    ----------
    network : str
        Network name
    rpc_url : str | None
        Node URL overriding the configured endpoints
    workers : int
        Parallel transaction classification workers

    Returns
    -------
    tuple[TransactionAssetAggregator, CkbRPCProvider]
        Aggregator and the provider to close afterwards

    Raises
    ------
    typer.Exit
        If the network is not configured

    """
    if network not in get_all_supported_networks():
        console.print(f"[bold red]Unknown network:[/bold red] {network}")
        raise typer.Exit(code=1)

    endpoints = [rpc_url] if rpc_url else get_rpc_endpoints(network)
    provider = CkbRPCProvider(endpoints, cache=RPCCache())
    lookup = ChainAssetLookup(provider, network=network)
    return TransactionAssetAggregator(lookup, max_workers=workers), provider


def _run(description: str, func: Callable[[], T], debug: bool) -> T:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        try:
            return func()
        except AssetTrackerError as e:
            progress.stop()
            console.print(f"[bold red]Error:[/bold red] {e}")
            if debug:
                raise
            raise typer.Exit(code=1) from e


@app.command()
def tx(
    tx_hash: str = typer.Argument(..., help="Transaction hash"),
    network: str = NetworkOption,
    rpc_url: str | None = RpcUrlOption,
    format: OutputFormat = FormatOption,
    debug: bool = DebugOption,
) -> None:
    """
    Classify the asset events of one transaction.

    Examples:

        ckb-asset-tracker tx 0xABC...

        ckb-asset-tracker tx 0xABC... --network testnet --format json
    """
    _configure_logging(debug)
    aggregator, provider = _build_aggregator(network, rpc_url, workers=1)
    with provider:
        record = _run(f"Classifying {tx_hash[:10]}...", lambda: aggregator.query_by_tx_hash(tx_hash), debug)

    if format == OutputFormat.JSON:
        _output_json([record])
    else:
        _output_table(record)


@app.command()
def block(
    block_hash: str = typer.Argument(..., help="Block hash"),
    network: str = NetworkOption,
    rpc_url: str | None = RpcUrlOption,
    format: OutputFormat = FormatOption,
    workers: int = typer.Option(4, "--workers", "-w", min=1, help="Transactions classified in parallel"),
    debug: bool = DebugOption,
) -> None:
    """Classify the asset events of every transaction in a block."""
    _configure_logging(debug)
    aggregator, provider = _build_aggregator(network, rpc_url, workers=workers)
    with provider:
        records = _run(
            f"Classifying block {block_hash[:10]}...",
            lambda: aggregator.query_by_block_hash(block_hash),
            debug,
        )

    if format == OutputFormat.JSON:
        _output_json(records)
        return
    if not records:
        console.print("\n[yellow]Block has no transactions[/yellow]")
    for record in records:
        _output_table(record)


@app.command()
def list_standards(network: str = NetworkOption) -> None:
    """List recognized script standards and their deployments."""
    table = Table(title=f"Script Standards ({network})", show_header=True, header_style="bold magenta")
    table.add_column("Standard", style="cyan")
    table.add_column("Mode", style="yellow")
    table.add_column("Code Hash", style="green")
    table.add_column("Hash Type", style="blue")

    for standard in StandardRegistry.instantiate_all(network):
        if not standard.is_deployed():
            table.add_row(standard.name, standard.mode.value, "[dim]not deployed[/dim]", "-")
            continue
        for code_hash, hash_type in standard.deployments:
            table.add_row(standard.name, standard.mode.value, code_hash, hash_type)

    console.print(table)


@app.command()
def list_networks() -> None:
    """List all configured networks."""
    table = Table(title="Networks", show_header=True, header_style="bold magenta")
    table.add_column("Network", style="cyan")
    table.add_column("Address Prefix", style="yellow")
    table.add_column("RPC Endpoints", style="green")

    for network in get_all_supported_networks():
        config = get_network_config(network)
        table.add_row(network, config["address_prefix"], "\n".join(config["rpc_endpoints"]))

    console.print(table)


def _short(value: str | None, head: int = 10, tail: int = 8) -> str:
    if not value:
        return "-"
    if len(value) <= head + tail + 3:
        return value
    return f"{value[:head]}...{value[-tail:]}"


def _asset_cell(record: AssetRecord) -> str:
    if record.token_data:
        token = record.token_data
        label = token.symbol or _short(token.token_id)
        return f"{token.amount} {label}"
    if record.nft_data:
        nft = record.nft_data
        if nft.token_id:
            return f"spore {_short(nft.token_id)}"
        return f"cluster {nft.cluster_name or _short(nft.cluster_id)}"
    return "-"


def _output_table(record: TransactionAssetRecord) -> None:
    """Output a classified transaction as a rich table."""
    height = f" @ {record.block_height}" if record.block_height is not None else " (pending)"
    table = Table(title=f"Transaction {_short(record.tx_id)}{height}", show_header=True, header_style="bold magenta")

    table.add_column("Side", style="cyan")
    table.add_column("#", justify="right")
    table.add_column("Event", style="yellow")
    table.add_column("Address", style="blue")
    table.add_column("Lock", style="white")
    table.add_column("Asset", style="green")
    table.add_column("Capacity (CKB)", style="bold green", justify="right")

    for side, records in (("in", record.inputs), ("out", record.outputs)):
        for asset in records:
            table.add_row(
                side,
                str(asset.index),
                asset.event_type.value,
                _short(asset.address, 12, 8),
                asset.script_type.value,
                _asset_cell(asset),
                f"{Decimal(asset.capacity) / SHANNONS_PER_CKB:,.8f}",
            )

    console.print("\n")
    console.print(table)


def _output_json(records: list[TransactionAssetRecord]) -> None:
    """Output classified transactions as JSON with camelCase keys."""
    data = [record.model_dump(mode="json", by_alias=True) for record in records]
    console.print_json(json.dumps(data))


if __name__ == "__main__":
    app()
