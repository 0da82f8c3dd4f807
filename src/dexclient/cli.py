"""Typer-based CLI for DEX aggregation API calls."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .errors import DexClientError

if TYPE_CHECKING:
    from .client import DexClient
    from .settings import Settings


# Import with local function to avoid circular imports
def _load_settings(config_path: Optional[Path] = None) -> "Settings":
    from .config import load_settings
    return load_settings(config_path)


def _create_client(settings: "Settings") -> "DexClient":
    from .config import create_client_from_settings
    return create_client_from_settings(settings)


def _configure_logging(level: Optional[str], log_dir: Optional[Path], http_level: Optional[str]) -> None:
    from .logging import configure_logging
    configure_logging(level, log_dir=log_dir, http_level=http_level)


app = typer.Typer(help="DEX aggregation API client CLI")
console = Console()
logger = logging.getLogger(__name__)


def run_cli(argv: list[str] | None = None) -> None:
    """Run CLI with optional argv parameter."""
    app(argv)


def main() -> None:
    run_cli()


@app.callback()
def setup(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level (default: DEXCLIENT_LOG_LEVEL or INFO)"
    ),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write dexclient.log here"),
    log_http: Optional[str] = typer.Option(
        None, "--log-http", help="Level for request/response logging, e.g. debug to see bodies"
    ),
) -> None:
    """DEX aggregation API client CLI."""
    try:
        _configure_logging(log_level, log_dir, log_http)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def _execute(config: Optional[Path], call: Callable[["DexClient", "Settings"], Awaitable[Any]]) -> Any:
    """Build a client from config, run one call and close the client."""
    try:
        settings = _load_settings(config)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    async def _run() -> Any:
        client = _create_client(settings)
        try:
            return await call(client, settings)
        finally:
            await client.close()

    try:
        return asyncio.run(_run())
    except DexClientError as e:
        logger.debug("Request failed", exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _market(market: Optional[str], settings: "Settings") -> str:
    return market or settings.default_market


@app.command()
def ticker(
    symbol: str = typer.Argument(..., help="Trading symbol, e.g. BTC-USD"),
    market: Optional[str] = typer.Option(None, help="Market id (dex)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show the last price for a symbol."""
    result = _execute(config, lambda c, s: c.get_ticker(_market(market, s), symbol))
    console.print(f"{result.symbol}: [green]{result.price}[/green]")


@app.command()
def balance(
    market: Optional[str] = typer.Option(None, help="Market id (dex)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show account equity and balance."""
    result = _execute(config, lambda c, s: c.get_balance(_market(market, s)))

    table = Table(title="Account Balance")
    table.add_column("Equity", style="cyan")
    table.add_column("Balance", style="green")
    table.add_row(result.equity, result.balance if result.balance is not None else "-")
    console.print(table)


@app.command("filled-orders")
def filled_orders(
    symbol: str = typer.Argument(..., help="Trading symbol"),
    market: Optional[str] = typer.Option(None, help="Market id (dex)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List filled orders for a symbol."""
    orders = _execute(config, lambda c, s: c.get_filled_orders(_market(market, s), symbol))

    if not orders:
        console.print("[yellow]No filled orders[/yellow]")
        return

    table = Table(title=f"Filled Orders - {symbol}")
    table.add_column("Order ID", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Fee", justify="right")
    for order in orders:
        table.add_row(order.order_id, order.filled_size, order.filled_value, order.filled_fee)
    console.print(table)


@app.command()
def pnl(
    market: Optional[str] = typer.Option(None, help="Market id (dex)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show yesterday's PnL."""
    result = _execute(config, lambda c, s: c.get_yesterday_pnl(market))
    console.print(f"Yesterday PnL: [bold]{result.data}[/bold]")


@app.command("order-create")
def order_create(
    symbol: str = typer.Option(..., help="Trading symbol"),
    size: str = typer.Option(..., help="Order size as a decimal string"),
    side: str = typer.Option(..., help="buy or sell"),
    price: Optional[str] = typer.Option(None, help="Limit price; market order when omitted"),
    market: Optional[str] = typer.Option(None, help="Market id (dex)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Create an order."""
    if side.lower() not in {"buy", "sell"}:
        console.print(f"[red]Error:[/red] Invalid side '{side}'. Must be 'buy' or 'sell'.")
        raise typer.Exit(1)

    result = _execute(
        config,
        lambda c, s: c.create_order(_market(market, s), symbol, size, side.lower(), price),
    )

    lines = [f"{key}: {value}" for key, value in result.model_dump(exclude_none=True).items()]
    console.print(Panel("\n".join(lines) or "accepted", title="Order Created", border_style="green"))


@app.command("close-all")
def close_all(
    symbol: Optional[str] = typer.Option(None, help="Only close positions for this symbol"),
    market: Optional[str] = typer.Option(None, help="Market id (dex)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Close all open positions."""
    target = symbol or "ALL symbols"
    if not yes and not typer.confirm(f"Close positions for {target}?"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(0)

    result = _execute(config, lambda c, s: c.close_all_positions(_market(market, s), symbol))
    console.print(f"[green]Closed positions for {target}[/green] {result.message or ''}".rstrip())


@app.command("config-show")
def config_show(
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Show effective configuration with secrets redacted."""
    try:
        settings = _load_settings(config)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)
    console.print_json(json.dumps(settings.redacted()))
