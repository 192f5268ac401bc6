# src/cli/runner.py

"""Headless CLI commands that reuse the rate store and chart viewer."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.currency import format_amount, format_rate, normalize_code
from src.models.errors import NetworkError
from src.models.rates import ConversionResult, PopularRate
from src.services.history_viewer import HistoryViewer
from src.services.rate_client import FrankfurterClient
from src.services.rate_store import RateStore
from src.storage.chart_exporter import PlotlyChartRenderer
from src.storage.preferences import PreferenceStore

logger = logging.getLogger("currency_flow.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _result_to_dict(
    result: ConversionResult, popular: list[PopularRate]
) -> dict[str, object]:
    """Serialise a conversion (and optional popular rows) for JSON output."""
    data: dict[str, object] = {
        "from": result.from_code,
        "to": result.to_code,
        "amount": result.amount,
        "converted_amount": result.display_amount,
        "rate": result.display_rate,
    }
    if popular:
        data["popular"] = [
            {
                "code": row.code,
                "name": row.name,
                "rate": format_rate(row.rate),
                "converted_amount": format_amount(row.converted_amount),
            }
            for row in popular
        ]
    return data


def _print_tables(
    result: ConversionResult, popular: list[PopularRate]
) -> None:
    """Render the conversion and popular rates as Rich tables."""
    console = Console()
    table = Table(title="Conversion", show_lines=True, title_style="bold cyan")
    table.add_column("Amount", justify="right")
    table.add_column("From", style="magenta")
    table.add_column("Result", justify="right", style="green")
    table.add_column("To", style="magenta")
    table.add_column("Rate", justify="right", style="dim")
    table.add_row(
        f"{result.amount:,.2f}",
        result.from_code,
        result.display_amount,
        result.to_code,
        result.display_rate,
    )
    console.print(table)

    if not popular:
        return
    rates = Table(
        title=f"Popular rates for {result.amount:,.2f} {result.from_code}",
        title_style="bold cyan",
    )
    rates.add_column("Currency")
    rates.add_column("Code", style="magenta")
    rates.add_column("Rate", justify="right")
    rates.add_column("Amount", justify="right", style="green")
    for row in popular:
        rates.add_row(
            row.name,
            row.code,
            format_rate(row.rate),
            format_amount(row.converted_amount),
        )
    console.print(rates)


async def cli_convert(
    amount: str,
    from_code: str,
    to_code: str | None,
    output_format: str,
    show_popular: bool = False,
    client: FrankfurterClient | None = None,
) -> int:
    """Convert one amount and print it; return an exit code (0=ok, 1=fail)."""
    store = RateStore(client)
    state = store.state
    state.from_code = normalize_code(from_code)
    state.amount_text = amount
    if to_code:
        state.to_code = normalize_code(to_code)

    display = await store.recompute()
    if display is None or display.status == "network_error":
        _err.print(f"[red]Error fetching rates: {state.last_error}[/red]")
        return 1
    if not display.ok or display.result is None:
        _err.print(f"[yellow]{display.result_text}[/yellow]")
        return 1

    popular = store.popular_rates() if show_popular else []
    snapshot = state.snapshot
    if snapshot is not None:
        _err.print(f"[dim]Rates as of {snapshot.as_of:%Y-%m-%d}[/dim]")

    if output_format == "table":
        _print_tables(display.result, popular)
    else:
        json.dump(
            _result_to_dict(display.result, popular),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")
    return 0


async def cli_history(
    from_code: str,
    to_code: str,
    lookback_days: int,
    open_browser: bool = True,
    client: FrankfurterClient | None = None,
) -> int:
    """Export a FROM->TO history chart to HTML; return an exit code."""
    if lookback_days not in Settings.LOOKBACK_WINDOWS:
        valid = ", ".join(str(d) for d in Settings.LOOKBACK_WINDOWS)
        _err.print(f"[red]Unsupported window {lookback_days}; use {valid}[/red]")
        return 1

    renderer = PlotlyChartRenderer(open_browser=open_browser)
    viewer = HistoryViewer(client, renderer=renderer)
    try:
        series = await viewer.load_series(from_code, to_code, lookback_days)
    except NetworkError as exc:
        _err.print(f"[red]Failed to load chart data: {exc}[/red]")
        return 1

    if series is None or not series.points:
        _err.print("[yellow]No historical rates for that range.[/yellow]")
        return 1

    _err.print(
        f"[green]✓ {len(series)} points for "
        f"{series.from_code}->{series.to_code}[/green]"
    )
    _err.print(f"[dim]Chart saved → {renderer.last_path}[/dim]")
    return 0


def run_set_name(name: str) -> int:
    """Persist the developer display name shown in the TUI footer."""
    if not PreferenceStore().set_developer_name(name):
        _err.print("[red]Name cannot be empty.[/red]")
        return 1
    _err.print(f"[green]✓ Developer name set to {name.strip()}[/green]")
    return 0
