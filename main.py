#!/usr/bin/env python3
"""Sound Treasury - Dashboard Data CLI

Drives the dashboard data core from a terminal: the Bitcoin power-law
fair-value series and the sector comparison scoreboards, with the same
cache and fallback behavior the dashboard sees.
"""

from __future__ import annotations

# Load environment variables first (SOUND_TREASURY_API_URL, etc.)
import sound_treasury.env_loader

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sound_treasury.config import Config
from sound_treasury.constants import CSV_FILENAME
from sound_treasury.core.cache import PersistedCache, SessionCache
from sound_treasury.data.sectors import DEFAULT_SECTOR, SECTOR_CONFIG, get_sector
from sound_treasury.logging_config import get_logger, set_level, setup_logging
from sound_treasury.models.comparison import build_comparison_series
from sound_treasury.models.records import ComparisonSeries, ModelSnapshot, SectorSnapshot
from sound_treasury.pipeline.export import write_model_csv
from sound_treasury.pipeline.orchestrator import DashboardDataOrchestrator
from sound_treasury.pipeline.sources import RemoteDataSource
from sound_treasury.pipeline.yahoo_history import build_yearly_history, history_to_dict

logger = get_logger(__name__)

console = Console()


def print_msg(msg: str, style: str = "info"):
    """Print a message with a status symbol."""
    symbols = {"success": ("✓", "green"), "error": ("✗", "red"), "warning": ("!", "yellow"), "info": ("ℹ", "blue")}
    sym, color = symbols.get(style, ("ℹ", "blue"))
    console.print(f"[{color}]{sym}[/{color}] {msg}")


def print_header(title: str):
    console.print(Panel(title, box=box.DOUBLE, style="bold cyan"))


def fmt_pct(value: Optional[float]) -> str:
    if value is None:
        return "[dim]-[/dim]"
    color = "green" if value >= 0 else "red"
    return f"[{color}]{value:+.1f}%[/{color}]"


def fmt_price(value: Optional[float]) -> str:
    return "-" if value is None else f"${value:,.2f}"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="sound-treasury",
        description="Bitcoin fair-value model and sector comparison data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sound-treasury model                       Current fair value, bands and data source
  sound-treasury model --refresh             Bypass caches and fetch live
  sound-treasury sector agriculture          Yearly winners and CAGR scoreboard
  sound-treasury export data/model.csv       Export the full model series
  sound-treasury history chemicals --output chemicals.json
                                             Rebuild yearly prices from Yahoo Finance
  sound-treasury cache --clear               Drop the persisted model cache
        """,
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    sub = parser.add_subparsers(dest="command", title="commands", metavar="COMMAND")

    model = sub.add_parser("model", help="Show the fair-value model summary")
    model.add_argument("--refresh", action="store_true", help="Force a live fetch")
    model.add_argument("--rows", type=int, default=10, metavar="N", help="Recent points to show (default: 10)")

    sector = sub.add_parser("sector", help="Show a sector comparison")
    sector.add_argument("sector_key", nargs="?", default=DEFAULT_SECTOR, choices=sorted(SECTOR_CONFIG))
    sector.add_argument("--refresh", action="store_true", help="Force a live fetch")

    export = sub.add_parser("export", help="Export the model series to CSV")
    export.add_argument("path", nargs="?", default=CSV_FILENAME, help=f"Output file (default: {CSV_FILENAME})")

    history = sub.add_parser("history", help="Rebuild a sector's yearly prices from Yahoo Finance")
    history.add_argument("sector_key", choices=sorted(SECTOR_CONFIG))
    history.add_argument("--start", type=int, default=None, metavar="YEAR")
    history.add_argument("--end", type=int, default=None, metavar="YEAR")
    history.add_argument("--output", type=str, default=None, metavar="FILE", help="Write the table as JSON")

    cache = sub.add_parser("cache", help="Manage the persisted cache")
    cache.add_argument("--clear", action="store_true", help="Delete all persisted cache files")

    return parser.parse_args(argv)


def build_orchestrator(config: Config) -> DashboardDataOrchestrator:
    return DashboardDataOrchestrator(
        source=RemoteDataSource.from_config(config),
        session_cache=SessionCache(),
        persisted_cache=PersistedCache(config.cache_dir, config.cache_ttl_hours),
        config=config,
    )


def show_advisories(warnings) -> None:
    for warning in warnings:
        print_msg(warning, "warning")


def display_model(snapshot: ModelSnapshot, rows: int) -> None:
    stats = snapshot.stats
    ratio = None
    if stats.current_price is not None and stats.current_fair_price:
        ratio = stats.current_price / stats.current_fair_price

    summary = (
        f"[cyan]Data Source:[/cyan] {snapshot.label}\n"
        f"[green]Current Price:[/green] {fmt_price(stats.current_price)}\n"
        f"[yellow]Fair Value:[/yellow] {fmt_price(stats.current_fair_price)}\n"
        f"[magenta]Valuation:[/magenta] {f'{ratio:.2f}x fair' if ratio is not None else '-'}\n"
        f"[dim]Sigma (log):[/dim] {stats.std_dev:.3f}   [dim]R²:[/dim] {stats.r_squared:.3f}\n"
        f"[dim]Points:[/dim] {len(snapshot.points)} ({len(snapshot.chart_points)} charted)"
    )
    console.print(Panel(summary, title="Power-Law Fair Value", box=box.DOUBLE))

    priced = [p for p in snapshot.points if p.actual_price is not None]
    table = Table(title="Recent Points", box=box.ROUNDED)
    table.add_column("Date", style="bold")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Fair Value", justify="right")
    table.add_column("+2σ", justify="right", style="red")
    table.add_column("-1σ", justify="right", style="blue")
    for point in priced[-rows:]:
        table.add_row(
            point.timestamp.date().isoformat(),
            fmt_price(point.actual_price),
            fmt_price(point.fair_price),
            fmt_price(point.upper_band),
            fmt_price(point.lower_band),
        )
    console.print(table)
    show_advisories(snapshot.warnings)


def display_comparison(series: ComparisonSeries, title: str) -> None:
    years = Table(title=f"{title} - Yearly Winners", box=box.ROUNDED)
    years.add_column("Year", justify="center", style="cyan")
    years.add_column("Winner", style="bold")
    years.add_column("Return", justify="right")
    years.add_column("Runner-up")
    for result in series.years:
        winner = result.winner
        runner_up = result.returns[1] if len(result.returns) > 1 else None
        years.add_row(
            str(result.year),
            winner.display_name if winner else "[dim]-[/dim]",
            fmt_pct(winner.value if winner else None),
            f"{runner_up.display_name} {fmt_pct(runner_up.value)}" if runner_up else "",
        )
    console.print(years)

    board = Table(title=f"{title} - Scoreboard", box=box.ROUNDED, show_lines=True)
    board.add_column("Asset", style="bold")
    board.add_column("Wins", justify="center", style="cyan")
    board.add_column("2Y CAGR", justify="right")
    board.add_column("3Y CAGR", justify="right")
    board.add_column("5Y CAGR", justify="right")
    board.add_column("Long CAGR", justify="right")
    board.add_column("Total", justify="right")
    for entry in series.scoreboard:
        board.add_row(
            entry.display_name,
            str(entry.win_count),
            fmt_pct(entry.cagr2),
            fmt_pct(entry.cagr3),
            fmt_pct(entry.cagr5),
            f"{fmt_pct(entry.cagr_long)} [dim]({entry.long_window_label})[/dim]",
            fmt_pct(entry.total_return),
        )
    console.print(board)


def display_sector(snapshot: SectorSnapshot) -> None:
    sector = get_sector(snapshot.sector_key)
    print_msg(f"Data Source: {snapshot.label}", "info")
    display_comparison(snapshot.series, sector.label)
    show_advisories(snapshot.warnings)


async def run_model(config: Config, refresh: bool, rows: int) -> None:
    orchestrator = build_orchestrator(config)
    try:
        snapshot = await orchestrator.get_model_series(force_refresh=refresh)
    finally:
        orchestrator.source.close()
    display_model(snapshot, rows)


async def run_sector(config: Config, sector_key: str, refresh: bool) -> None:
    orchestrator = build_orchestrator(config)
    try:
        snapshot = await orchestrator.get_sector_series(sector_key, force_refresh=refresh)
    finally:
        orchestrator.source.close()
    display_sector(snapshot)


async def run_export(config: Config, path: str) -> None:
    orchestrator = build_orchestrator(config)
    try:
        snapshot = await orchestrator.get_model_series()
    finally:
        orchestrator.source.close()
    written = write_model_csv(snapshot.points, path)
    print_msg(f"Exported {len(snapshot.points)} rows ({snapshot.label}) to {written}", "success")
    show_advisories(snapshot.warnings)


def run_history(config: Config, sector_key: str, start: Optional[int], end: Optional[int], output: Optional[str]):
    sector = get_sector(sector_key)
    start_year = start or config.comparison_start_year
    end_year = end or config.comparison_end_year

    print_msg(f"Downloading {len(sector.assets)} tickers for {start_year}-{end_year}...", "info")
    history = build_yearly_history(sector.assets, start_year, end_year)
    if not history:
        print_msg("No price data returned", "error")
        sys.exit(1)

    series = build_comparison_series(
        history,
        sector.assets,
        start_year=start_year,
        end_year=end_year,
        cagr_windows=config.cagr_windows,
        long_window_start=config.long_window_start_year,
        long_window_years=config.long_window_years,
    )
    display_comparison(series, sector.label)

    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(history_to_dict(history), indent=2), encoding="utf-8")
        print_msg(f"Yearly history written to {out_path}", "success")


def main(argv=None):
    args = parse_args(argv)
    setup_logging(level=args.log_level)
    if not sound_treasury.env_loader.is_environment_loaded():
        logger.debug("No secrets.env found, using the process environment only")
    config = Config.from_env()

    if args.command is None:
        print("\nSound Treasury - Dashboard Data")
        print("===============================")
        print("\nCommands:")
        print("  sound-treasury model         - Fair-value model summary")
        print("  sound-treasury sector KEY    - Sector comparison scoreboard")
        print("  sound-treasury export [FILE] - Export the model series to CSV")
        print("  sound-treasury history KEY   - Rebuild yearly prices from Yahoo Finance")
        print("  sound-treasury cache --clear - Drop the persisted cache")
        print("\nUse 'sound-treasury COMMAND -h' for detailed help\n")
        return

    if args.command == "model":
        print_header("Bitcoin Power-Law Model")
        asyncio.run(run_model(config, args.refresh, args.rows))
        return

    if args.command == "sector":
        print_header(f"Sector Comparison: {get_sector(args.sector_key).label}")
        asyncio.run(run_sector(config, args.sector_key, args.refresh))
        return

    if args.command == "export":
        asyncio.run(run_export(config, args.path))
        return

    if args.command == "history":
        # yfinance prints a line per failed ticker
        set_level("ERROR", "yfinance")
        print_header(f"Yearly History: {get_sector(args.sector_key).label}")
        run_history(config, args.sector_key, args.start, args.end, args.output)
        return

    if args.command == "cache":
        cache = PersistedCache(config.cache_dir, config.cache_ttl_hours)
        if args.clear:
            removed = cache.clear_all()
            print_msg(f"Removed {removed} cache file(s) from {config.cache_dir}", "success")
        else:
            fresh = cache.get(config.storage_key)
            if not fresh.ok:
                print_msg(f"Cache unreadable: {fresh.error}", "error")
            elif fresh.value is None:
                print_msg("No fresh model cache entry", "info")
            else:
                print_msg(
                    f"Model cache written {fresh.value.written_at.isoformat()} "
                    f"({len(fresh.value.payload)} points)",
                    "success",
                )
        return


if __name__ == "__main__":
    main()
