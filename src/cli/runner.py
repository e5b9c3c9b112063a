# src/cli/runner.py

"""Command handlers for the gold_watch CLI."""

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import (
    AppConfig,
    ConfigError,
    Settings,
    load_config,
)
from src.models.gold_price import GoldPrice
from src.services.cycle_orchestrator import GoldPriceCycle
from src.services.delta_formatter import format_vnd
from src.storage.price_history_db import PriceHistoryDB

logger = logging.getLogger("gold_watch.cli")

# Stderr console for status messages so stdout stays clean
_err = Console(stderr=True)


def _load_config_or_exit(config_path: str | None) -> AppConfig | None:
    """Load config, printing the reason and returning ``None`` on failure."""
    try:
        return load_config(Path(config_path) if config_path else None)
    except ConfigError as exc:
        logger.critical("Cannot start: %s", exc)
        _err.print(f"[red]{exc}[/red]")
        return None


def run_scheduler(config_path: str | None) -> int:
    """Run cycles at every scheduled slot until interrupted."""
    config = _load_config_or_exit(config_path)
    if config is None:
        return 1

    cycle = GoldPriceCycle(config)
    try:
        cycle.run_forever()
    except KeyboardInterrupt:
        logger.info("Scheduler stopped by user")
    return 0


def run_single_cycle(config_path: str | None) -> int:
    """Run one cycle now. Exit code 1 if it was skipped."""
    config = _load_config_or_exit(config_path)
    if config is None:
        return 1

    report = GoldPriceCycle(config).run_once()
    if report is None:
        _err.print("[yellow]No prices fetched, cycle skipped[/yellow]")
        return 1
    Console().print(report, highlight=False, markup=False)
    return 0


def _print_history(rows: list[GoldPrice]) -> None:
    """Render a Rich table of stored price rows to stdout."""
    table = Table(
        title="Gold Price History",
        show_lines=False,
        title_style="bold yellow",
    )
    table.add_column("Updated", style="dim")
    table.add_column("Type", max_width=40)
    table.add_column("Buy", justify="right", style="green")
    table.add_column("Sell", justify="right", style="red")
    table.add_column("Converted", style="dim")

    for p in rows:
        table.add_row(
            p.updated_at.strftime("%Y-%m-%d %H:%M"),
            p.instrument,
            format_vnd(p.buy),
            format_vnd(p.sell),
            p.converted or "—",
        )

    Console().print(table)


def run_history(
    instrument: str | None,
    limit: int,
    db_path: Path | None = None,
) -> int:
    """Print stored history, optionally for a single instrument."""
    path = db_path or Settings.PRICE_DB_PATH
    if not path.exists():
        _err.print("[dim]No history recorded yet[/dim]")
        return 0

    with PriceHistoryDB(path) as db:
        if instrument:
            rows = db.get_price_history(instrument, limit=limit)
        else:
            rows = db.get_recent(limit)

    if not rows:
        _err.print("[dim]No history recorded yet[/dim]")
        return 0
    _print_history(rows)
    return 0
