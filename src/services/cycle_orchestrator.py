# src/services/cycle_orchestrator.py

"""Runs the fetch → store → report → notify cycle on a fixed schedule."""

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from pathlib import Path

from src.config.settings import AppConfig, Settings
from src.notifiers.slack import send_slack
from src.notifiers.telegram import send_telegram
from src.scrapers.gold_price_scraper import GoldPriceScraper
from src.services.delta_formatter import build_report
from src.storage.price_history_db import PriceHistoryDB
from src.storage.snapshot_store import SnapshotStore

logger = logging.getLogger("gold_watch.cycle")

Notifier = Callable[[AppConfig, str], bool]


def next_run_time(
    now: datetime,
    hours: Sequence[int] = Settings.SCHEDULE_HOURS,
) -> datetime:
    """Earliest scheduled hour strictly after *now*.

    Falls through to the first hour of the next day once today's
    slots have passed.
    """
    ordered = sorted(hours)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    for hour in ordered:
        candidate = midnight.replace(hour=hour)
        if candidate > now:
            return candidate
    return midnight.replace(hour=ordered[0]) + timedelta(days=1)


class GoldPriceCycle:
    """One fetch/persist/notify pass, plus the loop that repeats it."""

    def __init__(
        self,
        config: AppConfig,
        scraper: GoldPriceScraper | None = None,
        snapshot_store: SnapshotStore | None = None,
        db_path: Path | None = None,
        notifiers: list[Notifier] | None = None,
    ) -> None:
        self.config = config
        self.scraper = scraper or GoldPriceScraper()
        self.snapshot_store = snapshot_store or SnapshotStore()
        self.db_path = db_path or Settings.PRICE_DB_PATH
        self.notifiers: list[Notifier] = (
            notifiers
            if notifiers is not None
            else [send_telegram, send_slack]
        )

    def _dispatch(self, report: str) -> None:
        for notify in self.notifiers:
            try:
                notify(self.config, report)
            except Exception as exc:
                logger.error(
                    "Notifier %s failed: %s",
                    getattr(notify, "__name__", notify),
                    exc,
                    exc_info=True,
                )

    def run_once(self, now: datetime | None = None) -> str | None:
        """Run a single cycle.

        Returns the report text, or ``None`` if nothing was scraped and
        the cycle was skipped.
        """
        prices = self.scraper.fetch_prices()
        if not prices:
            logger.warning("No prices fetched, skipping this cycle")
            return None

        previous = self.snapshot_store.read_latest()
        self.snapshot_store.write_latest(prices)

        with PriceHistoryDB(self.db_path) as db:
            db.append_history(prices)

        report = build_report(
            prices,
            previous,
            time_format=self.config.format_time,
            now=now,
        )
        logger.debug("Report:\n%s", report)
        self._dispatch(report)

        logger.info(
            "Gold prices updated: %d instruments", len(prices),
        )
        return report

    def run_forever(self) -> None:
        """Sleep until each scheduled slot and run a cycle, indefinitely."""
        while True:
            now = datetime.now()
            next_run = next_run_time(now)
            logger.info(
                "Waiting until %s for the next run",
                next_run.strftime("%H:%M %d/%m/%Y"),
            )
            time.sleep(max((next_run - now).total_seconds(), 0.0))

            try:
                self.run_once()
            except Exception as exc:
                logger.error(
                    "Cycle failed: %s", exc, exc_info=True,
                )
