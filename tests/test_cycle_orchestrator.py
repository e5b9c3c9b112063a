# tests/test_cycle_orchestrator.py

"""Tests for the scheduled fetch/store/notify cycle."""

import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

from src.config.settings import AppConfig
from src.models.gold_price import GoldPrice
from src.services.cycle_orchestrator import GoldPriceCycle, next_run_time
from src.storage.price_history_db import PriceHistoryDB
from src.storage.snapshot_store import SnapshotStore

_TRACKED = "Vàng nhẫn khâu 9999"


def _snapshot(buy: int, sell: int, ts: datetime) -> list[GoldPrice]:
    return [
        GoldPrice(
            instrument=_TRACKED,
            buy=buy,
            sell=sell,
            converted="",
            updated_at=ts,
        ),
        GoldPrice(
            instrument="Vàng 24K",
            buy=8300,
            sell=8500,
            converted="",
            updated_at=ts,
        ),
    ]


class TestNextRunTime(unittest.TestCase):
    """Tests for the twice-daily schedule arithmetic."""

    def test_before_first_slot(self) -> None:
        """Early morning waits for 03:00 the same day."""
        now = datetime(2026, 10, 19, 1, 30)
        self.assertEqual(next_run_time(now), datetime(2026, 10, 19, 3, 0))

    def test_between_slots(self) -> None:
        """After 03:00 the next slot is 08:00."""
        now = datetime(2026, 10, 19, 5, 0)
        self.assertEqual(next_run_time(now), datetime(2026, 10, 19, 8, 0))

    def test_after_last_slot(self) -> None:
        """After 08:00 the next slot is 03:00 tomorrow."""
        now = datetime(2026, 10, 19, 9, 15)
        self.assertEqual(next_run_time(now), datetime(2026, 10, 20, 3, 0))

    def test_exactly_on_slot_moves_forward(self) -> None:
        """Being exactly at a slot schedules the following one."""
        now = datetime(2026, 10, 19, 3, 0)
        self.assertEqual(next_run_time(now), datetime(2026, 10, 19, 8, 0))

    def test_month_rollover(self) -> None:
        """The day after the last of the month is handled."""
        now = datetime(2026, 10, 31, 23, 0)
        self.assertEqual(next_run_time(now), datetime(2026, 11, 1, 3, 0))

    def test_custom_hours_unsorted(self) -> None:
        """Hours are sorted before use."""
        now = datetime(2026, 10, 19, 12, 0)
        self.assertEqual(
            next_run_time(now, hours=(18, 6)),
            datetime(2026, 10, 19, 18, 0),
        )


class TestGoldPriceCycle(unittest.TestCase):
    """Tests for a single cycle with a stubbed scraper."""

    def setUp(self) -> None:
        """Wire the cycle to temp storage and mock notifiers."""
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.store = SnapshotStore(self.tmp_dir / "latest.json")
        self.db_path = self.tmp_dir / "gold.db"
        self.scraper = MagicMock()
        self.telegram = MagicMock(return_value=True)
        self.slack = MagicMock(return_value=True)
        self.config = AppConfig(format_time="%H:%M %d/%m/%Y")
        self.cycle = GoldPriceCycle(
            self.config,
            scraper=self.scraper,
            snapshot_store=self.store,
            db_path=self.db_path,
            notifiers=[self.telegram, self.slack],
        )

    def test_empty_fetch_skips_cycle(self) -> None:
        """No prices means nothing is stored or sent."""
        self.scraper.fetch_prices.return_value = []

        self.assertIsNone(self.cycle.run_once())
        self.assertFalse((self.tmp_dir / "latest.json").exists())
        self.assertFalse(self.db_path.exists())
        self.telegram.assert_not_called()
        self.slack.assert_not_called()

    def test_first_run_without_history(self) -> None:
        """A missing latest.json does not stop the cycle."""
        self.scraper.fetch_prices.return_value = _snapshot(
            100, 102, datetime(2026, 10, 19, 3, 0),
        )

        report = self.cycle.run_once(now=datetime(2026, 10, 19, 3, 0))

        self.assertIsNotNone(report)
        assert report is not None
        self.assertIn("giá mua tăng 100.000 ₫", report)
        self.assertEqual(len(self.store.read_latest()), 2)

    def test_two_cycles_report_delta(self) -> None:
        """Second cycle compares against the first one's snapshot."""
        self.scraper.fetch_prices.return_value = _snapshot(
            100, 102, datetime(2026, 10, 19, 3, 0),
        )
        self.cycle.run_once()

        self.scraper.fetch_prices.return_value = _snapshot(
            105, 102, datetime(2026, 10, 19, 8, 0),
        )
        report = self.cycle.run_once(now=datetime(2026, 10, 19, 8, 0))

        assert report is not None
        lines = report.splitlines()
        self.assertEqual(lines[0], "Giá vàng hôm nay - 08:00 19/10/2026 💰")
        self.assertEqual(
            lines[2], "> Hôm nay giá mua tăng 5.000 ₫/chỉ so với trước đó",
        )
        self.assertEqual(
            lines[3], "> Hôm nay giá bán không đổi so với trước đó",
        )

    def test_latest_overwritten_and_history_appended(self) -> None:
        """latest.json holds one cycle; the DB holds both."""
        self.scraper.fetch_prices.return_value = _snapshot(
            100, 102, datetime(2026, 10, 19, 3, 0),
        )
        self.cycle.run_once()
        self.scraper.fetch_prices.return_value = _snapshot(
            105, 102, datetime(2026, 10, 19, 8, 0),
        )
        self.cycle.run_once()

        latest = self.store.read_latest()
        self.assertEqual(latest[0].buy, 105)
        with PriceHistoryDB(self.db_path) as db:
            history = db.get_price_history(_TRACKED)
        self.assertEqual([h.buy for h in history], [100, 105])

    def test_report_sent_to_every_notifier(self) -> None:
        """Both channels receive the same text and config."""
        self.scraper.fetch_prices.return_value = _snapshot(
            100, 102, datetime(2026, 10, 19, 3, 0),
        )
        report = self.cycle.run_once()

        self.telegram.assert_called_once_with(self.config, report)
        self.slack.assert_called_once_with(self.config, report)

    def test_failing_notifier_does_not_block_others(self) -> None:
        """An exception in one channel is logged, the next still runs."""
        self.telegram.side_effect = RuntimeError("telegram down")
        self.scraper.fetch_prices.return_value = _snapshot(
            100, 102, datetime(2026, 10, 19, 3, 0),
        )

        report = self.cycle.run_once()

        self.assertIsNotNone(report)
        self.slack.assert_called_once()

    @patch("src.services.cycle_orchestrator.send_slack")
    @patch("src.services.cycle_orchestrator.send_telegram")
    def test_default_notifiers(
        self, mock_telegram: MagicMock, mock_slack: MagicMock,
    ) -> None:
        """Without injection, Telegram then Slack are used."""
        cycle = GoldPriceCycle(
            self.config,
            scraper=self.scraper,
            snapshot_store=self.store,
            db_path=self.db_path,
        )
        self.assertEqual(cycle.notifiers, [mock_telegram, mock_slack])


class _StopLoop(Exception):
    """Raised from a patched sleep to break out of run_forever."""


class TestRunForever(unittest.TestCase):
    """Tests for the scheduler loop."""

    @patch("src.services.cycle_orchestrator.time.sleep")
    def test_loop_survives_cycle_errors(self, mock_sleep: MagicMock) -> None:
        """A crashing cycle is logged and the loop waits again."""
        mock_sleep.side_effect = [None, None, _StopLoop()]
        cycle = GoldPriceCycle(
            AppConfig(),
            scraper=MagicMock(),
            snapshot_store=MagicMock(),
            notifiers=[],
        )
        cycle.run_once = MagicMock(  # type: ignore[method-assign]
            side_effect=[RuntimeError("boom"), None],
        )

        with self.assertRaises(_StopLoop):
            cycle.run_forever()

        self.assertEqual(cycle.run_once.call_count, 2)
        self.assertEqual(mock_sleep.call_count, 3)

    @patch("src.services.cycle_orchestrator.time.sleep")
    def test_sleeps_until_next_slot(self, mock_sleep: MagicMock) -> None:
        """The wait is the non-negative gap to the next slot."""
        mock_sleep.side_effect = _StopLoop()
        cycle = GoldPriceCycle(
            AppConfig(),
            scraper=MagicMock(),
            snapshot_store=MagicMock(),
            notifiers=[],
        )

        with self.assertRaises(_StopLoop):
            cycle.run_forever()

        seconds = mock_sleep.call_args[0][0]
        self.assertGreaterEqual(seconds, 0)
        self.assertLessEqual(seconds, 24 * 3600)


if __name__ == "__main__":
    unittest.main()
