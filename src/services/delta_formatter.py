# src/services/delta_formatter.py

"""Builds the price report sent to chat channels.

The report compares the tracked instrument in the fresh snapshot with
the same instrument in the previous one::

    Giá vàng hôm nay - 10:00 19/10/2026 💰
    • Vàng nhẫn khâu 9999: Mua 8.450.000 ₫/chỉ - Bán 8.550.000 ₫/chỉ
    > Hôm nay giá mua tăng 50.000 ₫/chỉ so với trước đó
    > Hôm nay giá bán không đổi so với trước đó

A tracked instrument missing from either snapshot counts as zero, so a
first run after losing ``latest.json`` reports the full price as an
increase.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.config.settings import Settings
from src.models.gold_price import GoldPrice

logger = logging.getLogger("gold_watch.report")

TRACKED_INSTRUMENT: str = Settings.TRACKED_INSTRUMENT
CURRENCY_SYMBOL = "₫"
_GROUP_SEPARATOR = "."


class Direction(str, Enum):
    """Movement of a price between two snapshots."""

    INCREASED = "increased"
    DECREASED = "decreased"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class PriceChange:
    """Signed difference between a current and a previous price."""

    delta: int

    @property
    def direction(self) -> Direction:
        if self.delta > 0:
            return Direction.INCREASED
        if self.delta < 0:
            return Direction.DECREASED
        return Direction.UNCHANGED


def format_vnd(value: int) -> str:
    """Render a stored price as full dong, e.g. ``5000`` -> ``'5.000.000 ₫'``.

    The sign is dropped; callers word decreases explicitly.
    """
    digits = str(abs(value * 1000))
    groups: list[str] = []
    while len(digits) > 3:
        groups.append(digits[-3:])
        digits = digits[:-3]
    groups.append(digits)
    return f"{_GROUP_SEPARATOR.join(reversed(groups))} {CURRENCY_SYMBOL}"


def find_instrument(
    prices: list[GoldPrice], name: str = TRACKED_INSTRUMENT,
) -> GoldPrice | None:
    """Return the record named exactly *name* (last one wins)."""
    found: GoldPrice | None = None
    for p in prices:
        if p.instrument == name:
            found = p
    return found


def compare_prices(current: int, previous: int) -> PriceChange:
    """Difference ``current - previous``."""
    return PriceChange(delta=current - previous)


@dataclass
class ReportBuilder:
    """Collects report lines and renders them once."""

    lines: list[str] = field(default_factory=list)

    def add(self, line: str) -> "ReportBuilder":
        self.lines.append(line)
        return self

    def render(self) -> str:
        """Join lines with newlines, keeping a trailing newline."""
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"


def _movement_line(label: str, change: PriceChange) -> str:
    if change.direction is Direction.INCREASED:
        return (
            f"> Hôm nay giá {label} tăng {format_vnd(change.delta)}/chỉ "
            "so với trước đó"
        )
    if change.direction is Direction.DECREASED:
        return (
            f"> Hôm nay giá {label} giảm {format_vnd(change.delta)}/chỉ "
            "so với trước đó"
        )
    return f"> Hôm nay giá {label} không đổi so với trước đó"


def build_report(
    current: list[GoldPrice],
    previous: list[GoldPrice],
    time_format: str = Settings.DEFAULT_TIME_FORMAT,
    now: datetime | None = None,
    instrument: str = TRACKED_INSTRUMENT,
) -> str:
    """Render the daily report for *instrument*."""
    timestamp = (now or datetime.now()).strftime(time_format)

    tracked = find_instrument(current, instrument)
    if tracked is None:
        logger.warning(
            "'%s' missing from current snapshot, reporting zero",
            instrument,
        )
    last = find_instrument(previous, instrument)
    if last is None:
        logger.warning(
            "'%s' missing from previous snapshot, using zero baseline",
            instrument,
        )

    name = tracked.instrument if tracked else ""
    buy = tracked.buy if tracked else 0
    sell = tracked.sell if tracked else 0
    last_buy = last.buy if last else 0
    last_sell = last.sell if last else 0

    builder = ReportBuilder()
    builder.add(f"Giá vàng hôm nay - {timestamp} 💰")
    builder.add(
        f"• {name}: Mua {format_vnd(buy)}/chỉ - Bán {format_vnd(sell)}/chỉ"
    )
    builder.add(_movement_line("mua", compare_prices(buy, last_buy)))
    builder.add(_movement_line("bán", compare_prices(sell, last_sell)))
    return builder.render()
