# src/storage/price_history_db.py

"""SQLite-backed price history store for long-term price tracking."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from types import TracebackType

from src.config.settings import Settings
from src.models.gold_price import GoldPrice

logger = logging.getLogger("gold_watch.price_history")

# buy / sell hold integer strings.
_SCHEMA = """\
CREATE TABLE IF NOT EXISTS gold_prices (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    type       TEXT,
    buy        TEXT,
    sell       TEXT,
    converted  TEXT,
    updated_at DATETIME
);

CREATE INDEX IF NOT EXISTS idx_gold_prices_type
    ON gold_prices(type);
"""


def _row_to_price(row: sqlite3.Row) -> GoldPrice:
    """Convert a ``gold_prices`` row back into a record."""
    return GoldPrice(
        instrument=row["type"] or "",
        buy=int(row["buy"]),
        sell=int(row["sell"]),
        converted=row["converted"] or "",
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class PriceHistoryDB:
    """Append-only history of every scraped price row.

    Use as a context manager so the connection is released at the end
    of a cycle even when a step fails.
    """

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.PRICE_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path))
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        logger.debug(
            "PriceHistoryDB opened at %s", path,
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> "PriceHistoryDB":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ── Recording ────────────────────────────────────────

    def append_history(self, prices: list[GoldPrice]) -> int:
        """Insert one row per record.

        A failed insert is logged and the remaining rows are still
        written. Returns the number of rows inserted.
        """
        count = 0
        for p in prices:
            try:
                self._conn.execute(
                    "INSERT INTO gold_prices "
                    "(type, buy, sell, converted, updated_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (
                        p.instrument,
                        str(p.buy),
                        str(p.sell),
                        p.converted,
                        p.updated_at.isoformat(),
                    ),
                )
                count += 1
            except sqlite3.Error as exc:
                logger.error(
                    "Insert failed for '%s': %s", p.instrument, exc,
                )

        self._conn.commit()
        if count:
            logger.info(
                "Recorded %d history rows", count,
            )
        return count

    # ── Querying ─────────────────────────────────────────

    def get_price_history(
        self, instrument: str, limit: int | None = None,
    ) -> list[GoldPrice]:
        """Return stored rows for one instrument in insertion order.

        With *limit*, only the most recent *limit* rows are returned.
        """
        sql = (
            "SELECT type, buy, sell, converted, updated_at "
            "FROM gold_prices WHERE type = ? "
            "ORDER BY id DESC"
        )
        params: tuple[object, ...] = (instrument,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (instrument, limit)
        rows = self._conn.execute(sql, params).fetchall()
        return [_row_to_price(r) for r in reversed(rows)]

    def get_recent(self, limit: int = 20) -> list[GoldPrice]:
        """Return the last *limit* inserted rows, newest first."""
        rows = self._conn.execute(
            "SELECT type, buy, sell, converted, updated_at "
            "FROM gold_prices "
            "ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [_row_to_price(r) for r in rows]
