# src/storage/snapshot_store.py

"""Reads and overwrites the latest price snapshot on disk."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, cast

from src.config.settings import Settings
from src.models.gold_price import GoldPrice

logger = logging.getLogger("gold_watch.storage")


class SnapshotStore:
    """JSON file holding the prices scraped by the most recent cycle."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.LATEST_PATH
        logger.debug("SnapshotStore initialised — path=%s", self.path)

    def read_latest(self) -> list[GoldPrice]:
        """Load the previous snapshot.

        A missing or unreadable file yields an empty snapshot so the
        first cycle after install still runs.
        """
        if not self.path.exists():
            logger.info(
                "No previous snapshot at %s, starting empty", self.path,
            )
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(
                "Failed to read %s: %s", self.path, exc,
            )
            return []

        if not isinstance(data, list):
            logger.warning(
                "Ignoring %s: expected a JSON array", self.path,
            )
            return []

        items: list[object] = cast(list[object], data)
        prices: list[GoldPrice] = []
        for entry in items:
            if not isinstance(entry, dict):
                continue
            try:
                prices.append(
                    GoldPrice.from_dict(cast(dict[str, Any], entry))
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(
                    "Skipping malformed snapshot entry %r: %s",
                    entry,
                    exc,
                )
        return prices

    def write_latest(self, prices: list[GoldPrice]) -> Path:
        """Replace the snapshot file with *prices*.

        The JSON is written to a sibling temp file first and moved over
        the target, so readers never see a half-written file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = [p.to_dict() for p in prices]

        fd, tmp_name = tempfile.mkstemp(
            prefix=".latest_", suffix=".json", dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(
            "Saved %d prices to %s", len(prices), self.path,
        )
        return self.path
