# src/models/gold_price.py

"""Gold price record shared by the parser, stores and formatter."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class GoldPrice:
    """One row of the pricing table at the time it was scraped.

    ``buy`` and ``sell`` are in thousands of VND, as printed on the
    source page; multiply by 1000 for the full amount.
    """

    instrument: str
    buy: int
    sell: int
    converted: str
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the ``latest.json`` entry layout."""
        return {
            "type": self.instrument,
            "buy": self.buy,
            "sell": self.sell,
            "converted": self.converted,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GoldPrice":
        """Build a record from a ``latest.json`` entry.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on
        malformed entries.
        """
        return cls(
            instrument=str(data["type"]),
            buy=int(data["buy"]),
            sell=int(data["sell"]),
            converted=str(data.get("converted", "")),
            updated_at=datetime.fromisoformat(str(data["updated_at"])),
        )
