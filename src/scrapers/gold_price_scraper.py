# src/scrapers/gold_price_scraper.py

"""Scraper for the hoakimnguyen.com gold price table."""

import logging
import re
from datetime import datetime

from bs4 import BeautifulSoup
from bs4.element import Tag
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.gold_price import GoldPrice

logger = logging.getLogger("gold_watch.scraper")

_INT_RE = re.compile(r"[+-]?[0-9]+")


def convert_to_int(text: str) -> int:
    """Parse a price cell like ``'8,450'`` into ``8450``.

    Raises ``ValueError`` if the cleaned text is not a non-negative
    base-10 integer.
    """
    cleaned = text.strip().replace(",", "")
    if not _INT_RE.fullmatch(cleaned):
        raise ValueError(f"not an integer: {text!r}")
    value = int(cleaned)
    if value < 0:
        raise ValueError(f"negative price: {text!r}")
    return value


def _find_rows(soup: BeautifulSoup) -> list[Tag]:
    """Rows of the styled pricing table, or of every table if absent."""
    rows: list[Tag] = soup.select(
        f"{Settings.PRICE_TABLE_SELECTOR} tr"
    )
    if rows:
        return rows
    logger.debug(
        "Pricing table '%s' not found, scanning all tables",
        Settings.PRICE_TABLE_SELECTOR,
    )
    return soup.select("table tr")


def parse_price_table(
    html: str,
    observed_at: datetime | None = None,
) -> list[GoldPrice]:
    """Extract gold price records from the page markup.

    Header rows (any ``th``) and rows with fewer than three ``td``
    cells are skipped. Rows whose buy or sell cell is not an integer
    are dropped with a warning.
    """
    now = observed_at or datetime.now().astimezone()
    soup = BeautifulSoup(html, "lxml")
    prices: list[GoldPrice] = []

    for row in _find_rows(soup):
        if row.find("th") is not None:
            continue
        cells = [
            td.get_text().strip() for td in row.find_all("td")
        ]
        if len(cells) < 3:
            continue

        try:
            buy = convert_to_int(cells[1])
            sell = convert_to_int(cells[2])
        except ValueError as exc:
            logger.warning(
                "Dropping row '%s': bad price (%s)", cells[0], exc,
            )
            continue

        prices.append(GoldPrice(
            instrument=cells[0],
            buy=buy,
            sell=sell,
            converted=cells[3] if len(cells) > 3 else "",
            updated_at=now,
        ))

    logger.debug("Parsed %d price rows", len(prices))
    return prices


class GoldPriceScraper:
    """Fetches the pricing page and parses it into records.

    One GET per call; failures are not retried.
    """

    def __init__(self, url: str = Settings.SOURCE_URL) -> None:
        self.url = url
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def _is_challenge_page(self, text: str) -> bool:
        """Detect a Cloudflare interstitial served with HTTP 200."""
        lower = text.lower()
        for marker in self.settings.CHALLENGE_MARKERS:
            if marker in lower:
                logger.warning(
                    "Cloudflare challenge detected (marker: '%s')",
                    marker,
                )
                return True
        return False

    def fetch_html(self) -> str | None:
        """GET the pricing page, returning its body or ``None``."""
        try:
            resp = self.session.get(
                self.url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            logger.warning(
                "Request to %s failed: %s", self.url, exc,
                exc_info=True,
            )
            return None

        if resp.status_code != 200:
            logger.warning(
                "HTTP %d from %s", resp.status_code, self.url,
            )
            return None
        if self._is_challenge_page(resp.text):
            return None
        return resp.text

    def fetch_prices(self) -> list[GoldPrice]:
        """Fetch and parse the page; ``[]`` means skip this cycle."""
        html = self.fetch_html()
        if html is None:
            return []
        prices = parse_price_table(html)
        if not prices:
            logger.warning("No price rows found at %s", self.url)
        return prices
