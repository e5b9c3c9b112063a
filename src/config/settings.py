# src/config/settings.py

"""Central configuration for the gold_watch service."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class ConfigError(Exception):
    """Raised when the notification config cannot be loaded."""


class Settings:
    """Central configuration for the gold_watch service."""

    # --- Source ---
    SOURCE_URL: str = "https://hoakimnguyen.com/tra-cuu-gia-vang/"
    PRICE_TABLE_SELECTOR: str = "table.table.table-bordered.table-hover"
    TRACKED_INSTRUMENT: str = "Vàng nhẫn khâu 9999"

    # --- Scraping ---
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    NOTIFY_TIMEOUT: int = 10            # Seconds for Telegram / Slack posts
    CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "vi-VN,vi;q=0.9,en-US;q=0.8,en;q=0.7",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Schedule (local wall-clock hours) ---
    SCHEDULE_HOURS: tuple[int, ...] = (3, 8)
    DEFAULT_TIME_FORMAT: str = "%H:%M %d/%m/%Y"

    # --- Notifications ---
    TELEGRAM_API: str = "https://api.telegram.org/bot{token}/sendMessage"

    # --- Logging ---
    CONSOLE_LOG_LEVEL: str = os.environ.get(
        "GOLD_WATCH_LOG_LEVEL", "INFO"
    ).upper()

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LATEST_PATH: Path = DATA_DIR / "latest.json"
    PRICE_DB_PATH: Path = DATA_DIR / "gold.db"
    LOGS_DIR: Path = BASE_DIR / "logs"
    CONFIG_PATH: Path = Path(
        os.environ.get("GOLD_WATCH_CONFIG", str(BASE_DIR / "config.json"))
    )


@dataclass(frozen=True)
class AppConfig:
    """Notification targets and report formatting for one process."""

    telegram_token: str = ""
    telegram_chat_id: str = ""
    slack_webhook: str = ""
    format_time: str = Settings.DEFAULT_TIME_FORMAT
    gpt_key: str = ""


# Environment variables that take precedence over config.json values
_ENV_OVERRIDES: dict[str, str] = {
    "telegram_token": "TELEGRAM_BOT_TOKEN",
    "telegram_chat_id": "TELEGRAM_CHAT_ID",
    "slack_webhook": "SLACK_WEBHOOK_URL",
    "format_time": "GOLD_WATCH_TIME_FORMAT",
}


def load_config(path: Path | None = None) -> AppConfig:
    """Read ``config.json`` and apply environment overrides.

    Raises:
        ConfigError: the file is missing, unreadable or not a JSON object.
    """
    config_path = path or Settings.CONFIG_PATH
    try:
        with open(config_path, encoding="utf-8") as f:
            raw: Any = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(
            f"Config file not found: {config_path}"
        ) from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(
            f"Could not read config file {config_path}: {exc}"
        ) from exc

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Config file {config_path} must contain a JSON object"
        )

    values: dict[str, str] = {
        key: str(raw.get(key) or "")
        for key in (
            "telegram_token",
            "telegram_chat_id",
            "slack_webhook",
            "format_time",
            "gpt_key",
        )
    }
    for key, env_name in _ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            values[key] = env_value

    if not values["format_time"]:
        values["format_time"] = Settings.DEFAULT_TIME_FORMAT

    return AppConfig(**values)
