# src/notifiers/telegram.py

"""Telegram push notification."""

import logging

from curl_cffi import requests as curl_requests

from src.config.settings import AppConfig, Settings

logger = logging.getLogger("gold_watch.notify.telegram")


def send_telegram(config: AppConfig, message: str) -> bool:
    """Send *message* via the Telegram Bot API.

    Skipped when the bot token or chat id is not configured.
    Returns ``True`` only when Telegram accepted the message.
    """
    if not config.telegram_token or not config.telegram_chat_id:
        logger.debug("Telegram: token or chat id not set, skipping")
        return False

    url = Settings.TELEGRAM_API.format(token=config.telegram_token)
    payload = {
        "chat_id": config.telegram_chat_id,
        "text": message,
        "parse_mode": "Markdown",
    }

    try:
        resp = curl_requests.post(
            url, data=payload, timeout=Settings.NOTIFY_TIMEOUT,
        )
    except Exception as exc:
        logger.error("Telegram request failed: %s", exc, exc_info=True)
        return False

    if resp.status_code != 200:
        logger.error(
            "Telegram API error (status %d): %s",
            resp.status_code,
            resp.text[:200],
        )
        return False

    logger.info("Telegram: report sent")
    return True
