# src/notifiers/slack.py

"""Slack incoming-webhook notification."""

import logging

from curl_cffi import requests as curl_requests

from src.config.settings import AppConfig, Settings

logger = logging.getLogger("gold_watch.notify.slack")


def send_slack(config: AppConfig, message: str) -> bool:
    """Post *message* to the configured Slack webhook."""
    if not config.slack_webhook:
        logger.debug("Slack: webhook not set, skipping")
        return False

    try:
        resp = curl_requests.post(
            config.slack_webhook,
            json={"text": message},
            timeout=Settings.NOTIFY_TIMEOUT,
        )
    except Exception as exc:
        logger.error("Slack request failed: %s", exc, exc_info=True)
        return False

    if resp.status_code != 200:
        logger.error(
            "Slack webhook error (status %d): %s",
            resp.status_code,
            resp.text[:200],
        )
        return False

    logger.info("Slack: report sent")
    return True
