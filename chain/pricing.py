from __future__ import annotations

import logging

import requests

from app.config import get_settings

logger = logging.getLogger(__name__)


def fetch_sei_usd_price() -> float:
    """
    SEI/USD from the configured price feed, or the configured fallback when the feed fails.
    """
    settings = get_settings()
    try:
        resp = requests.get(settings.price_feed_url, timeout=settings.http_timeout_s)
        resp.raise_for_status()
        price = float(resp.json()["sei-network"]["usd"])
    except (requests.RequestException, KeyError, TypeError, ValueError) as exc:
        logger.warning("sei price feed unavailable, using fallback: %s", exc)
        return float(settings.sei_usd_fallback)
    return price
