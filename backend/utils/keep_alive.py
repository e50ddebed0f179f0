# backend/utils/keep_alive.py
"""
Standalone pinger for hosts that put idle services to sleep.

Run it next to the API (never from inside it):

    python -m utils.keep_alive

It calls KEEP_ALIVE_URL (the service's /ping) every KEEP_ALIVE_INTERVAL seconds.
"""
import logging
import time
from typing import Callable, Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)


def ping_once(client: httpx.Client, url: str) -> bool:
    try:
        response = client.get(url)
    except httpx.HTTPError as e:
        logger.warning("Keep-alive ping to %s failed: %s", url, e)
        return False
    if response.status_code != 200:
        logger.warning("Keep-alive ping to %s returned %s", url, response.status_code)
        return False
    logger.debug("Keep-alive ping ok")
    return True


def run(
    url: str,
    interval: int,
    client: Optional[httpx.Client] = None,
    sleep: Callable[[float], None] = time.sleep,
    max_pings: Optional[int] = None,
) -> int:
    """Ping until stopped (or max_pings reached). Returns the number of successful pings."""
    own_client = client is None
    client = client or httpx.Client(timeout=10.0)
    ok = sent = 0
    try:
        while max_pings is None or sent < max_pings:
            ok += ping_once(client, url)
            sent += 1
            if max_pings is None or sent < max_pings:
                sleep(interval)
    finally:
        if own_client:
            client.close()
    return ok


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    if not settings.KEEP_ALIVE_URL:
        logger.info("KEEP_ALIVE_URL not set, nothing to ping")
        return
    logger.info("Pinging %s every %ss", settings.KEEP_ALIVE_URL, settings.KEEP_ALIVE_INTERVAL)
    try:
        run(settings.KEEP_ALIVE_URL, settings.KEEP_ALIVE_INTERVAL)
    except KeyboardInterrupt:
        logger.info("Keep-alive stopped")


if __name__ == "__main__":
    main()
