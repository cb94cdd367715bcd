"""
Client for the public order status endpoint.

While an order is payment_pending the checkout page polls
GET /public/orders/{track_code}/status every few seconds and moves to the
tracking page once the status changes. This module is that loop for Python
clients (kiosks, integration checks).
"""
import asyncio

import httpx

from core.config import settings
from core.constants import PAYMENT_PENDING
from utils.links import tracking_path
from utils.logger import get_logger

logger = get_logger(__name__)


async def fetch_status(client: httpx.AsyncClient, track_code: str) -> str | None:
    """Current status, or None when the poll failed for any transient reason."""
    try:
        response = await client.get(f"/public/orders/{track_code}/status")
    except httpx.HTTPError as e:
        logger.debug(f"Status poll failed: {e}", extra={"track_code": track_code})
        return None

    if response.status_code != 200:
        logger.debug(
            "Status poll returned non-success",
            extra={"track_code": track_code, "status_code": response.status_code}
        )
        return None

    try:
        return response.json().get("status")
    except ValueError:
        logger.debug("Status poll returned a non-JSON body", extra={"track_code": track_code})
        return None


async def poll_order_status(
    client: httpx.AsyncClient,
    track_code: str,
    interval: float | None = None,
    max_attempts: int | None = None,
    waiting_status: str = PAYMENT_PENDING,
) -> str:
    """
    Poll until the order leaves waiting_status and return the new status.

    Every poll reads the current status and compares it locally; failed polls
    are skipped. Raises TimeoutError after max_attempts polls (if given).
    """
    if interval is None:
        interval = settings.STATUS_POLL_INTERVAL_SECONDS

    attempts = 0
    while True:
        attempts += 1
        current = await fetch_status(client, track_code)
        if current is not None and current != waiting_status:
            logger.info("Order status changed", extra={"track_code": track_code, "order_status": current})
            return current

        if max_attempts is not None and attempts >= max_attempts:
            raise TimeoutError(f"Order {track_code} still {waiting_status} after {attempts} polls")

        await asyncio.sleep(interval)


async def wait_for_payment(client: httpx.AsyncClient, restaurant_slug: str, track_code: str, **kwargs) -> str:
    """Poll until payment resolves and return the tracking page path to open."""
    await poll_order_status(client, track_code, **kwargs)
    return tracking_path(restaurant_slug, track_code)
