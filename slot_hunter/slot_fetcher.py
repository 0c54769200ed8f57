"""
Fetch open slots for one queue and date.

The slots endpoint rate-limits aggressively with HTTP 403, so every query is
wrapped in a bounded exponential backoff. A queue that stays unreachable is
reported as unavailable for this round rather than as an error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from slot_hunter.config import ApiEndpoints, HunterConstants
from slot_hunter.errors import RateLimited, TransientNetworkFailure
from slot_hunter.models import Slot

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(attempt: int, base: float = HunterConstants.RETRY_BASE_DELAY) -> float:
    """Seconds to wait before retry number ``attempt + 1`` (1s, 2s, 4s, ...)."""
    return base * 2**attempt


def short_queue_id(queue_id: str) -> str:
    return f"...{queue_id[-8:]}"


def parse_slots(body: Any, queue_id: str) -> list[Slot] | None:
    """
    Turn a slots response body into Slot objects.

    Returns:
        List of slots, or None if the body is not a list
    """
    if not isinstance(body, list):
        logger.warning(f"Response is not a list: {str(body)[:200]}")
        return None

    slots = []
    for record in body:
        if isinstance(record, dict) and record.get("id") is not None:
            slots.append(Slot.from_record(record, queue_id))
        else:
            logger.debug(f"Skipping malformed slot record: {record!r}")
    return slots


class SlotFetcher:
    """Queries queue slot listings with retry on 403 and network errors."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoints: ApiEndpoints,
        *,
        max_retries: int = HunterConstants.MAX_FETCH_RETRIES,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.endpoints = endpoints
        self.max_retries = max_retries
        self._sleep = sleep

    async def fetch(self, queue_id: str, date: str) -> list[Slot] | None:
        """
        Fetch the open slots of one queue for one date.

        Args:
            queue_id: Queue to query
            date: Target date as YYYY-MM-DD

        Returns:
            List of slots (possibly empty), or None if the queue is
            unavailable this round
        """
        for attempt in range(self.max_retries + 1):
            try:
                return await self._request_slots(queue_id, date)
            except TransientNetworkFailure as e:
                if attempt >= self.max_retries:
                    logger.error(
                        f"Giving up on queue {short_queue_id(queue_id)} after "
                        f"{self.max_retries} retries: {e}"
                    )
                    return None

                delay = backoff_delay(attempt)
                logger.warning(
                    f"{e}. Retry {attempt + 1}/{self.max_retries} in {delay:.0f}s"
                )
                await self._sleep(delay)

        return None

    async def _request_slots(self, queue_id: str, date: str) -> list[Slot] | None:
        """
        Issue a single slots query.

        Raises:
            RateLimited: On HTTP 403
            TransientNetworkFailure: On connection errors and timeouts
        """
        logger.info(f"Requesting slots for queue {short_queue_id(queue_id)} on {date}")

        try:
            response = await self.client.post(
                self.endpoints.slots_url(queue_id, date),
                json={},
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as e:
            raise TransientNetworkFailure(
                f"Network error for queue {short_queue_id(queue_id)}: {e!r}"
            ) from e

        if response.status_code == 403:
            raise RateLimited(f"HTTP 403 for queue {short_queue_id(queue_id)}")

        if not response.is_success:
            logger.error(
                f"HTTP {response.status_code} for queue {short_queue_id(queue_id)}: "
                f"{response.text[:200]}"
            )
            return None

        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                f"Error decoding slots for queue {short_queue_id(queue_id)}: {e}"
            )
            return None

        slots = parse_slots(body, queue_id)
        if slots:
            logger.info(
                f"Got {len(slots)} slots for queue {short_queue_id(queue_id)}, e.g. "
                + ", ".join(slot.describe() for slot in slots[:3])
            )
        return slots
