"""Single reservation attempt against the queue reserve endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from slot_hunter.config import ApiEndpoints
from slot_hunter.errors import ReservationNetworkError
from slot_hunter.models import (
    Failure,
    Profile,
    ReservationOutcome,
    Slot,
    Success,
    TwoFactorRequired,
)
from slot_hunter.slot_fetcher import short_queue_id

logger = logging.getLogger(__name__)

TWO_FACTOR_MARKER = "2fa"


def create_reservation_payload(slot: Slot, profile: Profile) -> dict[str, Any]:
    return {
        "queueId": slot.queue_id,
        "slotId": slot.id,
        **profile.as_payload(),
    }


def requires_two_factor(body: Any) -> bool:
    """True if a failure body asks for a second factor."""
    if not isinstance(body, dict):
        return False
    message = body.get("message")
    return isinstance(message, str) and TWO_FACTOR_MARKER in message.lower()


def _read_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:200]


async def reserve(
    client: httpx.AsyncClient,
    endpoints: ApiEndpoints,
    slot: Slot,
    profile: Profile,
) -> ReservationOutcome:
    """
    Submit a reservation for one slot.

    Args:
        client: Authenticated HTTP client
        endpoints: API endpoint builder
        slot: Slot to book
        profile: Applicant identity

    Returns:
        Success, TwoFactorRequired or Failure

    Raises:
        ReservationNetworkError: If the request did not reach the server or
            the response was lost. Not retried here.
    """
    logger.info(f"Reserving slot {slot.id} in queue {short_queue_id(slot.queue_id)}")

    try:
        response = await client.post(
            endpoints.reserve_url(slot.queue_id),
            json=create_reservation_payload(slot, profile),
            headers={"Content-Type": "application/json"},
        )
    except httpx.RequestError as e:
        logger.error(f"Network error while reserving: {e!r}")
        raise ReservationNetworkError(f"Reservation request failed: {e!r}") from e

    body = _read_body(response)

    if response.is_success:
        logger.info(f"Reservation accepted: {body}")
        return Success(confirmation=body)

    if requires_two_factor(body):
        logger.info("Reservation requires 2FA verification")
        return TwoFactorRequired(challenge=body)

    logger.error(f"Reservation rejected (HTTP {response.status_code}): {body}")
    return Failure(reason=body)
