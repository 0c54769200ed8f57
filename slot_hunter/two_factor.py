"""
Second-factor sub-flow for a reservation the server refused without 2FA.

AWAITING_PROMPT -> AWAITING_CODE -> VERIFYING -> RESOLVED

After a verified code the reservation is submitted exactly once more. If the
server asks for 2FA again we give up on this slot instead of prompting in a
loop.
"""

from __future__ import annotations

import enum
import logging

import httpx

from slot_hunter.config import ApiEndpoints, HunterConstants
from slot_hunter.errors import ReservationNetworkError, TwoFactorAbandoned
from slot_hunter.host import HostCollaborator
from slot_hunter.models import (
    Failure,
    Profile,
    ReservationOutcome,
    Slot,
    TwoFactorRequired,
)
from slot_hunter.reservation import reserve

logger = logging.getLogger(__name__)


class TwoFactorState(enum.Enum):
    AWAITING_PROMPT = "awaiting_prompt"
    AWAITING_CODE = "awaiting_code"
    VERIFYING = "verifying"
    RESOLVED = "resolved"


async def verify_code(
    client: httpx.AsyncClient, endpoints: ApiEndpoints, code: str
) -> bool:
    """
    Submit a one-time code.

    Returns:
        True if the server reports success

    Raises:
        ReservationNetworkError: If the request fails at transport level
    """
    logger.info("Verifying 2FA code")

    try:
        response = await client.post(
            endpoints.two_fa_verify_url,
            json={"twoFACode": code},
            headers={"Content-Type": "application/json"},
        )
    except httpx.RequestError as e:
        raise ReservationNetworkError(f"2FA verification request failed: {e!r}") from e

    try:
        body = response.json()
    except ValueError:
        logger.error(f"2FA verification returned non-JSON body: {response.text[:200]}")
        return False

    if isinstance(body, dict) and body.get("success") is True:
        logger.info("2FA verification succeeded")
        return True

    logger.error(f"2FA verification failed: {body}")
    return False


class TwoFactorFlow:
    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoints: ApiEndpoints,
        host: HostCollaborator,
        prompt_timeout: float = HunterConstants.TWO_FA_PROMPT_TIMEOUT,
    ):
        self.client = client
        self.endpoints = endpoints
        self.host = host
        self.prompt_timeout = prompt_timeout
        self.state = TwoFactorState.AWAITING_PROMPT

    async def run(self, slot: Slot, profile: Profile) -> ReservationOutcome:
        """
        Drive the sub-flow to a final outcome for ``slot``.

        Raises:
            TwoFactorAbandoned: If no code was supplied
            ReservationNetworkError: On transport failure while verifying or
                re-reserving
        """
        self.state = TwoFactorState.AWAITING_PROMPT
        logger.info("Waiting for the SMS code form...")
        if not await self.host.await_external_signal(self.prompt_timeout):
            logger.warning("Timed out waiting for the SMS code form, continuing")

        self.state = TwoFactorState.AWAITING_CODE
        code = await self.host.request_code()
        if not code:
            self.state = TwoFactorState.RESOLVED
            raise TwoFactorAbandoned("No SMS code entered")

        self.state = TwoFactorState.VERIFYING
        try:
            verified = await verify_code(self.client, self.endpoints, code)
        finally:
            self.state = TwoFactorState.RESOLVED

        if not verified:
            return Failure(reason="2FA verification failed")

        outcome = await reserve(self.client, self.endpoints, slot, profile)
        if isinstance(outcome, TwoFactorRequired):
            logger.error("Server demanded 2FA again after a verified code")
            return Failure(reason=outcome.challenge)
        return outcome
