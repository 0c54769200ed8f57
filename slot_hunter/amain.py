"""
Async entry point for one hunting session.

Checks the preconditions (token, applicant profile) before touching the
slot endpoints, runs the cycle scheduler and reports exactly one terminal
notification to the host.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import date

import httpx

from slot_hunter.auth_token import ensure_usable_token
from slot_hunter.client import authenticated_client
from slot_hunter.config import ApiEndpoints, HunterSettings
from slot_hunter.cycle_scheduler import CycleScheduler
from slot_hunter.errors import PreconditionFailure
from slot_hunter.host import HostCollaborator
from slot_hunter.models import HuntResult, Session
from slot_hunter.profile import resolve_profile
from slot_hunter.slot_fetcher import Sleep

logger = logging.getLogger(__name__)


def parse_target_date(value: str) -> str:
    """
    Validate a YYYY-MM-DD date string.

    Raises:
        ValueError: If the value is not a valid date in that format
    """
    return date.fromisoformat(value.strip()).isoformat()


async def hunt(
    target_date: str,
    settings: HunterSettings,
    host: HostCollaborator,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Sleep = asyncio.sleep,
    rng: random.Random | None = None,
) -> HuntResult | None:
    """
    Run one hunting session from precondition checks to terminal outcome.

    Args:
        target_date: Date to hunt for, YYYY-MM-DD
        settings: Token, case URL, queues and limits
        host: Host collaborator for prompts and notifications
        transport: Optional HTTP transport override
        sleep: Coroutine used for every pacing and backoff wait
        rng: Random source for slot selection

    Returns:
        HuntResult, or None if a precondition failed
    """
    logger.info(f"🚀 Starting slot hunt for {target_date}")

    try:
        token_check = ensure_usable_token(settings.access_token)
    except PreconditionFailure as e:
        logger.error(str(e))
        host.notify(False, f"{e}. Please log in again.")
        return None

    endpoints = ApiEndpoints(base_url=settings.api_base_url)

    async with authenticated_client(settings.access_token, transport=transport) as client:
        try:
            profile = await resolve_profile(client, endpoints, settings.case_url)
        except PreconditionFailure as e:
            logger.error(str(e))
            host.notify(False, str(e))
            return None

        session = Session(
            token=settings.access_token,
            token_expiry=token_check.expires_at,
            profile=profile,
        )

        scheduler = CycleScheduler(
            client,
            endpoints,
            host,
            settings.queue_ids,
            max_cycles=settings.max_cycles,
            sleep=sleep,
            rng=rng,
        )
        result = await scheduler.run(target_date, session)

    if result.succeeded:
        host.notify(True, f"Booked slot: {result.slot.date} {result.slot.time}")
    else:
        host.notify(False, f"No slot booked after {result.state.cycle_index} cycles")

    logger.info("Slot hunt finished")
    return result


async def main_async(
    target_date: str,
    settings: HunterSettings | None = None,
    host: HostCollaborator | None = None,
) -> bool:
    """Run a hunt with settings from the environment and a terminal host."""
    if settings is None:
        settings = HunterSettings()
    if host is None:
        from slot_hunter.host import ConsoleHost

        host = ConsoleHost()

    result = await hunt(target_date, settings, host)
    return bool(result and result.succeeded)
