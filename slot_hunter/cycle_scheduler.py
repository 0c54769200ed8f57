"""
The hunting loop.

Every cycle polls all queues one after another, pools whatever slots came
back and tries to reserve one of them picked at random. Picking at random
rather than the earliest slot keeps us from racing every other hunter for
the same first slot.
"""

from __future__ import annotations

import asyncio
import logging
import random

import httpx

from slot_hunter.config import ApiEndpoints, HunterConstants
from slot_hunter.errors import ReservationNetworkError, TwoFactorAbandoned
from slot_hunter.host import HostCollaborator
from slot_hunter.models import (
    CycleState,
    Failure,
    HuntResult,
    Profile,
    ReservationOutcome,
    Session,
    Slot,
    Success,
    TwoFactorRequired,
)
from slot_hunter.reservation import reserve
from slot_hunter.slot_fetcher import Sleep, SlotFetcher, short_queue_id
from slot_hunter.two_factor import TwoFactorFlow

logger = logging.getLogger(__name__)


class CycleScheduler:
    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoints: ApiEndpoints,
        host: HostCollaborator,
        queue_ids: list[str],
        *,
        max_cycles: int = 60,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.client = client
        self.endpoints = endpoints
        self.host = host
        self.queue_ids = list(queue_ids)
        self.max_cycles = max_cycles
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.fetcher = SlotFetcher(client, endpoints, sleep=sleep)

    async def collect_candidates(self, date: str) -> list[Slot]:
        """Query every queue in configured order and pool the results."""
        pool: list[Slot] = []

        for queue_id in self.queue_ids:
            slots = await self.fetcher.fetch(queue_id, date)
            if slots:
                pool.extend(slots)
                logger.info(f"Found {len(slots)} slots in queue {short_queue_id(queue_id)}")

            # Fixed pacing after every queue request, successful or not
            await self._sleep(HunterConstants.QUEUE_PACING_DELAY)

        return pool

    def pick_slot(self, pool: list[Slot]) -> Slot:
        return self._rng.choice(pool)

    async def attempt_reservation(self, slot: Slot, profile: Profile) -> ReservationOutcome:
        """Reserve ``slot``, going through 2FA if the server asks for it."""
        outcome = await reserve(self.client, self.endpoints, slot, profile)

        if isinstance(outcome, TwoFactorRequired):
            flow = TwoFactorFlow(self.client, self.endpoints, self.host)
            outcome = await flow.run(slot, profile)

        return outcome

    async def run(self, date: str, session: Session) -> HuntResult:
        """
        Hunt until a slot is booked or the cycle budget runs out.

        Args:
            date: Target date as YYYY-MM-DD
            session: Validated session carrying a complete profile

        Returns:
            HuntResult; ``succeeded`` is False after exhaustion
        """
        profile = session.profile
        if session.token_expiry is not None:
            logger.info(f"Token valid until {session.token_expiry.isoformat()}")
        state = CycleState(max_cycles=self.max_cycles)
        result = HuntResult(state=state)

        for cycle in range(1, self.max_cycles + 1):
            state.cycle_index = cycle
            is_last = cycle == self.max_cycles
            logger.info(f"🔁 Cycle {cycle}/{self.max_cycles}")

            pool = await self.collect_candidates(date)

            if not pool:
                logger.warning(f"No slots available on {date} in cycle {cycle}")
                await self._sleep(HunterConstants.CYCLE_DELAY)
                continue

            slot = self.pick_slot(pool)
            logger.info(
                f"🎯 Picked slot {slot.describe()} in queue "
                f"{short_queue_id(slot.queue_id)} out of {len(pool)}"
            )

            try:
                outcome = await self.attempt_reservation(slot, profile)
            except (ReservationNetworkError, TwoFactorAbandoned) as e:
                outcome = Failure(reason=str(e))

            if isinstance(outcome, Success):
                logger.info(f"🎉 Booked {slot.describe()} in cycle {cycle}")
                state.succeeded = True
                state.done = True
                result.slot = slot
                result.confirmation = outcome.confirmation
                return result

            logger.error(f"Cycle {cycle} failed: {outcome.reason}")
            if not is_last:
                logger.info("Waiting before the next cycle...")
                await self._sleep(HunterConstants.CYCLE_DELAY)

        state.done = True
        logger.error(f"🔚 No slot booked after {self.max_cycles} cycles")
        return result
