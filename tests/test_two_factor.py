"""Tests for the 2FA sub-flow."""

import httpx
import pytest

from conftest import FakeHost, json_response
from slot_hunter.errors import ReservationNetworkError, TwoFactorAbandoned
from slot_hunter.models import Failure, Success
from slot_hunter.two_factor import TwoFactorFlow, TwoFactorState, verify_code

TWO_FA_DEMAND = json_response(400, {"success": False, "message": "2FA required"})


class TestVerifyCode:
    @pytest.mark.asyncio
    async def test_sends_code(self, api, client, endpoints):
        assert await verify_code(client, endpoints, "123456") is True

        request = api.calls_to("/auth/twoFA/verify")[0]
        assert api.body_of(request) == {"twoFACode": "123456"}

    @pytest.mark.asyncio
    async def test_rejected_code(self, api, client, endpoints):
        api.verify = [json_response(400, {"success": False, "message": "Invalid code"})]
        assert await verify_code(client, endpoints, "000000") is False

    @pytest.mark.asyncio
    async def test_network_error(self, api, client, endpoints):
        api.verify = [httpx.ConnectTimeout("timed out")]
        with pytest.raises(ReservationNetworkError):
            await verify_code(client, endpoints, "123456")

    @pytest.mark.asyncio
    async def test_undecodable_verify_body_is_rejection(self, api, client, endpoints):
        api.verify = [httpx.Response(200, content=b"\xff\xfe\xfa")]
        assert await verify_code(client, endpoints, "123456") is False


class TestTwoFactorFlow:
    @pytest.mark.asyncio
    async def test_verified_code_rebooks_same_slot(self, api, client, endpoints, slot, profile):
        host = FakeHost(codes=["123456"])
        flow = TwoFactorFlow(client, endpoints, host)

        outcome = await flow.run(slot, profile)

        assert isinstance(outcome, Success)
        assert flow.state is TwoFactorState.RESOLVED
        assert host.signal_timeouts == [10.0]
        assert len(api.reserve_calls) == 1
        assert api.body_of(api.reserve_calls[0])["slotId"] == slot.id

    @pytest.mark.asyncio
    async def test_prompt_timeout_still_asks_for_code(self, api, client, endpoints, slot, profile):
        host = FakeHost(codes=["123456"], signal=False)
        outcome = await TwoFactorFlow(client, endpoints, host).run(slot, profile)

        assert isinstance(outcome, Success)
        assert len(api.calls_to("/auth/twoFA/verify")) == 1

    @pytest.mark.asyncio
    async def test_missing_code_abandons(self, api, client, endpoints, slot, profile):
        host = FakeHost(codes=[])

        with pytest.raises(TwoFactorAbandoned):
            await TwoFactorFlow(client, endpoints, host).run(slot, profile)

        assert api.requests == []

    @pytest.mark.asyncio
    async def test_failed_verification_does_not_rebook(self, api, client, endpoints, slot, profile):
        api.verify = [json_response(200, {"success": False})]
        host = FakeHost(codes=["111111"])

        outcome = await TwoFactorFlow(client, endpoints, host).run(slot, profile)

        assert isinstance(outcome, Failure)
        assert api.reserve_calls == []

    @pytest.mark.asyncio
    async def test_second_demand_is_failure_not_loop(self, api, client, endpoints, slot, profile):
        api.reserve = [TWO_FA_DEMAND]
        host = FakeHost(codes=["123456", "654321"])

        outcome = await TwoFactorFlow(client, endpoints, host).run(slot, profile)

        assert isinstance(outcome, Failure)
        assert len(api.reserve_calls) == 1
        assert len(api.calls_to("/auth/twoFA/verify")) == 1
        assert host.codes == ["654321"]
