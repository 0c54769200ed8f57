"""Shared fixtures: a stub API behind httpx.MockTransport, a fake host and a recording sleep."""

import json
import time
from datetime import date

import httpx
import jwt
import pytest
import pytest_asyncio

from slot_hunter.config import ApiEndpoints
from slot_hunter.models import Profile, Session, Slot

BASE_URL = "https://inpol.mazowieckie.pl/api/"
QUEUE_A = "c93674d6-fb24-4a85-9dac-61897dc8f060"
QUEUE_B = "f0992a78-802d-40e7-9bd0-c0d8d46a71fd"
QUEUE_C = "3ab99932-8e53-4dff-9abf-45b8c6286a99"
CASE_ID = "0a1b2c3d-4e5f-6789-abcd-ef0123456789"


def make_token(exp_offset: int | None = 3600) -> str:
    payload = {"sub": "applicant"}
    if exp_offset is not None:
        payload["exp"] = int(time.time()) + exp_offset
    return jwt.encode(payload, "test-signing-key-not-used-by-the-api-0123456789", algorithm="HS256")


def json_response(status_code: int, body) -> httpx.Response:
    return httpx.Response(status_code, json=body)


def fresh(response: httpx.Response) -> httpx.Response:
    """Copy a canned response so each request gets an unread one."""
    return httpx.Response(
        response.status_code, headers=response.headers, content=response.content
    )


class StubApi:
    """
    Routes requests by endpoint and records every call.

    ``slots`` maps queue id to a list of responses served in order; the last
    one repeats. Values may be httpx.Response objects or exceptions to raise.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.case_record: httpx.Response = json_response(
            200,
            {
                "person": {
                    "firstName": "Olena",
                    "surname": "Kovalenko",
                    "dateOfBirth": "1990-04-12T00:00:00",
                }
            },
        )
        self.slots: dict[str, list] = {}
        self.reserve: list = [json_response(200, {"success": True, "id": "R-1"})]
        self.verify: list = [json_response(200, {"success": True})]

    def _serve(self, responses: list):
        item = responses.pop(0) if len(responses) > 1 else responses[0]
        if isinstance(item, Exception):
            raise item
        return fresh(item)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.startswith("/api/proceedings/"):
            return fresh(self.case_record)
        if path.endswith("/slots"):
            queue_id = path.split("/")[-3]
            return self._serve(self.slots.get(queue_id, [json_response(200, [])]))
        if path.endswith("/reserve"):
            return self._serve(self.reserve)
        if path.endswith("/auth/twoFA/verify"):
            return self._serve(self.verify)
        return httpx.Response(404)

    def calls_to(self, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    @property
    def reserve_calls(self) -> list[httpx.Request]:
        return self.calls_to("/reserve")

    @property
    def slot_calls(self) -> list[httpx.Request]:
        return self.calls_to("/slots")

    @staticmethod
    def body_of(request: httpx.Request):
        return json.loads(request.content)


class FakeHost:
    """Host collaborator that answers from canned values."""

    def __init__(self, codes=None, signal: bool = True):
        self.codes = list(codes or [])
        self.signal = signal
        self.signal_timeouts: list[float] = []
        self.notifications: list[tuple[bool, str]] = []

    async def await_external_signal(self, timeout: float) -> bool:
        self.signal_timeouts.append(timeout)
        return self.signal

    async def request_code(self):
        return self.codes.pop(0) if self.codes else None

    def notify(self, success: bool, message: str) -> None:
        self.notifications.append((success, message))


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def slot_records(*ids):
    return [{"id": slot_id, "date": "2024-06-01", "time": f"09:{i:02d}"} for i, slot_id in enumerate(ids)]


@pytest.fixture
def api():
    return StubApi()


@pytest_asyncio.fixture
async def client(api):
    async with httpx.AsyncClient(transport=httpx.MockTransport(api.handler)) as client:
        yield client


@pytest.fixture
def endpoints():
    return ApiEndpoints(base_url=BASE_URL)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def profile():
    return Profile(first_name="Olena", last_name="Kovalenko", date_of_birth=date(1990, 4, 12))


@pytest.fixture
def session(profile):
    return Session(token=make_token(), profile=profile)


@pytest.fixture
def slot():
    return Slot(id="s-1", date="2024-06-01", time="09:00", queue_id=QUEUE_A)
