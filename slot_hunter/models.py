"""
Data model shared by the hunting components.

Slots and candidate pools live for a single cycle only; the profile and the
session are created once and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Union


@dataclass(frozen=True)
class Profile:
    """Applicant identity sent with every reservation."""

    first_name: str | None
    last_name: str | None
    date_of_birth: date | None

    @property
    def is_complete(self) -> bool:
        return all([self.first_name, self.last_name, self.date_of_birth])

    def as_payload(self) -> dict[str, str]:
        return {
            "name": self.first_name or "",
            "lastName": self.last_name or "",
            "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else "",
        }


@dataclass(frozen=True)
class Session:
    """Validated credentials for one hunt."""

    token: str
    token_expiry: datetime | None = None
    profile: Profile | None = None


@dataclass(frozen=True)
class Slot:
    """One open slot returned by a queue for the target date."""

    id: str
    date: str | None
    time: str | None
    queue_id: str

    @classmethod
    def from_record(cls, record: dict[str, Any], queue_id: str) -> Slot:
        return cls(
            id=str(record["id"]),
            date=record.get("date"),
            time=record.get("time"),
            queue_id=queue_id,
        )

    def describe(self) -> str:
        return f"{self.date} {self.time} (ID: {self.id})"


# --- Reservation outcomes ---


@dataclass(frozen=True)
class Success:
    confirmation: Any = None


@dataclass(frozen=True)
class TwoFactorRequired:
    challenge: Any = None


@dataclass(frozen=True)
class Failure:
    reason: Any = None


ReservationOutcome = Union[Success, TwoFactorRequired, Failure]


@dataclass
class CycleState:
    """Progress of the scheduler loop. Only the scheduler writes to it."""

    cycle_index: int = 0
    max_cycles: int = 60
    done: bool = False
    succeeded: bool = False


@dataclass
class HuntResult:
    """Terminal outcome handed back to whoever started the hunt."""

    state: CycleState
    slot: Slot | None = None
    confirmation: Any = None

    @property
    def succeeded(self) -> bool:
        return self.state.succeeded
