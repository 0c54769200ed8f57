"""
Resolve the applicant's identity from the case record.

The reservation endpoint wants first name, last name and date of birth. The
site does not expose them anywhere on the reservation page, so we read them
from the proceedings record of the case the user has open.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

import httpx

from slot_hunter.config import ApiEndpoints
from slot_hunter.errors import ProfileResolutionError
from slot_hunter.models import Profile

logger = logging.getLogger(__name__)

CASE_ID_PATTERN = re.compile(r"/cases/([a-f0-9-]+)")

EMPTY_PROFILE = Profile(first_name=None, last_name=None, date_of_birth=None)


def extract_case_id(url: str | None) -> str | None:
    """Pull the case id out of a ``.../cases/{id}`` URL."""
    if not url:
        return None
    match = CASE_ID_PATTERN.search(url)
    return match.group(1) if match else None


def _find_person_record(body: Any) -> dict[str, Any]:
    """Look in the places different case types keep the applicant under."""
    if not isinstance(body, dict):
        return {}

    data = body.get("data")
    candidates = [
        body.get("person"),
        body.get("applicant"),
        data.get("person") if isinstance(data, dict) else None,
    ]
    for candidate in candidates:
        if isinstance(candidate, dict) and candidate:
            return candidate
    return body


def _parse_birth_date(value: Any) -> date | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value.split("T")[0])
    except ValueError:
        logger.warning(f"Unrecognised dateOfBirth value: {value!r}")
        return None


def profile_from_case_record(body: Any) -> Profile:
    person = _find_person_record(body)
    return Profile(
        first_name=person.get("firstName") or None,
        last_name=person.get("surname") or None,
        date_of_birth=_parse_birth_date(person.get("dateOfBirth")),
    )


async def fetch_profile(
    client: httpx.AsyncClient, endpoints: ApiEndpoints, case_id: str | None
) -> Profile:
    """
    Read the case record and extract the applicant profile.

    Never raises: any failure yields a profile with empty fields, which
    ``resolve_profile`` turns into a precondition failure.
    """
    if not case_id:
        logger.error("Could not find case ID in URL")
        return EMPTY_PROFILE

    logger.info(f"Found case ID: {case_id}")

    try:
        response = await client.get(endpoints.proceedings_url(case_id))
        response.raise_for_status()
        body = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(
            f"Case lookup failed: {e.response.status_code} {e.response.reason_phrase}"
        )
        return EMPTY_PROFILE
    except httpx.RequestError as e:
        logger.error(f"Request error during case lookup: {e}")
        return EMPTY_PROFILE
    except ValueError as e:
        logger.error(f"Error decoding case record: {e}")
        return EMPTY_PROFILE

    logger.debug(f"Case record: {body}")
    return profile_from_case_record(body)


async def resolve_profile(
    client: httpx.AsyncClient, endpoints: ApiEndpoints, case_url: str | None
) -> Profile:
    """
    Resolve the profile and insist on all three fields being present.

    Raises:
        ProfileResolutionError: If the case id is missing, the lookup failed
            or any required field is absent
    """
    case_id = extract_case_id(case_url)
    profile = await fetch_profile(client, endpoints, case_id)

    if not profile.is_complete:
        logger.error(f"Incomplete applicant data: {profile}")
        raise ProfileResolutionError(
            "Could not find the applicant's details. "
            "Make sure the URL points at a specific case."
        )

    logger.info(f"Applicant resolved: {profile.first_name} {profile.last_name}")
    return profile
