"""Bearer token inspection.

The token is read from the host page's session storage by the host; here we
only look at its ``exp`` claim. The signature is not verified: we do not
hold the issuer's key.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import jwt

from slot_hunter.errors import TokenExpiredError, TokenMissingError

logger = logging.getLogger(__name__)

JWT_PREFIX = "eyJ"


class TokenStatus(enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    UNPARSEABLE = "unparseable"


@dataclass(frozen=True)
class TokenCheck:
    status: TokenStatus
    expires_at: datetime | None = None
    error: str | None = None


def extract_bearer_token(storage: Mapping[str, Any]) -> str | None:
    """Return the first storage value that looks like a JWT."""
    for value in storage.values():
        if isinstance(value, str) and value.startswith(JWT_PREFIX):
            return value
    return None


def validate_token(token: str, now: datetime | None = None) -> TokenCheck:
    """
    Decode the token payload and compare its expiry with ``now``.

    Args:
        token: Raw bearer token
        now: Reference time, defaults to the current UTC time

    Returns:
        TokenCheck with VALID, EXPIRED or UNPARSEABLE status
    """
    if now is None:
        now = datetime.now(timezone.utc)

    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        return TokenCheck(status=TokenStatus.UNPARSEABLE, error=str(e))

    exp = payload.get("exp")
    if exp is None:
        return TokenCheck(status=TokenStatus.VALID)

    try:
        expires_at = datetime.fromtimestamp(float(exp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError) as e:
        return TokenCheck(status=TokenStatus.UNPARSEABLE, error=f"Bad exp claim: {e}")

    if expires_at < now:
        return TokenCheck(status=TokenStatus.EXPIRED, expires_at=expires_at)
    return TokenCheck(status=TokenStatus.VALID, expires_at=expires_at)


def ensure_usable_token(token: str | None, now: datetime | None = None) -> TokenCheck:
    """
    Validate the token and raise on the conditions that must stop the hunt.

    An undecodable token only produces a warning.

    Raises:
        TokenMissingError: If no token was supplied
        TokenExpiredError: If the token has expired
    """
    if not token:
        raise TokenMissingError("Bearer token not found in session storage")

    check = validate_token(token, now=now)

    if check.status is TokenStatus.EXPIRED:
        raise TokenExpiredError(f"Token expired at {check.expires_at.isoformat()}")

    if check.status is TokenStatus.UNPARSEABLE:
        logger.warning(f"Could not verify token: {check.error}")
    else:
        logger.info(f"Token valid, expires: {check.expires_at or 'never'}")

    return check
