"""Session state for authenticated API calls."""

from __future__ import annotations

import base64
import binascii
import enum
import json
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 100_000_000_000


class AuthFlow(enum.StrEnum):
    """Login protocol that produced a session."""

    TWO_STEP = "two_step"
    LEGACY = "legacy"


def _decode_jwt_claims(token: str) -> dict[str, Any]:
    """Decode (without verifying) the claims segment of a JWT.

    Returns an empty dict when *token* is not a JWT.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return {}
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(segment))
    except (ValueError, binascii.Error):
        return {}
    return claims if isinstance(claims, dict) else {}


def _claim_seconds(claims: dict[str, Any], name: str) -> float | None:
    value = claims.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value >= _MS_THRESHOLD:
        return value / 1000
    return float(value)


class Session(BaseModel):
    """Immutable session established by the authentication negotiator.

    A new instance replaces the previous one on every successful
    login; fields are never updated in place.

    Parameters
    ----------
    token : str
        Account token sent with every authenticated request.
    account_id : str
        Account identifier paired with the token.
    country_code : str
        Country code the session was established with.
    region : str
        ``"US"`` or ``"EU"``.
    api_base_url : str
        Base URL all device calls go to.
    auth_flow : AuthFlow
        Login protocol that produced the token.
    issued_at, expires_at : float or None
        Epoch seconds decoded from the token's ``iat`` / ``exp`` claims
        when the token is a JWT.
    created_at : float
        Monotonic timestamp when the session was created.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    token: str
    account_id: str
    country_code: str
    region: str
    api_base_url: str
    auth_flow: AuthFlow = AuthFlow.TWO_STEP
    issued_at: float | None = None
    expires_at: float | None = None
    created_at: float = Field(default_factory=time.monotonic)

    @classmethod
    def from_token(cls, token: str, **fields: Any) -> Session:
        """Build a session, filling ``issued_at``/``expires_at`` from the token."""
        claims = _decode_jwt_claims(token)
        fields.setdefault("issued_at", _claim_seconds(claims, "iat"))
        fields.setdefault("expires_at", _claim_seconds(claims, "exp"))
        return cls(token=token, **fields)

    @property
    def is_expired(self) -> bool:
        """Whether the token's ``exp`` claim has passed.

        Tokens without an expiry claim never expire locally; the cloud
        signals expiry with a token error instead.
        """
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at

    @property
    def age(self) -> float:
        """Seconds since the session was created."""
        return time.monotonic() - self.created_at
