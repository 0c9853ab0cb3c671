"""
Email-verification and password-reset token issuance.

Tokens are 32 bytes from the OS CSPRNG, hex encoded (64 lowercase chars).
They are opaque: the API stores them next to the user record and consumes
them once; nothing here signs or decodes them.
"""

from __future__ import annotations

import math
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from mapshelf.api.errors import EntropyError
from mapshelf.config import get_settings

TOKEN_BYTES = 32
TOKEN_RE = re.compile(r"^[0-9a-f]{64}$")

DEFAULT_VALIDITY_HOURS = 24.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class VerificationToken:
    value: str
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) >= self.expires_at


def is_token_well_formed(value: object) -> bool:
    return isinstance(value, str) and bool(TOKEN_RE.match(value))


def _check_hours(validity_hours: float) -> float:
    # bool is an int subclass; True hours is a caller bug, not 1 hour.
    if isinstance(validity_hours, bool) or not isinstance(validity_hours, (int, float)):
        raise ValueError(f"validity_hours must be a number, got {validity_hours!r}")
    hours = float(validity_hours)
    if not math.isfinite(hours) or hours <= 0:
        raise ValueError(f"validity_hours must be positive, got {validity_hours!r}")
    return hours


class VerificationTokenIssuer:
    """
    Issue opaque one-time tokens with a bounded validity window.

    Non-positive validity windows are rejected with ValueError, never clamped.
    """

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def generate_token(self) -> str:
        try:
            raw = secrets.token_bytes(TOKEN_BYTES)
        except (NotImplementedError, OSError) as ex:
            raise EntropyError("secure random source unavailable") from ex
        return raw.hex()

    def compute_expiration(self, validity_hours: float = DEFAULT_VALIDITY_HOURS) -> datetime:
        hours = _check_hours(validity_hours)
        return self._clock() + timedelta(hours=hours)

    def issue(self, validity_hours: float | None = None) -> VerificationToken:
        if validity_hours is None:
            validity_hours = float(get_settings().verification_token_hours)
        expires_at = self.compute_expiration(validity_hours)
        return VerificationToken(value=self.generate_token(), expires_at=expires_at)

    def issue_password_reset(self) -> VerificationToken:
        return self.issue(float(get_settings().password_reset_token_hours))


def generate_token() -> str:
    return VerificationTokenIssuer().generate_token()


def compute_expiration(validity_hours: float = DEFAULT_VALIDITY_HOURS) -> datetime:
    return VerificationTokenIssuer().compute_expiration(validity_hours)
