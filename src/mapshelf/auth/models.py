from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mapshelf.api.models import User


@dataclass(frozen=True, slots=True)
class SignupResult:
    user: User | None
    verification_email_sent: bool


class VerifyStatus(str, Enum):
    verified = "VERIFIED"
    expired = "EXPIRED"
    already_verified = "ALREADY_VERIFIED"
    not_found = "NOT_FOUND"
    invalid = "INVALID"


# API error code -> verification outcome. The API reports "unknown or
# expired" as one code; a bare 404 with no code is "not found".
_VERIFY_CODES: dict[str, VerifyStatus] = {
    "TOKEN_EXPIRED": VerifyStatus.expired,
    "EMAIL_ALREADY_VERIFIED": VerifyStatus.already_verified,
    "TOKEN_NOT_FOUND": VerifyStatus.not_found,
    "NOT_FOUND": VerifyStatus.not_found,
    "TOKEN_REQUIRED": VerifyStatus.invalid,
    "VALIDATION_ERROR": VerifyStatus.invalid,
}


def verify_status_for(code: str | None, status_code: int) -> VerifyStatus:
    if code and code in _VERIFY_CODES:
        return _VERIFY_CODES[code]
    if status_code == 404:
        return VerifyStatus.not_found
    return VerifyStatus.invalid


@dataclass(frozen=True, slots=True)
class VerifyEmailResult:
    status: VerifyStatus
    user: User | None = None
    redirect_url: str | None = None
    code: str | None = None
    message: str | None = None
    payload: Any = None

    @property
    def success(self) -> bool:
        return self.status is VerifyStatus.verified
