"""
Local validation of auth form input.

Mirrors the API's own input rules so obviously bad input fails fast without a
round trip. Field errors carry the same codes the API would answer with.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Optional, TypeVar

import pydantic
from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationInfo, field_validator

from mapshelf.api.errors import ValidationError
from mapshelf.auth.verification import is_token_well_formed
from mapshelf.config import get_settings

PASSWORD_MIN = 8
FIELD_MAX = 255

# Shape check only; deliverability is the API's call.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_RE = re.compile(r"^https?://[^\s/]+\S*$")


def _check_email(v: Any) -> str:
    s = str(v or "").strip()
    if not s:
        raise ValueError("EMAIL_REQUIRED")
    if len(s) > FIELD_MAX:
        raise ValueError("EMAIL_TOO_LONG")
    if not _EMAIL_RE.match(s):
        raise ValueError("INVALID_EMAIL")
    return s


def _check_password(v: Any) -> str:
    s = "" if v is None else str(v)
    if s == "":
        raise ValueError("PASSWORD_REQUIRED")
    if len(s) < PASSWORD_MIN:
        raise ValueError("PASSWORD_TOO_SHORT")
    if len(s) > FIELD_MAX:
        raise ValueError("PASSWORD_TOO_LONG")
    return s


def _check_any_password(v: Any) -> str:
    s = "" if v is None else str(v)
    if s == "":
        raise ValueError("PASSWORD_REQUIRED")
    return s


def _check_language(v: Any) -> str | None:
    if v is None or str(v).strip() == "":
        return None
    lang = str(v).strip().lower()
    if lang not in get_settings().language_list():
        raise ValueError("INVALID_LANGUAGE")
    return lang


def _check_token(v: Any) -> str:
    s = str(v or "").strip()
    if not s:
        raise ValueError("TOKEN_REQUIRED")
    if not is_token_well_formed(s):
        raise ValueError("TOKEN_INVALID")
    return s


def _text(code: str):
    def check(v: Any) -> str | None:
        if v is None or str(v) == "":
            return None
        s = str(v)
        if len(s) > FIELD_MAX:
            raise ValueError(code)
        return s

    return check


def _check_url(v: Any) -> str | None:
    if v is None or str(v).strip() == "":
        return None
    s = str(v).strip()
    if not _URL_RE.match(s):
        raise ValueError("INVALID_URL")
    return s


Email = Annotated[str, BeforeValidator(_check_email)]
Password = Annotated[str, BeforeValidator(_check_password)]
AnyPassword = Annotated[str, BeforeValidator(_check_any_password)]
Language = Annotated[Optional[str], BeforeValidator(_check_language)]
Token = Annotated[str, BeforeValidator(_check_token)]


class _Form(BaseModel):
    model_config = ConfigDict(frozen=True)


class LoginForm(_Form):
    # Password policy is the API's call at login; only presence is checked here.
    email: Email
    password: AnyPassword


class LoginSignupForm(_Form):
    email: Email
    password: Password
    language: Language = None


class EmailForm(_Form):
    email: Email
    language: Language = None


class ResetPasswordForm(_Form):
    token: Token
    password: Password


class VerifyEmailForm(_Form):
    token: Token


class ChangePasswordForm(_Form):
    old_password: AnyPassword
    new_password: Password

    @field_validator("new_password")
    @classmethod
    def _differs(cls, v: str, info: ValidationInfo) -> str:
        if info.data.get("old_password") == v:
            raise ValueError("PASSWORD_SAME")
        return v


class DeleteAccountForm(_Form):
    password: AnyPassword
    language: Language = None


class ProfileForm(_Form):
    name: Annotated[Optional[str], BeforeValidator(_text("NAME_TOO_LONG"))] = None
    avatar_url: Annotated[Optional[str], BeforeValidator(_check_url)] = None
    bio: Annotated[Optional[str], BeforeValidator(_text("BIO_TOO_LONG"))] = None


F = TypeVar("F", bound=BaseModel)


def _issue_code(err: dict[str, Any]) -> str:
    inner = (err.get("ctx") or {}).get("error")
    if isinstance(inner, ValueError) and inner.args:
        return str(inner.args[0])
    if err.get("type") == "missing":
        return "REQUIRED"
    return str(err.get("type") or "INVALID").upper()


def validate_form(form: type[F], **data: Any) -> F:
    """
    Build `form` from keyword data, raising our ValidationError on failure.

    Details follow the API shape: [{"field": "email", "code": "INVALID_EMAIL"}].
    """
    try:
        return form(**data)
    except pydantic.ValidationError as ex:
        details = [
            {"field": ".".join(str(p) for p in e.get("loc") or ()), "code": _issue_code(e)}
            for e in ex.errors()
        ]
        raise ValidationError("Invalid input", details=details) from None
