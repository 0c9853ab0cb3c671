from __future__ import annotations

from typing import Any


class AuthError(RuntimeError):
    """Base class for every error raised by the session core."""

    code: str | None = None


class ValidationError(AuthError):
    """Malformed input rejected locally, before any network call."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, details: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.details = list(details or [])


class TransportError(AuthError):
    """The API could not be reached or answered with something unparseable."""


class ApiError(AuthError):
    """The API answered with a tagged `{success: false, error: {code, ...}}` payload."""

    def __init__(
        self,
        *,
        status_code: int,
        code: str | None,
        message: str = "",
        details: Any = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message or (code or f"HTTP {status_code}"))
        self.status_code = int(status_code)
        self.code = code
        self.message = message
        self.details = details
        self.payload = payload

    @classmethod
    def from_response(cls, status_code: int, payload: Any) -> ApiError:
        if is_api_error(payload):
            err = payload.get("error") or {}
            return cls(
                status_code=status_code,
                code=_code_of(err),
                message=str(err.get("message") or ""),
                details=err.get("details"),
                payload=payload,
            )
        return cls(status_code=status_code, code=None, payload=payload)


class EntropyError(AuthError):
    """Secure randomness is unavailable; token issuance must abort."""


def is_api_error(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and "success" in data
        and data.get("success") is False
        and "error" in data
    )


def _code_of(err: Any) -> str | None:
    if not isinstance(err, dict):
        return None
    code = err.get("code")
    return code if isinstance(code, str) and code else None


def get_error_code(error: Any) -> str | None:
    """
    Extract the API error code from a raw payload or an AuthError.

    Returns None for anything that does not carry the tagged error shape.
    """
    if isinstance(error, ApiError):
        if error.code:
            return error.code
        return get_error_code(error.payload)
    if isinstance(error, ValidationError):
        return error.code
    if is_api_error(error):
        return _code_of(error.get("error"))
    return None
