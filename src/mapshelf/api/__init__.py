from __future__ import annotations

from .client import AuthApiClient, CredentialPolicy
from .errors import (
    ApiError,
    AuthError,
    EntropyError,
    TransportError,
    ValidationError,
    get_error_code,
    is_api_error,
)
from .messages import error_message

__all__ = [
    "AuthApiClient",
    "CredentialPolicy",
    "ApiError",
    "AuthError",
    "EntropyError",
    "TransportError",
    "ValidationError",
    "error_message",
    "get_error_code",
    "is_api_error",
]
