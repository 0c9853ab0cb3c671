"""
Session core.

- VerificationTokenIssuer: opaque one-time tokens + expiry
- SessionTokenStore: in-memory (user, access token) pair
- AuthSessionController: session transitions against the auth API
- ServerSessionGuard: per-request refresh-cookie admission check
"""

from __future__ import annotations

from .controller import AuthSessionController, build_session
from .guard import ServerSessionGuard
from .store import Session, SessionState, SessionTokenStore
from .verification import VerificationToken, VerificationTokenIssuer

__all__ = [
    "AuthSessionController",
    "ServerSessionGuard",
    "Session",
    "SessionState",
    "SessionTokenStore",
    "VerificationToken",
    "VerificationTokenIssuer",
    "build_session",
]
