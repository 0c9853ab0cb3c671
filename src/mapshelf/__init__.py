"""
mapshelf authentication session core.

Verification tokens, the client session lifecycle (login, refresh, logout and
the account flows) and the request-scoped server session guard.
"""

from .auth import (
    AuthSessionController,
    ServerSessionGuard,
    Session,
    SessionState,
    SessionTokenStore,
    VerificationToken,
    VerificationTokenIssuer,
    build_session,
)

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
