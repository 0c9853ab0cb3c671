from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from mapshelf.auth.controller import AuthSessionController
from mapshelf.auth.guard import ServerSessionGuard
from mapshelf.config import get_settings
from mapshelf.utils.log import set_request_id


def get_session_guard(request: Request) -> ServerSessionGuard:
    guard = getattr(request.app.state, "session_guard", None)
    if not isinstance(guard, ServerSessionGuard):
        raise HTTPException(status_code=500, detail="Session guard not initialized")
    return guard


def get_controller(request: Request) -> AuthSessionController:
    ctl = getattr(request.app.state, "auth_controller", None)
    if not isinstance(ctl, AuthSessionController):
        raise HTTPException(status_code=500, detail="Auth controller not initialized")
    return ctl


def _redirect(location: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_303_SEE_OTHER, headers={"Location": location})


async def is_authenticated(
    request: Request, guard: ServerSessionGuard = Depends(get_session_guard)
) -> bool:
    set_request_id(request.headers.get("x-request-id"))
    return await guard.is_authenticated(request.cookies)


async def redirect_if_authenticated(authenticated: bool = Depends(is_authenticated)) -> None:
    # Login/signup pages: signed-in users go straight to the app.
    if authenticated:
        raise _redirect(get_settings().app_home_path)


async def require_session(authenticated: bool = Depends(is_authenticated)) -> None:
    if not authenticated:
        raise _redirect(get_settings().login_path)
