"""
Async client for the authentication API.

Cookie handling is an explicit policy instead of ambient browser behavior:

  - INCLUDE: keep a cookie jar; cookies the API sets (the refresh cookie) are
    sent back on later calls. This is the long-lived client session.
  - FORWARD: send exactly the cookies handed in, as a Cookie header, and keep
    nothing the API sets. Used for request-scoped server-side checks.
  - OMIT: never send or keep cookies.

Protected calls carry `Authorization: Bearer <access token>` read from a token
source (normally the SessionTokenStore). A 401 on a protected, non-auth route
triggers one renewal through the registered refresh handler and one replay.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, TypeVar

import httpx
import pydantic

from mapshelf.api.errors import ApiError, TransportError
from mapshelf.api.models import (
    LoginResponse,
    MeResponse,
    MessageResponse,
    RefreshResponse,
    SignupResponse,
    VerifyEmailResponse,
)
from mapshelf.config import get_settings
from mapshelf.utils.log import logger

M = TypeVar("M", bound=pydantic.BaseModel)

TokenSource = Callable[[], "str | None"]
RefreshHandler = Callable[[], Awaitable["str | None"]]

# Routes that must never trigger renew-and-replay on 401.
AUTH_ROUTES = (
    "/auth/login",
    "/auth/logout",
    "/auth/signup",
    "/auth/refresh",
    "/auth/forgot-password",
    "/auth/reset-password",
    "/auth/verify-email",
    "/auth/resend-verification",
)


class CredentialPolicy(str, Enum):
    include = "include"
    forward = "forward"
    omit = "omit"


def is_auth_route(path: str) -> bool:
    return any(path.startswith(r) for r in AUTH_ROUTES)


def cookie_header(cookies: Mapping[str, str]) -> str:
    return "; ".join(f"{k}={v}" for k, v in cookies.items() if k and v is not None)


class AuthApiClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        credentials: CredentialPolicy = CredentialPolicy.include,
        cookies: Mapping[str, str] | None = None,
        token_source: TokenSource | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        s = get_settings()
        self.base_url = (base_url or s.api_base()).rstrip("/")
        self.credentials = CredentialPolicy(credentials)
        self._forward = dict(cookies or {})
        if self._forward and self.credentials is not CredentialPolicy.forward:
            raise ValueError("explicit cookies require CredentialPolicy.forward")
        self._token_source = token_source
        self._refresh_handler: RefreshHandler | None = None
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=float(timeout if timeout is not None else s.http_timeout_sec),
            headers={"accept": "application/json"},
        )

    async def __aenter__(self) -> AuthApiClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def set_token_source(self, fn: TokenSource | None) -> None:
        self._token_source = fn

    def set_refresh_handler(self, fn: RefreshHandler | None) -> None:
        self._refresh_handler = fn

    @property
    def cookies(self) -> httpx.Cookies:
        return self._http.cookies

    def _current_token(self) -> str | None:
        return self._token_source() if self._token_source is not None else None

    def _headers(self, token: str | None) -> dict[str, str]:
        h: dict[str, str] = {}
        if token:
            h["authorization"] = f"Bearer {token}"
        if self.credentials is CredentialPolicy.forward and self._forward:
            h["cookie"] = cookie_header(self._forward)
        return h

    async def _send_once(
        self, method: str, path: str, *, token: str | None, **kw: Any
    ) -> httpx.Response:
        if self.credentials is not CredentialPolicy.include:
            self._http.cookies.clear()
        try:
            resp = await self._http.request(method, path, headers=self._headers(token), **kw)
        except httpx.HTTPError as ex:
            logger.warning("api.transport_error", method=method, path=path, error=type(ex).__name__)
            raise TransportError(f"{method} {path} failed: {type(ex).__name__}") from ex
        finally:
            if self.credentials is not CredentialPolicy.include:
                self._http.cookies.clear()
        logger.debug("api.response", method=method, path=path, status=resp.status_code)
        return resp

    async def request(
        self,
        method: str,
        path: str,
        *,
        authorized: bool = True,
        token: str | None = None,
        **kw: Any,
    ) -> httpx.Response:
        """
        Send a request; on 401 from a protected route, renew once and replay.
        """
        tok = token if token is not None else (self._current_token() if authorized else None)
        resp = await self._send_once(method, path, token=tok, **kw)
        if (
            resp.status_code == 401
            and authorized
            and tok
            and token is None
            and not is_auth_route(path)
            and self._refresh_handler is not None
        ):
            new_tok = await self._refresh_handler()
            if new_tok:
                logger.info("api.retry_after_refresh", method=method, path=path)
                resp = await self._send_once(method, path, token=new_tok, **kw)
        return resp

    async def _call(self, model: type[M], method: str, path: str, **kw: Any) -> M:
        resp = await self.request(method, path, **kw)
        payload = _json_or_none(resp)
        if resp.status_code >= 400:
            raise ApiError.from_response(resp.status_code, payload)
        if payload is None:
            raise TransportError(f"{method} {path}: response is not JSON")
        try:
            return model.model_validate(payload)
        except pydantic.ValidationError as ex:
            raise TransportError(f"{method} {path}: malformed response") from ex

    # --- endpoints ---

    async def login(self, *, email: str, password: str) -> LoginResponse:
        return await self._call(
            LoginResponse,
            "POST",
            "/auth/login",
            authorized=False,
            json={"email": email, "password": password},
        )

    async def logout(self) -> None:
        resp = await self.request("POST", "/auth/logout")
        if resp.status_code >= 400:
            raise ApiError.from_response(resp.status_code, _json_or_none(resp))

    async def refresh(self) -> RefreshResponse:
        return await self._call(RefreshResponse, "POST", "/auth/refresh", authorized=False)

    async def signup(self, *, email: str, password: str, language: str | None = None) -> SignupResponse:
        body: dict[str, Any] = {"email": email, "password": password}
        if language:
            body["language"] = language
        return await self._call(SignupResponse, "POST", "/auth/signup", authorized=False, json=body)

    async def verify_email(self, *, token: str) -> VerifyEmailResponse:
        return await self._call(
            VerifyEmailResponse,
            "GET",
            "/auth/verify-email",
            authorized=False,
            params={"token": token, "format": "json"},
        )

    async def resend_verification(self, *, email: str, language: str | None = None) -> MessageResponse:
        body: dict[str, Any] = {"email": email}
        if language:
            body["language"] = language
        return await self._call(
            MessageResponse, "POST", "/auth/resend-verification", authorized=False, json=body
        )

    async def forgot_password(self, *, email: str, language: str | None = None) -> MessageResponse:
        body: dict[str, Any] = {"email": email}
        if language:
            body["language"] = language
        return await self._call(
            MessageResponse, "POST", "/auth/forgot-password", authorized=False, json=body
        )

    async def reset_password(self, *, token: str, password: str) -> MessageResponse:
        return await self._call(
            MessageResponse,
            "POST",
            "/auth/reset-password",
            authorized=False,
            json={"token": token, "password": password},
        )

    async def get_me(self, *, token: str | None = None) -> MeResponse:
        return await self._call(MeResponse, "GET", "/auth/me", token=token)

    async def update_me(
        self, *, name: str | None, avatar_url: str | None, bio: str | None
    ) -> MeResponse:
        return await self._call(
            MeResponse,
            "PUT",
            "/auth/me",
            json={"name": name, "avatarUrl": avatar_url, "bio": bio},
        )

    async def change_password(self, *, old_password: str, new_password: str) -> MessageResponse:
        return await self._call(
            MessageResponse,
            "POST",
            "/auth/change-password",
            json={"oldPassword": old_password, "newPassword": new_password},
        )

    async def delete_account(self, *, password: str, language: str | None = None) -> MessageResponse:
        body: dict[str, Any] = {"password": password}
        if language:
            body["language"] = language
        return await self._call(MessageResponse, "DELETE", "/auth/account", json=body)


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None
