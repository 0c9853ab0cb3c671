from __future__ import annotations

import asyncio

import httpx

from mapshelf.auth.guard import ServerSessionGuard


class _Api:
    def __init__(self, respond) -> None:
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


def _guard(api: _Api) -> ServerSessionGuard:
    return ServerSessionGuard(base_url="http://api.test", transport=httpx.MockTransport(api))


def test_no_cookie_means_no_network_call() -> None:
    api = _Api(lambda r: httpx.Response(200, json={"accessToken": "t"}))
    guard = _guard(api)
    assert asyncio.run(guard.is_authenticated({})) is False
    assert asyncio.run(guard.is_authenticated(None)) is False
    assert asyncio.run(guard.is_authenticated({"refreshToken": ""})) is False
    assert api.requests == []


def test_valid_cookie_is_forwarded() -> None:
    api = _Api(lambda r: httpx.Response(200, json={"accessToken": "t"}))
    guard = _guard(api)
    assert asyncio.run(guard.is_authenticated({"refreshToken": "abc", "other": "x"})) is True
    req = api.requests[0]
    assert req.method == "POST"
    assert req.url.path == "/auth/refresh"
    assert req.headers["cookie"] == "refreshToken=abc"
    assert "authorization" not in req.headers


def test_rejected_cookie_is_false() -> None:
    api = _Api(
        lambda r: httpx.Response(
            401, json={"success": False, "error": {"code": "INVALID_REFRESH_TOKEN"}}
        )
    )
    assert asyncio.run(_guard(api).is_authenticated({"refreshToken": "abc"})) is False


def test_network_error_is_false() -> None:
    def _down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert asyncio.run(_guard(_Api(_down)).is_authenticated({"refreshToken": "abc"})) is False


def test_malformed_response_is_false() -> None:
    for respond in (
        lambda r: httpx.Response(200, json={"accessToken": ""}),
        lambda r: httpx.Response(200, json={"nope": True}),
        lambda r: httpx.Response(200, text="not json"),
    ):
        assert asyncio.run(_guard(_Api(respond)).is_authenticated({"refreshToken": "abc"})) is False


def test_guard_keeps_no_state_between_requests() -> None:
    seen: list[str | None] = []

    def _respond(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("cookie"))
        resp = httpx.Response(200, json={"accessToken": "t"})
        resp.headers["set-cookie"] = "refreshToken=rotated; Path=/; HttpOnly"
        return resp

    guard = _guard(_Api(_respond))
    assert asyncio.run(guard.is_authenticated({"refreshToken": "one"})) is True
    assert asyncio.run(guard.is_authenticated({"refreshToken": "two"})) is True
    assert seen == ["refreshToken=one", "refreshToken=two"]


def test_cookie_name_from_config(monkeypatch) -> None:
    from mapshelf.config import get_settings

    monkeypatch.setenv("REFRESH_COOKIE_NAME", "rt")
    get_settings.cache_clear()
    api = _Api(lambda r: httpx.Response(200, json={"accessToken": "t"}))
    guard = _guard(api)
    assert guard.cookie_name == "rt"
    assert asyncio.run(guard.is_authenticated({"refreshToken": "abc"})) is False
    assert asyncio.run(guard.is_authenticated({"rt": "abc"})) is True
    assert api.requests[0].headers["cookie"] == "rt=abc"
