from __future__ import annotations

import json

import httpx
import pytest
from click.testing import CliRunner

from mapshelf.api.client import AuthApiClient
from mapshelf.api.messages import MESSAGES
from mapshelf.auth.verification import is_token_well_formed
from mapshelf.cli import cli, commands_session


def test_issue_token_json() -> None:
    r = CliRunner().invoke(cli, ["issue-token", "--json"])
    assert r.exit_code == 0, r.output
    data = json.loads(r.output)
    assert is_token_well_formed(data["token"])
    assert data["expires_at"].endswith("+00:00")


def test_issue_token_rejects_non_positive_hours() -> None:
    r = CliRunner().invoke(cli, ["issue-token", "--hours", "0"])
    assert r.exit_code == 2
    assert "validity_hours" in r.output


def test_config_report_is_json() -> None:
    r = CliRunner().invoke(cli, ["config"])
    assert r.exit_code == 0, r.output
    data = json.loads(r.output)
    assert data["production"] is False
    assert data["public"]["api_url"] == "http://testserver"
    assert data["public"]["refresh_cookie_name"] == "refreshToken"


def test_check_session_without_cookie() -> None:
    r = CliRunner().invoke(cli, ["check-session"])
    assert r.exit_code == 1
    assert "anonymous" in r.output


def test_login_validation_error_is_localized() -> None:
    r = CliRunner().invoke(cli, ["login", "--email", "nope", "--password", "x", "--lang", "fr"])
    assert r.exit_code == 2
    assert MESSAGES["fr"]["VALIDATION_ERROR"] in r.output


def _patch_api(monkeypatch: pytest.MonkeyPatch, handler) -> None:
    def _client(base_url=None) -> AuthApiClient:
        return AuthApiClient(base_url=base_url, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(commands_session, "AuthApiClient", _client)


def test_login_success(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_api(
        monkeypatch,
        lambda r: httpx.Response(
            200, json={"accessToken": "tok1", "user": {"id": 7, "email": "a@b.com"}}
        ),
    )
    r = CliRunner().invoke(cli, ["login", "--email", "a@b.com", "--password", "pw"])
    assert r.exit_code == 0, r.output
    assert "Signed in as a@b.com" in r.output


def test_login_api_error_is_localized(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_api(
        monkeypatch,
        lambda r: httpx.Response(
            401, json={"success": False, "error": {"code": "INVALID_CREDENTIALS"}}
        ),
    )
    r = CliRunner().invoke(cli, ["login", "--email", "a@b.com", "--password", "pw"])
    assert r.exit_code == 2
    assert MESSAGES["en"]["INVALID_CREDENTIALS"] in r.output
