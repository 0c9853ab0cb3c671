from __future__ import annotations

import json

from mapshelf.utils.log import redact_event, safe_log_data


def test_log_redaction_tokens() -> None:
    jwt = "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.aaaa.bbbb"
    refresh = "ab" * 32
    cookie = f"refreshToken={refresh}; theme=dark"
    headers = {"Authorization": f"Bearer {jwt}", "Cookie": cookie}
    payload = {
        "headers": headers,
        "accessToken": jwt,
        "password": "hunter22",
        "body": {"email": "a@b.com", "newPassword": "n3wpass!"},
        "note": f"verify with token={refresh}",
        "email": "a@b.com",
    }
    redacted = safe_log_data(payload)
    s = json.dumps(redacted)
    assert jwt not in s
    assert refresh not in s
    assert "hunter22" not in s
    assert "n3wpass!" not in s
    assert redacted["email"] == "a@b.com"
    assert redacted["body"]["email"] == "a@b.com"


def test_log_redaction_free_text() -> None:
    tok = "0123456789abcdef" * 4
    ev = redact_event(
        None,
        None,
        {"event": "api.request", "url": f"/auth/verify-email?token={tok}", "hdr": "Bearer abc.def"},
    )
    assert tok not in ev["url"]
    assert "abc.def" not in ev["hdr"]
    assert ev["event"] == "api.request"


def test_empty_sensitive_values_are_kept() -> None:
    assert safe_log_data({"token": None, "password": ""}) == {"token": None, "password": ""}
