from __future__ import annotations

import pytest

from mapshelf.config import get_settings


@pytest.fixture(autouse=True)
def _test_env(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path_factory.mktemp("mapshelf_test")
    (root / "logs").mkdir(parents=True, exist_ok=True)

    monkeypatch.delenv("ENV", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("STRICT_CONFIG", raising=False)
    monkeypatch.setenv("MAPSHELF_API_URL", "http://testserver")
    monkeypatch.setenv("MAPSHELF_LOG_DIR", str(root / "logs"))
    monkeypatch.setenv("REFRESH_COOKIE_NAME", "refreshToken")
    monkeypatch.setenv("DEFAULT_LANGUAGE", "en")
    monkeypatch.setenv("SUPPORTED_LANGUAGES", "en,fr")
    monkeypatch.setenv("LOGIN_PATH", "/login")
    monkeypatch.setenv("APP_HOME_PATH", "/app")
    get_settings.cache_clear()
