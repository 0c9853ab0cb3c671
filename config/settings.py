from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any
from urllib.parse import urlparse

from .public_config import PublicConfig


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Settings view (dot-access) over the loaded config sections.
    """

    public: PublicConfig

    def __getattr__(self, name: str) -> Any:
        return getattr(self.public, name)

    def language_list(self) -> list[str]:
        return self.public.language_list()

    def api_base(self) -> str:
        return self.public.api_base()


def _is_production_env() -> bool:
    env = str(os.environ.get("ENV") or os.environ.get("APP_ENV") or "").strip().lower()
    return env in {"prod", "production"}


def _is_strict() -> bool:
    return bool(int(os.environ.get("STRICT_CONFIG", "0") or "0"))


def _positive_hours(v: float) -> bool:
    try:
        f = float(v)
    except (TypeError, ValueError):
        return False
    return math.isfinite(f) and f > 0


def _validate_settings(s: Settings) -> None:
    """
    Hard-fail in production (or with STRICT_CONFIG=1); warn otherwise.
    """
    prod = _is_production_env()
    problems: list[str] = []

    url = urlparse(s.public.api_base())
    if url.scheme not in {"http", "https"} or not url.netloc:
        problems.append("MAPSHELF_API_URL")
    elif prod and url.scheme != "https":
        problems.append("MAPSHELF_API_URL")

    if not _positive_hours(s.public.verification_token_hours):
        problems.append("VERIFICATION_TOKEN_HOURS")
    if not _positive_hours(s.public.password_reset_token_hours):
        problems.append("PASSWORD_RESET_TOKEN_HOURS")
    if not str(s.public.refresh_cookie_name or "").strip():
        problems.append("REFRESH_COOKIE_NAME")
    if s.public.default_language.strip().lower() not in s.public.language_list():
        problems.append("DEFAULT_LANGUAGE")

    if problems:
        if prod or _is_strict():
            raise ConfigError(
                "Unsafe or invalid configuration detected: "
                + ", ".join(sorted(set(problems)))
                + ". Set them via environment variables or `.env`."
            )
        logging.getLogger("mapshelf").warning(
            "invalid_config_detected",
            extra={"fields": sorted(set(problems)), "strict_config": False, "production": prod},
        )


def get_safe_config_report() -> dict[str, Any]:
    """
    Deterministic, non-sensitive config report (paths are stringified).
    """
    s = get_settings()

    pub = s.public.model_dump()
    pub_s: dict[str, Any] = {}
    for k, v in pub.items():
        pub_s[k] = str(v) if hasattr(v, "__fspath__") else v

    return {
        "production": _is_production_env(),
        "strict_config": _is_strict(),
        "public": pub_s,
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    s = Settings(public=PublicConfig())
    _validate_settings(s)
    return s


class _SettingsProxy:
    """
    Lazy proxy so tests can set env vars before first access.
    """

    def __getattr__(self, name: str) -> Any:
        return getattr(get_settings(), name)

    def reload(self) -> None:
        get_settings.cache_clear()

    def snapshot(self) -> Settings:
        return get_settings()


# Single access point
SETTINGS = _SettingsProxy()
