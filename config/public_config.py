from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PublicConfig(BaseSettings):
    """
    Non-sensitive config with safe defaults.

    Loaded from (in order):
      - process env
      - optional `.env` file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- authentication API ---
    api_url: str = Field(
        default="http://localhost:4000",
        validation_alias=AliasChoices("MAPSHELF_API_URL", "API_URL"),
    )
    http_timeout_sec: float = Field(default=10.0, alias="HTTP_TIMEOUT_SEC")

    # Name of the HTTP-only cookie set by the API on login. The API owns its
    # attributes (httpOnly/sameSite/secure/max-age); we only read the name.
    refresh_cookie_name: str = Field(default="refreshToken", alias="REFRESH_COOKIE_NAME")

    # --- verification / reset tokens ---
    verification_token_hours: float = Field(default=24.0, alias="VERIFICATION_TOKEN_HOURS")
    password_reset_token_hours: float = Field(default=1.0, alias="PASSWORD_RESET_TOKEN_HOURS")

    # --- i18n ---
    default_language: str = Field(default="en", alias="DEFAULT_LANGUAGE")
    supported_languages: str = Field(default="en,fr", alias="SUPPORTED_LANGUAGES")

    # --- server-rendered routing ---
    login_path: str = Field(default="/login", alias="LOGIN_PATH")
    app_home_path: str = Field(default="/app", alias="APP_HOME_PATH")

    # --- logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # File logging is off unless a directory is configured.
    log_dir: Path | None = Field(default=None, alias="MAPSHELF_LOG_DIR")
    log_max_bytes: int = Field(default=5 * 1024 * 1024, alias="LOG_MAX_BYTES")
    log_backup_count: int = Field(default=3, alias="LOG_BACKUP_COUNT")

    def language_list(self) -> list[str]:
        return [x.strip().lower() for x in (self.supported_languages or "").split(",") if x.strip()]

    def api_base(self) -> str:
        return str(self.api_url or "").rstrip("/")
