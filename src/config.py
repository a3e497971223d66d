"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """NeuroFluent configuration. All values come from environment variables."""

    # Gemini
    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(default=DEFAULT_GEMINI_MODEL)
    gemini_api_base: str = Field(default="https://generativelanguage.googleapis.com")
    gemini_timeout_seconds: float = Field(default=60.0)

    # Database
    database_path: Path = Field(default=Path("data/neurofluent.db"))

    # HTTP API
    web_host: str = Field(default="0.0.0.0")
    web_port: int = Field(default=8080)

    # Bearer tokens accepted by the API, "token:user_id" pairs
    auth_tokens: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @field_validator("gemini_model")
    @classmethod
    def _default_blank_model(cls, value: str) -> str:
        return value.strip() or DEFAULT_GEMINI_MODEL

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_auth_tokens(self) -> dict[str, str]:
        """Parse AUTH_TOKENS into a token -> user id mapping."""
        if not self.auth_tokens.strip():
            return {}
        tokens: dict[str, str] = {}
        for pair in self.auth_tokens.split(","):
            token, sep, user_id = pair.strip().partition(":")
            if sep and token.strip() and user_id.strip():
                tokens[token.strip()] = user_id.strip()
        return tokens


settings = Settings()
