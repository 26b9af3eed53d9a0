"""
Centralised settings loader (pydantic-settings).

Every field can be overridden by an environment variable of the same name
(case-insensitive) or by a line in `.env`.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime / DB ───────────────────────────────────────────────
    env_name: str = "local"
    log_level: str = "INFO"
    database_url: str | None = None          # e.g. postgresql+asyncpg://…
    db_connect_retries: int = Field(3, ge=1)
    db_create_tables: bool = True

    # ─── Gemini ─────────────────────────────────────────────────────
    gemini_api_key: str | None = None
    gemini_model: str = "models/gemini-2.0-flash"
    gemini_temperature: float = 0.7
    gemini_max_output_tokens: int = 4000
    gemini_max_retries: int = Field(3, ge=1)

    # ─── health maths ───────────────────────────────────────────────
    min_safe_calories: int = 1200

    # unknown env vars are ignored
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
