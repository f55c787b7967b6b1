"""
Centralised settings loader (pydantic-settings, reads env + `.env`).
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
    database_url: str | None = None
    db_echo: bool = False

    # ─── auth ───────────────────────────────────────────────────────
    jwt_secret: str = "changeme"
    jwt_ttl_minutes: int = Field(60, gt=0)

    # ─── macro calculator policy ────────────────────────────────────
    protein_policy: str = Field("goal", pattern="^(goal|flat)$")
    clamp_negative_carbs: bool = True

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(extra="ignore", env_file=".env", env_file_encoding="utf-8")


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
