"""Core configuration for the revertfuzz engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REVERTFUZZ_",
        case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "revertfuzz"
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # ── Selection ────────────────────────────────────────────────────────
    # XORed into the scenario seed before any selection draw. Changing it
    # invalidates every previously recorded seed.
    selection_domain_separator: int = Field(default=0xFF, ge=0)
    selection_draw_bits: int = Field(default=256, ge=32, le=256)

    # ── Registries ───────────────────────────────────────────────────────
    # Require a per-order / per-resolver rule for every failure whose detail
    # uses that scope, so the deriver can always narrow targets.
    strict_scope_coverage: bool = True


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
