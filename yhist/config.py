"""Centralized configuration via pydantic-settings, loaded from .env."""

from __future__ import annotations

import functools

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Hosts ──────────────────────────────────────────────────────────
    finance_host: str = "finance.yahoo.com"
    query_host: str = "query1.finance.yahoo.com"
    consent_host: str = "guce.oath.com"

    # ── Consent form defaults ─────────────────────────────────────────
    consent_country: str = "SE"
    consent_locale: str = "sv-SE"

    # ── Data window ───────────────────────────────────────────────────
    lookback_years: int = 30

    # ── HTTP ──────────────────────────────────────────────────────────
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
    )
    request_timeout: float = 20.0

    # ── Operational Settings ───────────────────────────────────────────
    strict_scrape: bool = False
    log_level: str = "INFO"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton accessor for the global settings."""
    return Settings()
