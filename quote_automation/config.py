"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here, including the
rate and multiplier tables the pricing engine is built from.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Quote Automation"
    debug: bool = True
    mock_mode: bool = True  # When True, repositories keep data in memory

    # ── Access ───────────────────────────────────────────
    staff_user_ids: list[str] = []  # JSON list in env; may send and expire any quote

    # ── MongoDB ──────────────────────────────────────────
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "quote_automation"

    # ── Base rates per project type ──────────────────────
    base_rate_creative: Decimal = Decimal("5000")
    base_rate_fullstack: Decimal = Decimal("8000")
    base_rate_web3: Decimal = Decimal("12000")
    base_rate_ai_automation: Decimal = Decimal("10000")

    # ── Multiplier tables (JSON in env) ──────────────────
    complexity_multipliers: dict[str, Decimal] = {
        "low": Decimal("1.0"),
        "medium": Decimal("1.3"),
        "high": Decimal("1.5"),
        "critical": Decimal("1.8"),
    }
    urgency_multipliers: dict[str, Decimal] = {
        "standard": Decimal("1.0"),
        "urgent": Decimal("1.3"),
        "critical": Decimal("1.5"),
    }

    # ── Quote terms ──────────────────────────────────────
    quote_validity_days: int = 30
    not_to_exceed_buffer: Decimal = Decimal("0.15")

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
