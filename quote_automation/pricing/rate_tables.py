"""
Rate Tables — the static lookup tables behind quote pricing.

Built once from Settings at startup and shared read-only afterwards.
Validation runs at construction so a broken table is a startup error,
not a surprise in the middle of a quote.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, model_validator

from quote_automation.config import Settings, get_settings
from quote_automation.models.enums import ComplexityLevel, ProjectType, Urgency

DEFAULT_BASE_TIMELINE_WEEKS: dict[ProjectType, int] = {
    ProjectType.CREATIVE: 4,
    ProjectType.FULLSTACK: 8,
    ProjectType.WEB3: 12,
    ProjectType.AI_AUTOMATION: 10,
}


class RateTables(BaseModel):
    """Base rates, multiplier tables and base timelines. Frozen."""

    model_config = ConfigDict(frozen=True)

    base_rates: dict[ProjectType, Decimal]
    complexity_multipliers: dict[ComplexityLevel, Decimal]
    urgency_multipliers: dict[Urgency, Decimal]
    base_timeline_weeks: dict[ProjectType, int] = DEFAULT_BASE_TIMELINE_WEEKS
    not_to_exceed_buffer: Decimal = Decimal("0.15")
    quote_validity_days: int = 30

    @model_validator(mode="after")
    def _check_tables(self) -> "RateTables":
        missing = [t.value for t in ProjectType if t not in self.base_rates]
        if missing:
            raise ValueError(f"base_rates missing project types: {missing}")
        if any(rate <= 0 for rate in self.base_rates.values()):
            raise ValueError("base_rates must be positive")

        missing = [t.value for t in ProjectType if t not in self.base_timeline_weeks]
        if missing:
            raise ValueError(f"base_timeline_weeks missing project types: {missing}")

        _check_multipliers("complexity_multipliers", self.complexity_multipliers,
                           list(ComplexityLevel), ComplexityLevel.LOW)
        _check_multipliers("urgency_multipliers", self.urgency_multipliers,
                           list(Urgency), Urgency.STANDARD)

        if self.not_to_exceed_buffer < 0:
            raise ValueError("not_to_exceed_buffer must be >= 0")
        if self.quote_validity_days <= 0:
            raise ValueError("quote_validity_days must be positive")
        return self

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RateTables":
        """Build the tables from environment-backed settings."""
        settings = settings or get_settings()
        return cls(
            base_rates={
                ProjectType.CREATIVE: settings.base_rate_creative,
                ProjectType.FULLSTACK: settings.base_rate_fullstack,
                ProjectType.WEB3: settings.base_rate_web3,
                ProjectType.AI_AUTOMATION: settings.base_rate_ai_automation,
            },
            complexity_multipliers=settings.complexity_multipliers,
            urgency_multipliers=settings.urgency_multipliers,
            not_to_exceed_buffer=settings.not_to_exceed_buffer,
            quote_validity_days=settings.quote_validity_days,
        )


def _check_multipliers(name: str, table: dict, levels: list, baseline) -> None:
    missing = [lvl.value for lvl in levels if lvl not in table]
    if missing:
        raise ValueError(f"{name} missing levels: {missing}")
    if any(factor < 0 for factor in table.values()):
        raise ValueError(f"{name} factors must be >= 0")
    if table[baseline] != Decimal("1"):
        raise ValueError(f"{name}['{baseline.value}'] must be 1.0, got {table[baseline]}")
