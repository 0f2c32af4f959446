"""
Quote Calculator — turns a project's type, complexity score and urgency into
a priced estimate with a not-to-exceed ceiling, a delivery timeline and a
milestone payment schedule.

Both adjustments are taken against the raw base rate:

    total = base + base×(complexity_mult − 1) + base×(urgency_mult − 1)
    not_to_exceed = ceil(total × (1 + buffer))

All arithmetic is Decimal; rounding happens only at the documented points.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Optional

from quote_automation.models.enums import ProjectType, Urgency
from quote_automation.models.schemas import PaymentStructure, QuoteEstimate
from quote_automation.pricing.complexity import complexity_level
from quote_automation.pricing.rate_tables import RateTables

logger = logging.getLogger(__name__)

DEFAULT_BASE_RATE = Decimal("5000")
DEFAULT_BASE_TIMELINE_WEEKS = 6
CENTS = Decimal("0.01")
WHOLE = Decimal("1")

# deposit, milestone_1, milestone_2; final takes the rounding residual
PAYMENT_SPLIT: dict[str, Decimal] = {
    "deposit": Decimal("0.30"),
    "milestone_1": Decimal("0.30"),
    "milestone_2": Decimal("0.20"),
    "final": Decimal("0.20"),
}


class QuoteCalculator:
    """Pure pricing over an injected, read-only set of rate tables."""

    def __init__(self, rate_tables: Optional[RateTables] = None):
        self.tables = rate_tables or RateTables.from_settings()

    def calculate(
        self,
        project_type: ProjectType,
        complexity_score: Decimal,
        urgency: Optional[Urgency],
        now: datetime,
    ) -> QuoteEstimate:
        project_type = ProjectType(project_type)
        urgency = Urgency(urgency or Urgency.STANDARD)
        complexity_score = Decimal(complexity_score)

        # ── Complexity ───────────────────────────────────
        level = complexity_level(complexity_score)
        complexity_multiplier = self.tables.complexity_multipliers[level]

        # ── Base rate ────────────────────────────────────
        base_rate = self.tables.base_rates.get(project_type)
        if base_rate is None:
            logger.warning(
                f"No base rate configured for '{project_type.value}', "
                f"falling back to {DEFAULT_BASE_RATE}"
            )
            base_rate = DEFAULT_BASE_RATE

        complexity_adjustment = base_rate * (complexity_multiplier - 1)

        # ── Urgency ──────────────────────────────────────
        urgency_multiplier = self.tables.urgency_multipliers[urgency]
        urgency_adjustment = base_rate * (urgency_multiplier - 1)

        total_estimate = (base_rate + complexity_adjustment + urgency_adjustment).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
        not_to_exceed = self.not_to_exceed(total_estimate)

        # ── Timeline ─────────────────────────────────────
        base_weeks = self.tables.base_timeline_weeks.get(project_type, DEFAULT_BASE_TIMELINE_WEEKS)
        weeks = math.ceil(Decimal(base_weeks) * complexity_multiplier)

        estimate = QuoteEstimate(
            complexity_score=complexity_score,
            complexity_level=level,
            complexity_multiplier=complexity_multiplier,
            urgency_multiplier=urgency_multiplier,
            base_rate=base_rate.quantize(CENTS),
            complexity_adjustment=complexity_adjustment.quantize(CENTS, rounding=ROUND_HALF_UP),
            urgency_adjustment=urgency_adjustment.quantize(CENTS, rounding=ROUND_HALF_UP),
            total_estimate=total_estimate,
            not_to_exceed=not_to_exceed,
            estimated_timeline_weeks=weeks,
            delivery_date=now + timedelta(weeks=weeks),
            payment_structure=payment_structure(total_estimate),
            valid_until=now + timedelta(days=self.tables.quote_validity_days),
        )
        logger.debug(
            f"Priced {project_type.value}/{urgency.value} at score {complexity_score} "
            f"({level.value}): total={total_estimate} nte={not_to_exceed} weeks={weeks}"
        )
        return estimate

    def not_to_exceed(self, total_estimate: Decimal) -> Decimal:
        """Ceiling of total × (1 + buffer), in whole currency units."""
        buffered = total_estimate * (1 + self.tables.not_to_exceed_buffer)
        return buffered.to_integral_value(rounding=ROUND_CEILING)


def payment_structure(total_estimate: Decimal) -> PaymentStructure:
    """
    Split a total into 30/30/20/20 whole-unit installments.

    The first three are rounded half-up individually; ``final`` receives
    whatever remains of the rounded total, so the installments always sum
    to round(total) and never drift more than one unit from the estimate.
    """
    rounded_total = total_estimate.quantize(WHOLE, rounding=ROUND_HALF_UP)
    parts = {
        name: (total_estimate * pct).quantize(WHOLE, rounding=ROUND_HALF_UP)
        for name, pct in PAYMENT_SPLIT.items()
        if name != "final"
    }
    parts["final"] = rounded_total - sum(parts.values())
    return PaymentStructure(**parts)
