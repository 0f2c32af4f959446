"""
Bundle Pricing Calculator — prices a bundle from revenue category, company
scale and a 1–10 complexity rating.

Unlike the quote calculator, complexity compounds on the scale-adjusted
amount rather than on the raw base:

    scale_adjustment      = base × (scale_mult − 1)
    complexity_adjustment = (base + scale_adjustment) × (tier_mult − 1)
    final                 = base + scale_adjustment + complexity_adjustment
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from quote_automation.errors import CategoryNotFound, PricingNotFound, ScaleNotFound
from quote_automation.models.schemas import BundlePricingResult, PricingBreakdown
from quote_automation.persistence.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)

DEFAULT_COMPLEXITY_RATING = 5
CENTS = Decimal("0.01")


class BundlePricingCalculator:
    def __init__(self, catalog: CatalogRepository):
        self.catalog = catalog

    def calculate_pricing(
        self,
        bundle_id: str,
        revenue_category: str,
        company_scale: str,
        complexity_rating: int | None = None,
    ) -> BundlePricingResult:
        """Compute the bundle price with a full additive breakdown."""
        rating = complexity_rating or DEFAULT_COMPLEXITY_RATING

        category = self.catalog.find_revenue_category(revenue_category)
        if category is None:
            raise CategoryNotFound(revenue_category)

        scale = self.catalog.find_company_scale(company_scale)
        if scale is None:
            raise ScaleNotFound(company_scale)

        pricing = self.catalog.find_base_pricing(bundle_id, category.id, scale.id)
        if pricing is None:
            raise PricingNotFound(bundle_id, revenue_category, company_scale)

        tier = self.catalog.find_complexity_tier(rating)
        if tier is None:
            logger.warning(f"No complexity tier for rating {rating}, using multiplier 1.0")
            complexity_multiplier = Decimal("1.0")
        else:
            complexity_multiplier = tier.adjustment_multiplier

        base = pricing.base_price
        scale_adjustment = base * (scale.multiplier - 1)
        complexity_adjustment = (base + scale_adjustment) * (complexity_multiplier - 1)
        final_price = base + scale_adjustment + complexity_adjustment

        logger.info(
            f"Bundle {bundle_id} [{category.code}/{scale.code}/r{rating}]: "
            f"base={base} final={_cents(final_price)}"
        )
        return BundlePricingResult(
            base_price=base,
            scale_multiplier=scale.multiplier,
            complexity_multiplier=complexity_multiplier,
            final_price=_cents(final_price),
            breakdown=PricingBreakdown(
                base=base,
                scale_adjustment=_cents(scale_adjustment),
                complexity_adjustment=_cents(complexity_adjustment),
            ),
        )


def _cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
