"""
Pricing engine — rate tables, complexity scoring, quote and bundle pricing.

Pure computation; persistence and lifecycle live in services/.
"""

from .rate_tables import RateTables
from .complexity import complexity_level, estimate_complexity
from .quote_calculator import QuoteCalculator, payment_structure
from .bundle_pricing import BundlePricingCalculator

__all__ = [
    "RateTables",
    "estimate_complexity",
    "complexity_level",
    "QuoteCalculator",
    "payment_structure",
    "BundlePricingCalculator",
]
