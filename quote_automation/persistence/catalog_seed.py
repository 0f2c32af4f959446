"""
Default bundle pricing catalog and the seeding routine that loads it.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from quote_automation.models.enums import SeedType
from quote_automation.models.schemas import (
    BasePricing,
    CompanyScale,
    ComplexityTier,
    RevenueCategory,
)
from quote_automation.persistence.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)

D = Decimal

REVENUE_CATEGORIES: list[dict[str, Any]] = [
    {"name": "SaaS", "code": "saas", "description": "Software as a Service businesses"},
    {"name": "E-Commerce", "code": "ecommerce", "description": "Online retail and marketplace businesses"},
    {"name": "Consulting", "code": "consulting", "description": "Professional services and consulting firms"},
    {"name": "Agency", "code": "agency", "description": "Marketing, design, and creative agencies"},
    {"name": "Marketplace", "code": "marketplace", "description": "Two-sided marketplace platforms"},
    {"name": "Fintech", "code": "fintech", "description": "Financial technology services"},
    {"name": "Healthcare", "code": "healthcare", "description": "Healthcare and medical services"},
]

COMPANY_SCALES: list[dict[str, Any]] = [
    {"name": "Pre-Revenue", "code": "pre_revenue", "revenue_min": D("0"), "revenue_max": D("0"),
     "multiplier": D("0.5"), "description": "No revenue yet"},
    {"name": "Startup (< $100K)", "code": "startup_100k", "revenue_min": D("1"), "revenue_max": D("100000"),
     "multiplier": D("1.0"), "description": "Early stage startup"},
    {"name": "Small ($100K - $1M)", "code": "small_1m", "revenue_min": D("100000"), "revenue_max": D("1000000"),
     "multiplier": D("1.2"), "description": "Small business"},
    {"name": "Medium ($1M - $10M)", "code": "medium_10m", "revenue_min": D("1000000"),
     "revenue_max": D("10000000"), "multiplier": D("1.5"), "description": "Medium-sized business"},
    {"name": "Large ($10M - $50M)", "code": "large_50m", "revenue_min": D("10000000"),
     "revenue_max": D("50000000"), "multiplier": D("2.0"), "description": "Large enterprise"},
    {"name": "Enterprise ($50M+)", "code": "enterprise_50m_plus", "revenue_min": D("50000000"),
     "revenue_max": None, "multiplier": D("3.0"), "description": "Enterprise organization"},
]

COMPLEXITY_TIERS: list[dict[str, Any]] = [
    {"rating": 1, "name": "Very Simple", "adjustment_multiplier": D("0.7"),
     "description": "Basic features, minimal customization"},
    {"rating": 2, "name": "Simple", "adjustment_multiplier": D("0.85"),
     "description": "Standard features, some customization"},
    {"rating": 3, "name": "Low-Medium", "adjustment_multiplier": D("0.95"),
     "description": "Multiple features, moderate customization"},
    {"rating": 4, "name": "Medium", "adjustment_multiplier": D("1.0"),
     "description": "Complex features, significant customization"},
    {"rating": 5, "name": "Medium-High", "adjustment_multiplier": D("1.1"),
     "description": "Advanced features, heavy customization"},
    {"rating": 6, "name": "High", "adjustment_multiplier": D("1.2"),
     "description": "Sophisticated features, extensive integration"},
    {"rating": 7, "name": "Very High", "adjustment_multiplier": D("1.35"),
     "description": "Complex architecture, multiple integrations"},
    {"rating": 8, "name": "Extremely High", "adjustment_multiplier": D("1.5"),
     "description": "Enterprise-grade, mission-critical"},
    {"rating": 9, "name": "Expert Level", "adjustment_multiplier": D("1.75"),
     "description": "Cutting-edge technology, specialized expertise"},
    {"rating": 10, "name": "Maximum", "adjustment_multiplier": D("2.0"),
     "description": "Most complex projects, R&D level"},
]

BUNDLES: list[dict[str, Any]] = [
    {"id": "bundle_saas_starter", "name": "SaaS Starter Bundle", "base_price": D("5000")},
    {"id": "bundle_saas_pro", "name": "SaaS Pro Bundle", "base_price": D("12000")},
    {"id": "bundle_saas_enterprise", "name": "SaaS Enterprise Bundle", "base_price": D("25000")},
    {"id": "bundle_web_basic", "name": "Web Basic", "base_price": D("3000")},
    {"id": "bundle_web_advanced", "name": "Web Advanced", "base_price": D("8000")},
    {"id": "bundle_mobile_app", "name": "Mobile App", "base_price": D("15000")},
]


def seed_catalog(
    catalog: CatalogRepository,
    seed_type: SeedType = SeedType.ALL,
    overwrite: bool = False,
) -> dict[str, Any]:
    """
    Upsert the default catalog. Returns {"seeded": [...groups], "count": rows}.

    Base pricing rows are generated for every category × scale pair, priced
    at the bundle price times the scale multiplier.
    Overwriting categories or scales also drops the price rows that point at
    them; re-seed pricing afterwards to restore them.
    """
    seed_type = SeedType(seed_type)
    seeded: list[str] = []
    count = 0

    def wanted(group: SeedType) -> bool:
        return seed_type in (SeedType.ALL, group)

    if wanted(SeedType.CATEGORIES):
        if overwrite:
            catalog.delete_revenue_categories()
        for data in REVENUE_CATEGORIES:
            catalog.upsert_revenue_category(RevenueCategory(**data))
            count += 1
        seeded.append(SeedType.CATEGORIES.value)

    if wanted(SeedType.SCALES):
        if overwrite:
            catalog.delete_company_scales()
        for data in COMPANY_SCALES:
            catalog.upsert_company_scale(CompanyScale(**data))
            count += 1
        seeded.append(SeedType.SCALES.value)

    if wanted(SeedType.COMPLEXITY):
        if overwrite:
            catalog.tiers.delete_all()
        for data in COMPLEXITY_TIERS:
            catalog.upsert_complexity_tier(ComplexityTier(**data))
            count += 1
        seeded.append(SeedType.COMPLEXITY.value)

    if wanted(SeedType.PRICING):
        if overwrite:
            catalog.base_pricing.delete_all()
        categories = catalog.list_revenue_categories()
        scales = catalog.list_company_scales()
        for bundle in BUNDLES:
            for category in categories:
                for scale in scales:
                    catalog.upsert_base_pricing(BasePricing(
                        bundle_id=bundle["id"],
                        bundle_name=bundle["name"],
                        revenue_category_id=category.id,
                        company_scale_id=scale.id,
                        base_price=bundle["base_price"] * scale.multiplier,
                        description=f"{bundle['name']} for {category.name} at {scale.name} scale",
                    ))
                    count += 1
        seeded.append(SeedType.PRICING.value)

    logger.info(f"Seeded catalog groups {seeded} ({count} rows)")
    return {"seeded": seeded, "count": count}
