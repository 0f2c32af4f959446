"""
Catalog Repository — lookup entities for bundle pricing: revenue categories,
company scales, complexity tiers and base pricing rows.

Revenue categories and company scales resolve by code first, then by display
name, both case-insensitively. Lowercased ``code_key`` / ``name_key`` fields
are stored alongside each document and indexed, so each step is a plain
equality lookup.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

from pymongo import ASCENDING

from quote_automation.models.schemas import (
    BasePricing,
    BasePricingDetail,
    CatalogRef,
    CompanyScale,
    ComplexityTier,
    RevenueCategory,
)
from quote_automation.persistence.document_store import DocumentStore

logger = logging.getLogger(__name__)

Keyed = TypeVar("Keyed", RevenueCategory, CompanyScale)


class CatalogRepository:
    def __init__(self, db: Any = None):
        self.categories: DocumentStore[RevenueCategory] = DocumentStore(
            db, "revenue_categories", RevenueCategory
        )
        self.scales: DocumentStore[CompanyScale] = DocumentStore(db, "company_scales", CompanyScale)
        self.tiers: DocumentStore[ComplexityTier] = DocumentStore(db, "complexity_tiers", ComplexityTier)
        self.base_pricing: DocumentStore[BasePricing] = DocumentStore(db, "base_pricing", BasePricing)

    def ensure_indexes(self) -> None:
        if self.categories.in_memory:
            return
        for store in (self.categories, self.scales):
            store.collection.create_index([("code_key", ASCENDING)], unique=True)
            store.collection.create_index([("name_key", ASCENDING)])
        self.tiers.collection.create_index([("rating", ASCENDING)], unique=True)
        self.base_pricing.collection.create_index(
            [("bundle_id", ASCENDING), ("revenue_category_id", ASCENDING), ("company_scale_id", ASCENDING)],
            unique=True,
        )

    # ── Lookups ──────────────────────────────────────────

    def find_revenue_category(self, key: str) -> Optional[RevenueCategory]:
        return _find_by_code_or_name(self.categories, key)

    def find_company_scale(self, key: str) -> Optional[CompanyScale]:
        return _find_by_code_or_name(self.scales, key)

    def find_base_pricing(
        self, bundle_id: str, revenue_category_id: str, company_scale_id: str
    ) -> Optional[BasePricing]:
        return self.base_pricing.find_one({
            "bundle_id": bundle_id,
            "revenue_category_id": revenue_category_id,
            "company_scale_id": company_scale_id,
        })

    def find_complexity_tier(self, rating: int) -> Optional[ComplexityTier]:
        return self.tiers.find_one({"rating": rating})

    # ── Listings ─────────────────────────────────────────

    def list_revenue_categories(self) -> list[RevenueCategory]:
        return self.categories.find(sort="name")

    def list_company_scales(self) -> list[CompanyScale]:
        return self.scales.find(sort="revenue_min")

    def list_complexity_tiers(self) -> list[ComplexityTier]:
        return self.tiers.find(sort="rating")

    def list_base_pricing(self) -> list[BasePricingDetail]:
        """Price rows by bundle id, each carrying its category and scale summary."""
        categories = {c.id: _ref(c) for c in self.categories.find()}
        scales = {s.id: _ref(s) for s in self.scales.find()}
        return [
            BasePricingDetail(
                **row.model_dump(),
                revenue_category=categories.get(row.revenue_category_id),
                company_scale=scales.get(row.company_scale_id),
            )
            for row in self.base_pricing.find(sort="bundle_id")
        ]

    # ── Deletes (cascade to base pricing) ────────────────

    def delete_revenue_categories(self) -> int:
        """Remove every revenue category and the price rows that reference them."""
        ids = [c.id for c in self.categories.find()]
        dropped = self.base_pricing.delete({"revenue_category_id": {"$in": ids}})
        if dropped:
            logger.info(f"Removed {dropped} base pricing row(s) with their revenue categories")
        return self.categories.delete_all()

    def delete_company_scales(self) -> int:
        """Remove every company scale and the price rows that reference them."""
        ids = [s.id for s in self.scales.find()]
        dropped = self.base_pricing.delete({"company_scale_id": {"$in": ids}})
        if dropped:
            logger.info(f"Removed {dropped} base pricing row(s) with their company scales")
        return self.scales.delete_all()

    # ── Upserts (seeding / admin) ────────────────────────

    def upsert_revenue_category(self, category: RevenueCategory) -> RevenueCategory:
        existing = self.categories.find_one({"code_key": category.code.lower()})
        if existing:
            category = category.model_copy(update={"id": existing.id})
        return self.categories.save(category, **_keys(category))

    def upsert_company_scale(self, scale: CompanyScale) -> CompanyScale:
        existing = self.scales.find_one({"code_key": scale.code.lower()})
        if existing:
            scale = scale.model_copy(update={"id": existing.id})
        return self.scales.save(scale, **_keys(scale))

    def upsert_complexity_tier(self, tier: ComplexityTier) -> ComplexityTier:
        existing = self.find_complexity_tier(tier.rating)
        if existing:
            tier = tier.model_copy(update={"id": existing.id})
        return self.tiers.save(tier)

    def upsert_base_pricing(self, row: BasePricing) -> BasePricing:
        existing = self.find_base_pricing(row.bundle_id, row.revenue_category_id, row.company_scale_id)
        if existing:
            row = row.model_copy(update={"id": existing.id})
        return self.base_pricing.save(row)


def _ref(entity: RevenueCategory | CompanyScale) -> CatalogRef:
    return CatalogRef(id=entity.id, name=entity.name, code=entity.code)


def _keys(entity: RevenueCategory | CompanyScale) -> dict[str, str]:
    return {"code_key": entity.code.lower(), "name_key": entity.name.lower()}


def _find_by_code_or_name(store: DocumentStore[Keyed], key: str) -> Optional[Keyed]:
    """Two-step lookup: exact code, then display name; both case-insensitive."""
    needle = key.strip().lower()
    found = store.find_one({"code_key": needle})
    if found is None:
        found = store.find_one({"name_key": needle})
        if found is not None:
            logger.debug(f"{store.name}: '{key}' resolved by name")
    return found
