"""
API routes — thin HTTP layer that delegates to the services.

Routes:
  GET  /health                              → API health check
  POST /api/projects                        → Register a project assessment
  GET  /api/projects/{project_id}           → Read own project
  POST /api/quotes/generate/{project_id}    → Generate a quote
  GET  /api/quotes                          → List own quotes
  POST /api/quotes/expire                   → Expire overdue quotes (staff only)
  GET  /api/quotes/{quote_id}               → Read own quote
  POST /api/quotes/{quote_id}/send          → Mark quote as sent (staff only)
  POST /api/quotes/{quote_id}/accept        → Accept quote
  POST /api/quotes/{quote_id}/decline       → Decline quote
  POST /api/pricing/calculate               → Bundle pricing
  GET  /api/pricing/categories|scales|complexity|base → Catalog reads
  POST /api/pricing/seed                    → Seed the default catalog
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quote_automation.api.dependencies import (
    bundle_pricing,
    catalog,
    current_user_id,
    quote_service,
    staff_user_id,
)
from quote_automation.models.enums import ProjectType, SeedType, Urgency
from quote_automation.models.schemas import (
    BasePricing,
    BundlePricingResult,
    CompanyScale,
    ComplexityTier,
    Project,
    ProjectScope,
    Quote,
    QuoteView,
    RevenueCategory,
)
from quote_automation.persistence.catalog_repository import CatalogRepository
from quote_automation.persistence.catalog_seed import seed_catalog
from quote_automation.pricing.bundle_pricing import BundlePricingCalculator
from quote_automation.services.quote_service import QuoteService

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
project_router = APIRouter()
quote_router = APIRouter()
pricing_router = APIRouter()


# ── Request / response schemas ───────────────────────────


class ProjectCreateRequest(BaseModel):
    project_name: str = Field(min_length=1)
    project_type: ProjectType
    project_description: str = ""
    project_scope: Optional[ProjectScope] = None
    urgency: Optional[Urgency] = None
    budget_range: Optional[str] = None


class ProjectResponse(BaseModel):
    success: bool = True
    project: Project


class QuoteResponse(BaseModel):
    success: bool = True
    message: str = ""
    quote: Quote


class QuoteDetailResponse(BaseModel):
    success: bool = True
    quote: QuoteView


class QuoteListResponse(BaseModel):
    success: bool = True
    quotes: list[QuoteView]


class DeclineRequest(BaseModel):
    reason: Optional[str] = None


class ExpireResponse(BaseModel):
    success: bool = True
    expired: int


class PricingRequest(BaseModel):
    bundle_id: str = Field(min_length=1)
    revenue_category: str = Field(min_length=1)
    company_revenue_scale: str = Field(min_length=1)
    complexity_rating: Optional[int] = Field(default=None, ge=1, le=10)


class PricingResponse(BaseModel):
    success: bool = True
    pricing: BundlePricingResult


class SeedRequest(BaseModel):
    seed_type: SeedType = SeedType.ALL
    overwrite: bool = False


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Projects ─────────────────────────────────────────────

@project_router.post("", response_model=ProjectResponse)
def create_project(
    body: ProjectCreateRequest,
    user_id: str = Depends(current_user_id),
    service: QuoteService = Depends(quote_service),
):
    project = service.create_project(user_id=user_id, **body.model_dump())
    return ProjectResponse(project=project)


@project_router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    user_id: str = Depends(current_user_id),
    service: QuoteService = Depends(quote_service),
):
    return ProjectResponse(project=service.get_project(project_id, user_id))


# ── Quotes ───────────────────────────────────────────────

@quote_router.post("/generate/{project_id}", response_model=QuoteResponse)
def generate_quote(
    project_id: str,
    user_id: str = Depends(current_user_id),
    service: QuoteService = Depends(quote_service),
):
    quote = service.generate_quote(project_id, user_id)
    return QuoteResponse(message="Quote generated successfully", quote=quote)


@quote_router.get("", response_model=QuoteListResponse)
def list_quotes(
    user_id: str = Depends(current_user_id),
    service: QuoteService = Depends(quote_service),
):
    return QuoteListResponse(quotes=service.list_quotes(user_id))


@quote_router.post("/expire", response_model=ExpireResponse)
def expire_quotes(
    _: str = Depends(staff_user_id),
    service: QuoteService = Depends(quote_service),
):
    return ExpireResponse(expired=service.expire_overdue())


@quote_router.get("/{quote_id}", response_model=QuoteDetailResponse)
def get_quote(
    quote_id: str,
    user_id: str = Depends(current_user_id),
    service: QuoteService = Depends(quote_service),
):
    return QuoteDetailResponse(quote=service.get_quote_view(quote_id, user_id))


@quote_router.post("/{quote_id}/send", response_model=QuoteResponse)
def send_quote(
    quote_id: str,
    _: str = Depends(staff_user_id),
    service: QuoteService = Depends(quote_service),
):
    return QuoteResponse(message="Quote sent", quote=service.send_quote(quote_id))


@quote_router.post("/{quote_id}/accept", response_model=QuoteResponse)
def accept_quote(
    quote_id: str,
    user_id: str = Depends(current_user_id),
    service: QuoteService = Depends(quote_service),
):
    quote = service.accept_quote(quote_id, user_id)
    return QuoteResponse(message="Quote accepted successfully", quote=quote)


@quote_router.post("/{quote_id}/decline", response_model=QuoteResponse)
def decline_quote(
    quote_id: str,
    body: Optional[DeclineRequest] = None,
    user_id: str = Depends(current_user_id),
    service: QuoteService = Depends(quote_service),
):
    reason = body.reason if body else None
    return QuoteResponse(message="Quote declined", quote=service.decline_quote(quote_id, user_id, reason))


# ── Bundle pricing ───────────────────────────────────────

@pricing_router.post("/calculate", response_model=PricingResponse)
def calculate_pricing(
    body: PricingRequest,
    _: str = Depends(current_user_id),
    calculator: BundlePricingCalculator = Depends(bundle_pricing),
):
    pricing = calculator.calculate_pricing(
        body.bundle_id,
        body.revenue_category,
        body.company_revenue_scale,
        body.complexity_rating,
    )
    return PricingResponse(pricing=pricing)


@pricing_router.get("/categories")
def list_categories(
    _: str = Depends(current_user_id),
    repo: CatalogRepository = Depends(catalog),
) -> dict[str, Any]:
    return {"success": True, "categories": _dump(repo.list_revenue_categories())}


@pricing_router.get("/scales")
def list_scales(
    _: str = Depends(current_user_id),
    repo: CatalogRepository = Depends(catalog),
) -> dict[str, Any]:
    return {"success": True, "scales": _dump(repo.list_company_scales())}


@pricing_router.get("/complexity")
def list_complexity_tiers(
    _: str = Depends(current_user_id),
    repo: CatalogRepository = Depends(catalog),
) -> dict[str, Any]:
    return {"success": True, "tiers": _dump(repo.list_complexity_tiers())}


@pricing_router.get("/base")
def list_base_pricing(
    _: str = Depends(current_user_id),
    repo: CatalogRepository = Depends(catalog),
) -> dict[str, Any]:
    return {"success": True, "pricing": _dump(repo.list_base_pricing())}


@pricing_router.post("/seed")
def seed(
    body: SeedRequest,
    _: str = Depends(current_user_id),
    repo: CatalogRepository = Depends(catalog),
) -> dict[str, Any]:
    result = seed_catalog(repo, body.seed_type, body.overwrite)
    return {"success": True, **result}


def _dump(items: list[RevenueCategory | CompanyScale | ComplexityTier | BasePricing]) -> list[dict]:
    return [item.model_dump(mode="json") for item in items]
