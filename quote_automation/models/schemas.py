"""
Data schemas for projects, quotes and the bundle pricing catalog.
Currency amounts are Decimal internally and render as plain numbers in JSON.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator

from .enums import (
    ACTIVE_QUOTE_STATUSES,
    ComplexityLevel,
    ProjectStatus,
    ProjectType,
    QuoteStatus,
    Urgency,
)

# Decimal for arithmetic and storage, float only at the JSON boundary
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Project intake ───────────────────────────────────────


class Integration(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = ""
    name: str = ""


class ProjectScope(BaseModel):
    """Structured scope captured at intake. Unknown keys are kept."""
    model_config = ConfigDict(extra="allow")

    features: list[Any] = []
    integrations: list[Integration] = []
    timeline: str = "standard"

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Raw JSON may carry nulls where lists or a timeline are expected
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("integrations", mode="before")
    @classmethod
    def _untyped_integrations(cls, value: Any) -> Any:
        # Entries without a usable type tag are kept but never count as complex
        if not isinstance(value, list):
            return value
        items = []
        for item in value:
            if isinstance(item, Integration):
                items.append(item)
            elif isinstance(item, dict):
                items.append({
                    **{k: v for k, v in item.items() if v is not None},
                    "type": str(item.get("type") or ""),
                })
            else:
                items.append({"type": ""})
        return items


class Project(BaseModel):
    """A project assessment owned by one user."""
    id: str = Field(default_factory=_new_id)
    user_id: str
    project_name: str
    project_type: ProjectType
    project_description: str = ""
    project_scope: ProjectScope = Field(default_factory=ProjectScope)
    urgency: Optional[Urgency] = None
    budget_range: Optional[str] = None
    complexity_score: Optional[Money] = None  # cached once computed
    status: ProjectStatus = ProjectStatus.INITIATED
    created_at: datetime = Field(default_factory=_utcnow)


# ── Quotes ───────────────────────────────────────────────


class PaymentStructure(BaseModel):
    """Milestone split of the total estimate in whole currency units (30/30/20/20)."""
    deposit: Money
    milestone_1: Money
    milestone_2: Money
    final: Money

    def total(self) -> Decimal:
        return self.deposit + self.milestone_1 + self.milestone_2 + self.final


class QuoteEstimate(BaseModel):
    """Pure output of the quote calculator, before persistence."""
    complexity_score: Money
    complexity_level: ComplexityLevel
    complexity_multiplier: Money
    urgency_multiplier: Money
    base_rate: Money
    complexity_adjustment: Money
    urgency_adjustment: Money
    total_estimate: Money
    not_to_exceed: Money
    estimated_timeline_weeks: int
    delivery_date: datetime
    payment_structure: PaymentStructure
    valid_until: datetime


class Quote(BaseModel):
    id: str = Field(default_factory=_new_id)
    project_id: str
    user_id: str
    base_rate: Money
    complexity_adjustment: Money = Decimal("0")
    urgency_adjustment: Money = Decimal("0")
    total_estimate: Money
    not_to_exceed: Money
    estimated_timeline_weeks: Optional[int] = None
    delivery_date: Optional[datetime] = None
    payment_structure: Optional[PaymentStructure] = None
    terms_accepted: bool = False
    accepted_at: Optional[datetime] = None
    valid_until: datetime
    status: QuoteStatus = QuoteStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    metadata: dict[str, Any] = {}

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_QUOTE_STATUSES


class ProjectSummary(BaseModel):
    project_name: str
    project_type: ProjectType
    project_description: str = ""
    urgency: Optional[Urgency] = None


class QuoteView(Quote):
    """A quote as shown to its owner, with the project it prices."""
    project: Optional[ProjectSummary] = None


# ── Bundle pricing catalog ───────────────────────────────


class RevenueCategory(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    code: str
    description: str = ""
    metadata: dict[str, Any] = {}


class CompanyScale(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    code: str
    revenue_min: Optional[Money] = None
    revenue_max: Optional[Money] = None
    multiplier: Money = Decimal("1.0")
    description: str = ""


class ComplexityTier(BaseModel):
    id: str = Field(default_factory=_new_id)
    rating: int
    name: str
    description: str = ""
    adjustment_multiplier: Money = Decimal("1.0")


class BasePricing(BaseModel):
    id: str = Field(default_factory=_new_id)
    bundle_id: str
    bundle_name: str
    revenue_category_id: str
    company_scale_id: str
    base_price: Money
    description: str = ""
    metadata: dict[str, Any] = {}


class CatalogRef(BaseModel):
    id: str
    name: str
    code: str


class BasePricingDetail(BasePricing):
    """A price row with its category and scale resolved for display."""
    revenue_category: Optional[CatalogRef] = None
    company_scale: Optional[CatalogRef] = None


class PricingBreakdown(BaseModel):
    base: Money
    scale_adjustment: Money
    complexity_adjustment: Money


class BundlePricingResult(BaseModel):
    base_price: Money
    scale_multiplier: Money
    complexity_multiplier: Money
    final_price: Money
    breakdown: PricingBreakdown


# ── Audit trail ──────────────────────────────────────────


class AuditEntry(BaseModel):
    timestamp: datetime = Field(default_factory=_utcnow)
    user_id: Optional[str] = None
    action: str
    entity_type: str = ""
    entity_id: str = ""
    details: dict[str, Any] = {}
