"""
Complexity Estimator — derives a 0.00–10.00 complexity score from project scope.

Additive scoring with capped contributions, then a global cap:
  features      0.5 each, max 3.0
  integrations  0.8 per complex integration, max 3.0
  timeline      urgent +1.5, critical +2.5
  project type  creative 1.0, fullstack 2.0, web3 3.0, ai_automation 2.5
  urgency       urgent +0.5, critical +1.0
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from quote_automation.models.enums import ComplexityLevel, ProjectType, Urgency
from quote_automation.models.schemas import ProjectScope

MAX_SCORE = Decimal("10.0")
TWO_PLACES = Decimal("0.01")

FEATURE_WEIGHT = Decimal("0.5")
FEATURE_CAP = Decimal("3.0")
INTEGRATION_WEIGHT = Decimal("0.8")
INTEGRATION_CAP = Decimal("3.0")
COMPLEX_INTEGRATION_TYPES = frozenset({"payment", "blockchain", "ai", "custom_api"})

TIMELINE_PRESSURE: dict[str, Decimal] = {
    "urgent": Decimal("1.5"),
    "critical": Decimal("2.5"),
}

TYPE_BASE_COMPLEXITY: dict[ProjectType, Decimal] = {
    ProjectType.CREATIVE: Decimal("1.0"),
    ProjectType.FULLSTACK: Decimal("2.0"),
    ProjectType.WEB3: Decimal("3.0"),
    ProjectType.AI_AUTOMATION: Decimal("2.5"),
}

URGENCY_PRESSURE: dict[Urgency, Decimal] = {
    Urgency.STANDARD: Decimal("0"),
    Urgency.URGENT: Decimal("0.5"),
    Urgency.CRITICAL: Decimal("1.0"),
}

ScopeInput = Union[ProjectScope, Mapping[str, Any], None]


def estimate_complexity(
    project_type: ProjectType,
    scope: ScopeInput,
    urgency: Optional[Urgency] = Urgency.STANDARD,
) -> Decimal:
    """
    Score a project's complexity. Pure and deterministic.

    ``project_type`` must already be validated by the caller; an empty or
    missing scope counts as no features, no integrations, standard timeline.
    """
    project_type = ProjectType(project_type)
    urgency = Urgency(urgency or Urgency.STANDARD)
    scope = _coerce_scope(scope)

    score = min(len(scope.features) * FEATURE_WEIGHT, FEATURE_CAP)

    complex_integrations = [
        i for i in scope.integrations if i.type in COMPLEX_INTEGRATION_TYPES
    ]
    score += min(len(complex_integrations) * INTEGRATION_WEIGHT, INTEGRATION_CAP)

    score += TIMELINE_PRESSURE.get(scope.timeline, Decimal("0"))
    score += TYPE_BASE_COMPLEXITY[project_type]
    score += URGENCY_PRESSURE[urgency]

    return min(score, MAX_SCORE).quantize(TWO_PLACES)


def complexity_level(score: Decimal) -> ComplexityLevel:
    """Bucket a score: <3 low, <6 medium, <8 high, otherwise critical."""
    if score < 3:
        return ComplexityLevel.LOW
    if score < 6:
        return ComplexityLevel.MEDIUM
    if score < 8:
        return ComplexityLevel.HIGH
    return ComplexityLevel.CRITICAL


def _coerce_scope(scope: ScopeInput) -> ProjectScope:
    if scope is None:
        return ProjectScope()
    if isinstance(scope, ProjectScope):
        return scope
    return ProjectScope.model_validate(dict(scope))
