"""
Request-scoped dependencies: caller identity and service lookups.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from quote_automation.errors import Forbidden, Unauthorized
from quote_automation.pricing.bundle_pricing import BundlePricingCalculator
from quote_automation.persistence.catalog_repository import CatalogRepository
from quote_automation.services.quote_service import QuoteService


def current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Caller identity, set by the upstream identity provider."""
    if not x_user_id:
        raise Unauthorized("Unauthorized")
    return x_user_id


def staff_user_id(request: Request, user_id: str = Depends(current_user_id)) -> str:
    """Caller identity, restricted to the configured staff accounts."""
    if user_id not in request.app.state.settings.staff_user_ids:
        raise Forbidden("Staff access required")
    return user_id


def quote_service(request: Request) -> QuoteService:
    return request.app.state.quote_service


def bundle_pricing(request: Request) -> BundlePricingCalculator:
    return request.app.state.bundle_pricing


def catalog(request: Request) -> CatalogRepository:
    return request.app.state.catalog
