"""
FastAPI application factory and API package.

Run with:
    uvicorn quote_automation.api:app --reload --port 8000

Or via main.py:
    python -m quote_automation --serve
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quote_automation.api.routes import (
    health_router,
    pricing_router,
    project_router,
    quote_router,
)
from quote_automation.config import Settings, get_settings
from quote_automation.errors import QuoteAutomationError
from quote_automation.persistence import (
    CatalogRepository,
    MongoClient,
    ProjectRepository,
    QuoteRepository,
)
from quote_automation.pricing import BundlePricingCalculator, QuoteCalculator, RateTables
from quote_automation.services import AuditService, QuoteService
from quote_automation.services.quote_service import Clock, utc_now

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[str, int] = {
    "not_found": 404,
    "forbidden": 403,
    "unauthorized": 401,
    "conflict": 400,
    "expired": 400,
    "validation_error": 400,
}


def create_app(
    settings: Optional[Settings] = None,
    db: Any = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """
    Application factory — wire repositories and services, register routes.

    ``db`` overrides the MongoDB handle; when omitted, one is opened unless
    the settings are in mock mode (in-memory storage).
    """
    settings = settings or get_settings()
    if db is None and not settings.mock_mode:
        db = MongoClient(settings).get_database()

    projects = ProjectRepository(db)
    quotes = QuoteRepository(db)
    catalog = CatalogRepository(db)
    quotes.ensure_indexes()
    catalog.ensure_indexes()

    application = FastAPI(
        title=f"{settings.app_name} API",
        description="Quote generation, lifecycle and bundle pricing",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: browser frontends call the API directly
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.state.settings = settings
    application.state.catalog = catalog
    application.state.bundle_pricing = BundlePricingCalculator(catalog)
    application.state.quote_service = QuoteService(
        projects=projects,
        quotes=quotes,
        calculator=QuoteCalculator(RateTables.from_settings(settings)),
        audit=AuditService(db),
        clock=clock,
    )

    @application.exception_handler(QuoteAutomationError)
    async def domain_error(request: Request, exc: QuoteAutomationError):
        status = STATUS_BY_KIND.get(exc.kind, 500)
        logger.info(f"{request.method} {request.url.path} → {status} {exc.kind}: {exc.message}")
        return JSONResponse(status_code=status, content={"success": False, "error": exc.to_dict()})

    @application.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]) for err in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": {
                    "kind": "validation_error",
                    "message": f"Invalid or missing fields: {', '.join(fields)}",
                },
            },
        )

    application.include_router(health_router, tags=["Health"])
    application.include_router(project_router, prefix="/api/projects", tags=["Projects"])
    application.include_router(quote_router, prefix="/api/quotes", tags=["Quotes"])
    application.include_router(pricing_router, prefix="/api/pricing", tags=["Pricing"])

    logger.info(f"{settings.app_name} API ready (mock_mode={settings.mock_mode})")
    return application


# Module-level instance for `uvicorn quote_automation.api:app`
app = create_app()
