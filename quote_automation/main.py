"""
Quote Automation — Main Entry Point

Run as an API server:
    python -m quote_automation --serve
    # or: uvicorn quote_automation.api:app --reload --port 8000

Price a sample project from the command line (no server, in-memory storage):
    python -m quote_automation fullstack urgent
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from quote_automation.config import get_settings
from quote_automation.models.enums import ProjectType, Urgency
from quote_automation.persistence import ProjectRepository, QuoteRepository
from quote_automation.pricing import QuoteCalculator, RateTables
from quote_automation.services import AuditService, QuoteService
from quote_automation.utils.logger import setup_logging


def run(project_type: str = "fullstack", urgency: str = "standard") -> dict:
    """Generate a quote for a sample project and log a summary."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    service = QuoteService(
        projects=ProjectRepository(),
        quotes=QuoteRepository(),
        calculator=QuoteCalculator(RateTables.from_settings(settings)),
        audit=AuditService(),
    )
    project = service.create_project(
        user_id="cli",
        project_name="Sample project",
        project_type=ProjectType(project_type),
        urgency=Urgency(urgency),
    )
    quote = service.generate_quote(project.id, "cli")

    logger.info("-" * 60)
    logger.info(f"  Project type:   {project_type} ({urgency})")
    logger.info(f"  Base rate:      ${quote.base_rate:,.2f}")
    logger.info(f"  Total:          ${quote.total_estimate:,.2f}")
    logger.info(f"  Not to exceed:  ${quote.not_to_exceed:,.2f}")
    logger.info(f"  Timeline:       {quote.estimated_timeline_weeks} weeks")
    logger.info(f"  Valid until:    {quote.valid_until:%Y-%m-%d}")
    logger.info("-" * 60)
    return quote.model_dump(mode="json")


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("quote_automation.api:app", host=host, port=port, reload=True)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="quote_automation", description=__doc__.splitlines()[1])
    parser.add_argument("project_type", nargs="?", default="fullstack",
                        choices=[t.value for t in ProjectType])
    parser.add_argument("urgency", nargs="?", default="standard",
                        choices=[u.value for u in Urgency])
    parser.add_argument("--serve", action="store_true", help="run the API server")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    if args.serve:
        serve(port=args.port)
    else:
        run(args.project_type, args.urgency)


if __name__ == "__main__":
    main()
