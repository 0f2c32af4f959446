"""
Quote Service — project intake and the quote lifecycle.

Lifecycle:
    pending → sent → accepted | declined | expired
    pending → declined | expired

Every read and write is scoped to the owning user except ``send_quote`` and
``expire_overdue``, which are staff operations gated at the API by the
configured staff accounts.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from quote_automation.errors import (
    DuplicateActiveQuote,
    Forbidden,
    InvalidTransition,
    NotFound,
    QuoteExpired,
)
from quote_automation.models.enums import (
    OPEN_QUOTE_STATUSES,
    ProjectStatus,
    ProjectType,
    QuoteStatus,
    Urgency,
)
from quote_automation.models.schemas import (
    Project,
    ProjectScope,
    ProjectSummary,
    Quote,
    QuoteView,
)
from quote_automation.persistence.quote_repository import ProjectRepository, QuoteRepository
from quote_automation.pricing.complexity import estimate_complexity
from quote_automation.pricing.quote_calculator import QuoteCalculator
from quote_automation.services.audit_service import AuditService

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuoteService:
    """Generates quotes for projects and drives them through their lifecycle."""

    def __init__(
        self,
        projects: ProjectRepository,
        quotes: QuoteRepository,
        calculator: QuoteCalculator,
        audit: AuditService,
        clock: Clock = utc_now,
    ):
        self.projects = projects
        self.quotes = quotes
        self.calculator = calculator
        self.audit = audit
        self.clock = clock

    # ── Project intake ───────────────────────────────────

    def create_project(
        self,
        user_id: str,
        project_name: str,
        project_type: ProjectType,
        project_description: str = "",
        project_scope: Optional[ProjectScope | dict[str, Any]] = None,
        urgency: Optional[Urgency] = None,
        budget_range: Optional[str] = None,
    ) -> Project:
        project = Project(
            user_id=user_id,
            project_name=project_name,
            project_type=project_type,
            project_description=project_description,
            project_scope=project_scope or ProjectScope(),
            urgency=urgency,
            budget_range=budget_range,
            status=ProjectStatus.ASSESSMENT_COMPLETE,
            created_at=self.clock(),
        )
        self.projects.add(project)
        self.audit.record("project_created", user_id, "project", project.id)
        logger.info(f"Project {project.id} ({project.project_type.value}) created for {user_id}")
        return project

    def get_project(self, project_id: str, user_id: str) -> Project:
        project = self.projects.get(project_id)
        if project is None:
            raise NotFound(f"Project {project_id} not found")
        if project.user_id != user_id:
            raise Forbidden("Access denied")
        return project

    # ── Generate ─────────────────────────────────────────

    def generate_quote(self, project_id: str, user_id: str) -> Quote:
        """
        Price a project and persist a pending quote.

        Raises NotFound, Forbidden, or DuplicateActiveQuote when the project
        already has a pending, sent or accepted quote.
        """
        project = self.get_project(project_id, user_id)

        if self.quotes.find_active_for_project(project_id) is not None:
            raise DuplicateActiveQuote(project_id)

        urgency = project.urgency or Urgency.STANDARD
        complexity_score = project.complexity_score
        if complexity_score is None:
            complexity_score = estimate_complexity(
                project.project_type, project.project_scope, urgency
            )
            project.complexity_score = complexity_score
            self.projects.update(project)
            logger.info(f"Project {project_id} complexity scored at {complexity_score}")

        now = self.clock()
        estimate = self.calculator.calculate(project.project_type, complexity_score, urgency, now)

        quote = Quote(
            project_id=project_id,
            user_id=user_id,
            base_rate=estimate.base_rate,
            complexity_adjustment=estimate.complexity_adjustment,
            urgency_adjustment=estimate.urgency_adjustment,
            total_estimate=estimate.total_estimate,
            not_to_exceed=estimate.not_to_exceed,
            estimated_timeline_weeks=estimate.estimated_timeline_weeks,
            delivery_date=estimate.delivery_date,
            payment_structure=estimate.payment_structure,
            valid_until=estimate.valid_until,
            status=QuoteStatus.PENDING,
            created_at=now,
            metadata={
                "complexity_score": str(estimate.complexity_score),
                "complexity_level": estimate.complexity_level.value,
            },
        )
        # Storage enforces the one-active-quote rule again, atomically
        self.quotes.insert_active(quote)

        project.status = ProjectStatus.QUOTE_GENERATED
        self.projects.update(project)

        self.audit.record(
            "quote_generated", user_id, "quote", quote.id, {"project_id": project_id}
        )
        logger.info(
            f"Quote {quote.id} generated for project {project_id}: "
            f"total={quote.total_estimate} nte={quote.not_to_exceed}"
        )
        return quote

    # ── Read ─────────────────────────────────────────────

    def get_quote(self, quote_id: str, user_id: str) -> Quote:
        quote = self.quotes.get(quote_id)
        if quote is None:
            raise NotFound(f"Quote {quote_id} not found")
        if quote.user_id != user_id:
            raise Forbidden("Access denied")
        return quote

    def get_quote_view(self, quote_id: str, user_id: str) -> QuoteView:
        """Owner-scoped read that also carries the project summary."""
        return self._view(self.get_quote(quote_id, user_id))

    def list_quotes(self, user_id: str) -> list[QuoteView]:
        return [self._view(q) for q in self.quotes.list_by_user(user_id)]

    def _view(self, quote: Quote) -> QuoteView:
        project = self.projects.get(quote.project_id)
        summary = None
        if project is not None:
            summary = ProjectSummary(
                project_name=project.project_name,
                project_type=project.project_type,
                project_description=project.project_description,
                urgency=project.urgency,
            )
        return QuoteView(**quote.model_dump(), project=summary)

    # ── Transitions ──────────────────────────────────────

    def send_quote(self, quote_id: str) -> Quote:
        """Mark a pending quote as delivered to the client."""
        quote = self.quotes.get(quote_id)
        if quote is None:
            raise NotFound(f"Quote {quote_id} not found")
        if quote.status != QuoteStatus.PENDING:
            raise InvalidTransition(quote_id, quote.status.value, "sent")

        quote.status = QuoteStatus.SENT
        quote.metadata = {**quote.metadata, "sent_at": self.clock().isoformat()}
        self.quotes.update(quote)
        self.audit.record("quote_sent", quote.user_id, "quote", quote_id)
        return quote

    def accept_quote(self, quote_id: str, user_id: str) -> Quote:
        """
        Accept a quote within its validity window.

        The deadline is checked before the status, so a late acceptance always
        raises QuoteExpired. A pending or sent quote found past its deadline is
        moved to ``expired`` on the way out.
        """
        quote = self.get_quote(quote_id, user_id)
        now = self.clock()

        if now > quote.valid_until:
            if quote.status in OPEN_QUOTE_STATUSES:
                self._expire(quote, now)
            raise QuoteExpired(quote_id)

        if quote.status not in OPEN_QUOTE_STATUSES:
            raise InvalidTransition(quote_id, quote.status.value, "accepted")

        quote.status = QuoteStatus.ACCEPTED
        quote.terms_accepted = True
        quote.accepted_at = now
        self.quotes.update(quote)

        project = self.projects.get(quote.project_id)
        if project is not None:
            project.status = ProjectStatus.QUOTE_ACCEPTED
            self.projects.update(project)

        self.audit.record("quote_accepted", user_id, "quote", quote_id)
        logger.info(f"Quote {quote_id} accepted by {user_id}")
        return quote

    def decline_quote(self, quote_id: str, user_id: str, reason: Optional[str] = None) -> Quote:
        """
        Decline a pending or sent quote. Re-declining an already declined quote
        succeeds and overwrites the stored reason.
        """
        quote = self.get_quote(quote_id, user_id)
        if quote.status not in OPEN_QUOTE_STATUSES | {QuoteStatus.DECLINED}:
            raise InvalidTransition(quote_id, quote.status.value, "declined")

        quote.status = QuoteStatus.DECLINED
        quote.metadata = {
            **quote.metadata,
            "decline_reason": reason,
            "declined_at": self.clock().isoformat(),
        }
        self.quotes.update(quote)

        self.audit.record("quote_declined", user_id, "quote", quote_id, {"reason": reason})
        logger.info(f"Quote {quote_id} declined by {user_id}")
        return quote

    def expire_overdue(self) -> int:
        """Move every pending/sent quote past its deadline to ``expired``."""
        now = self.clock()
        overdue = self.quotes.find_overdue(now)
        for quote in overdue:
            self._expire(quote, now)
        if overdue:
            logger.info(f"Expired {len(overdue)} overdue quote(s)")
        return len(overdue)

    def _expire(self, quote: Quote, now: datetime) -> None:
        quote.status = QuoteStatus.EXPIRED
        quote.metadata = {**quote.metadata, "expired_at": now.isoformat()}
        self.quotes.update(quote)
        self.audit.record("quote_expired", quote.user_id, "quote", quote.id)
