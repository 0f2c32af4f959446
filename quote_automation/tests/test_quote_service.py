"""
Tests: Quote generation and lifecycle (send / accept / decline / expire).

Run with:
    pytest quote_automation/tests/test_quote_service.py -v
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from quote_automation.config import Settings
from quote_automation.errors import (
    DuplicateActiveQuote,
    Forbidden,
    InvalidTransition,
    NotFound,
    QuoteExpired,
)
from quote_automation.models.enums import ProjectStatus, ProjectType, QuoteStatus, Urgency
from quote_automation.models.schemas import Quote
from quote_automation.persistence import ProjectRepository, QuoteRepository
from quote_automation.pricing import QuoteCalculator, RateTables
from quote_automation.services import AuditService, QuoteService

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

FULLSTACK_SCOPE = {
    "features": ["auth", "dashboard", "billing", "reports"],
    "integrations": [{"type": "payment", "name": "stripe"}, {"type": "payment", "name": "paypal"}],
}


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _service(clock: FakeClock | None = None) -> QuoteService:
    return QuoteService(
        projects=ProjectRepository(),
        quotes=QuoteRepository(),
        calculator=QuoteCalculator(RateTables.from_settings(Settings())),
        audit=AuditService(),
        clock=clock or FakeClock(),
    )


def _project(service: QuoteService, user_id: str = "user-1", **kwargs):
    fields = {
        "project_name": "Checkout rebuild",
        "project_type": ProjectType.FULLSTACK,
        "project_scope": FULLSTACK_SCOPE,
        "urgency": Urgency.URGENT,
    }
    fields.update(kwargs)
    return service.create_project(user_id=user_id, **fields)


class TestGenerateQuote:
    def test_end_to_end_example(self):
        service = _service()
        project = _project(service)
        quote = service.generate_quote(project.id, "user-1")

        assert quote.status == QuoteStatus.PENDING
        assert quote.base_rate == Decimal("8000")
        assert quote.complexity_adjustment == Decimal("4000")
        assert quote.urgency_adjustment == Decimal("2400")
        assert quote.total_estimate == Decimal("14400")
        assert quote.not_to_exceed == Decimal("16560")
        assert quote.estimated_timeline_weeks == 12
        assert quote.valid_until == START + timedelta(days=30)
        assert quote.metadata["complexity_level"] == "high"
        assert quote.payment_structure.total() == quote.total_estimate

    def test_project_updated(self):
        service = _service()
        project = _project(service)
        service.generate_quote(project.id, "user-1")

        stored = service.projects.get(project.id)
        assert stored.status == ProjectStatus.QUOTE_GENERATED
        assert stored.complexity_score == Decimal("6.10")

    def test_stored_complexity_is_reused(self):
        service = _service()
        project = _project(service)
        project.complexity_score = Decimal("9.0")
        service.projects.update(project)

        quote = service.generate_quote(project.id, "user-1")
        # critical: 8000 × 0.8
        assert quote.complexity_adjustment == Decimal("6400")
        assert quote.metadata["complexity_level"] == "critical"

    def test_missing_urgency_is_standard(self):
        service = _service()
        project = _project(service, urgency=None, project_scope={})
        quote = service.generate_quote(project.id, "user-1")
        assert quote.urgency_adjustment == 0
        assert quote.total_estimate == Decimal("8000")

    def test_audit_entry_recorded(self):
        service = _service()
        project = _project(service)
        quote = service.generate_quote(project.id, "user-1")
        trail = service.audit.get_trail(quote.id)
        assert [e.action for e in trail] == ["quote_generated"]
        assert trail[0].details == {"project_id": project.id}

    def test_project_not_found(self):
        with pytest.raises(NotFound):
            _service().generate_quote("missing", "user-1")

    def test_not_owner(self):
        service = _service()
        project = _project(service)
        with pytest.raises(Forbidden):
            service.generate_quote(project.id, "user-2")

    def test_duplicate_active_quote(self):
        service = _service()
        project = _project(service)
        service.generate_quote(project.id, "user-1")
        with pytest.raises(DuplicateActiveQuote):
            service.generate_quote(project.id, "user-1")

    def test_new_quote_allowed_after_decline(self):
        service = _service()
        project = _project(service)
        first = service.generate_quote(project.id, "user-1")
        service.decline_quote(first.id, "user-1", "too expensive")
        second = service.generate_quote(project.id, "user-1")
        assert second.id != first.id

    def test_concurrent_generation_yields_one_quote(self):
        service = _service()
        project = _project(service)

        def attempt(_):
            try:
                return service.generate_quote(project.id, "user-1")
            except DuplicateActiveQuote:
                return None

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(16)))

        assert len([r for r in results if r is not None]) == 1
        assert len(service.list_quotes("user-1")) == 1


class TestActiveQuoteStorage:
    def test_repository_rejects_second_active_quote(self):
        repo = QuoteRepository()
        fields = dict(
            project_id="p-1", user_id="u", base_rate=Decimal("1"),
            total_estimate=Decimal("1"), not_to_exceed=Decimal("2"), valid_until=START,
        )
        repo.insert_active(Quote(**fields))
        with pytest.raises(DuplicateActiveQuote):
            repo.insert_active(Quote(**fields, status=QuoteStatus.SENT))


class TestReadQuotes:
    def test_get_scoped_to_owner(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        assert service.get_quote(quote.id, "user-1").id == quote.id
        with pytest.raises(Forbidden):
            service.get_quote(quote.id, "user-2")
        with pytest.raises(NotFound):
            service.get_quote("nope", "user-1")

    def test_list_newest_first(self):
        clock = FakeClock()
        service = _service(clock)
        older = service.generate_quote(_project(service).id, "user-1")
        clock.advance(hours=1)
        newer = service.generate_quote(_project(service).id, "user-1")
        service.generate_quote(_project(service, user_id="user-2").id, "user-2")

        assert [q.id for q in service.list_quotes("user-1")] == [newer.id, older.id]

    def test_views_carry_project_summary(self):
        service = _service()
        project = _project(service, project_description="New checkout flow")
        quote = service.generate_quote(project.id, "user-1")

        view = service.get_quote_view(quote.id, "user-1")
        assert view.id == quote.id
        assert view.project.project_name == "Checkout rebuild"
        assert view.project.project_type == ProjectType.FULLSTACK
        assert view.project.urgency == Urgency.URGENT
        assert view.project.project_description == "New checkout flow"
        assert service.list_quotes("user-1")[0].project == view.project
        with pytest.raises(Forbidden):
            service.get_quote_view(quote.id, "user-2")


class TestAcceptQuote:
    def test_accept_pending(self):
        clock = FakeClock()
        service = _service(clock)
        project = _project(service)
        quote = service.generate_quote(project.id, "user-1")
        clock.advance(days=3)

        accepted = service.accept_quote(quote.id, "user-1")
        assert accepted.status == QuoteStatus.ACCEPTED
        assert accepted.terms_accepted is True
        assert accepted.accepted_at == clock.now
        assert service.projects.get(project.id).status == ProjectStatus.QUOTE_ACCEPTED

    def test_accept_sent(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        service.send_quote(quote.id)
        assert service.accept_quote(quote.id, "user-1").status == QuoteStatus.ACCEPTED

    def test_accept_on_deadline_is_allowed(self):
        clock = FakeClock()
        service = _service(clock)
        quote = service.generate_quote(_project(service).id, "user-1")
        clock.now = quote.valid_until
        assert service.accept_quote(quote.id, "user-1").status == QuoteStatus.ACCEPTED

    def test_accept_after_deadline_expires_quote(self):
        clock = FakeClock()
        service = _service(clock)
        quote = service.generate_quote(_project(service).id, "user-1")
        clock.advance(days=30, seconds=1)

        with pytest.raises(QuoteExpired):
            service.accept_quote(quote.id, "user-1")
        assert service.quotes.get(quote.id).status == QuoteStatus.EXPIRED

        # Still expired on retry, never InvalidTransition
        with pytest.raises(QuoteExpired):
            service.accept_quote(quote.id, "user-1")

    def test_late_accept_of_declined_quote_reports_expiry(self):
        clock = FakeClock()
        service = _service(clock)
        quote = service.generate_quote(_project(service).id, "user-1")
        service.decline_quote(quote.id, "user-1")
        clock.advance(days=45)

        with pytest.raises(QuoteExpired):
            service.accept_quote(quote.id, "user-1")
        assert service.quotes.get(quote.id).status == QuoteStatus.DECLINED

    def test_accept_declined_is_invalid(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        service.decline_quote(quote.id, "user-1")
        with pytest.raises(InvalidTransition):
            service.accept_quote(quote.id, "user-1")

    def test_accept_twice_is_invalid(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        service.accept_quote(quote.id, "user-1")
        with pytest.raises(InvalidTransition):
            service.accept_quote(quote.id, "user-1")

    def test_accept_not_owner(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        with pytest.raises(Forbidden):
            service.accept_quote(quote.id, "user-2")


class TestDeclineQuote:
    def test_decline_records_reason(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        declined = service.decline_quote(quote.id, "user-1", "budget cut")
        assert declined.status == QuoteStatus.DECLINED
        assert declined.metadata["decline_reason"] == "budget cut"
        assert "declined_at" in declined.metadata
        assert declined.metadata["complexity_level"] == "high"

    def test_redecline_overwrites_reason(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        service.decline_quote(quote.id, "user-1", "first")
        again = service.decline_quote(quote.id, "user-1", "second")
        assert again.status == QuoteStatus.DECLINED
        assert service.get_quote(quote.id, "user-1").metadata["decline_reason"] == "second"

    def test_decline_sent(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        service.send_quote(quote.id)
        assert service.decline_quote(quote.id, "user-1").status == QuoteStatus.DECLINED

    def test_decline_accepted_is_invalid(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        service.accept_quote(quote.id, "user-1")
        with pytest.raises(InvalidTransition):
            service.decline_quote(quote.id, "user-1")

    def test_decline_not_owner(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        with pytest.raises(Forbidden):
            service.decline_quote(quote.id, "user-2")


class TestSendAndExpire:
    def test_send_only_from_pending(self):
        service = _service()
        quote = service.generate_quote(_project(service).id, "user-1")
        assert service.send_quote(quote.id).status == QuoteStatus.SENT
        with pytest.raises(InvalidTransition):
            service.send_quote(quote.id)

    def test_send_missing(self):
        with pytest.raises(NotFound):
            _service().send_quote("nope")

    def test_expire_overdue(self):
        clock = FakeClock()
        service = _service(clock)
        stale = service.generate_quote(_project(service).id, "user-1")
        sent = service.generate_quote(_project(service).id, "user-1")
        service.send_quote(sent.id)
        accepted = service.generate_quote(_project(service).id, "user-1")
        service.accept_quote(accepted.id, "user-1")

        clock.advance(days=20)
        fresh = service.generate_quote(_project(service).id, "user-1")
        clock.advance(days=11)

        assert service.expire_overdue() == 2
        assert service.quotes.get(stale.id).status == QuoteStatus.EXPIRED
        assert service.quotes.get(sent.id).status == QuoteStatus.EXPIRED
        assert service.quotes.get(accepted.id).status == QuoteStatus.ACCEPTED
        assert service.quotes.get(fresh.id).status == QuoteStatus.PENDING
        assert service.expire_overdue() == 0

    def test_expired_quote_frees_project(self):
        clock = FakeClock()
        service = _service(clock)
        project = _project(service)
        service.generate_quote(project.id, "user-1")
        clock.advance(days=31)
        service.expire_overdue()
        assert service.generate_quote(project.id, "user-1").status == QuoteStatus.PENDING
