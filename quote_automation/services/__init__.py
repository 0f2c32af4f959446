"""Services — QuoteService, AuditService."""

from quote_automation.services.audit_service import AuditService
from quote_automation.services.quote_service import QuoteService

__all__ = ["QuoteService", "AuditService"]
