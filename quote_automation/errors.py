"""
Error taxonomy shared by the pricing engine, the services and the API.

Every error carries a stable machine-readable ``kind`` and a human-readable
message. The API layer maps kinds to HTTP status codes; nothing here is
retried internally.
"""

from __future__ import annotations


class QuoteAutomationError(Exception):
    """Base class for every domain error."""

    kind: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class NotFound(QuoteAutomationError):
    kind = "not_found"


class Forbidden(QuoteAutomationError):
    kind = "forbidden"


class Unauthorized(QuoteAutomationError):
    kind = "unauthorized"


class Conflict(QuoteAutomationError):
    kind = "conflict"


class Expired(QuoteAutomationError):
    kind = "expired"


class ValidationError(QuoteAutomationError):
    kind = "validation_error"


# ── Quote lifecycle ──────────────────────────────────────


class DuplicateActiveQuote(Conflict):
    """A pending, sent or accepted quote already exists for the project."""

    def __init__(self, project_id: str):
        super().__init__(f"Active quote already exists for project {project_id}")
        self.project_id = project_id


class InvalidTransition(Conflict):
    def __init__(self, quote_id: str, status: str, target: str):
        super().__init__(f"Quote {quote_id} cannot be {target} (status: {status})")
        self.quote_id = quote_id
        self.status = status


class QuoteExpired(Expired):
    def __init__(self, quote_id: str):
        super().__init__(f"Quote {quote_id} has expired")
        self.quote_id = quote_id


# ── Bundle catalog lookups ───────────────────────────────


class CategoryNotFound(ValidationError):
    def __init__(self, key: str):
        super().__init__(f"Revenue category '{key}' not found")


class ScaleNotFound(ValidationError):
    def __init__(self, key: str):
        super().__init__(f"Company scale '{key}' not found")


class PricingNotFound(NotFound):
    def __init__(self, bundle_id: str, category: str, scale: str):
        super().__init__(
            f"No pricing found for bundle '{bundle_id}', "
            f"category '{category}', and scale '{scale}'"
        )
