"""
Project and Quote repositories.

The one-active-quote-per-project rule is enforced here, at the storage
layer: MongoDB carries a unique partial index over ``project_id`` for
documents flagged ``active``; the in-memory backend checks and inserts
under a single lock.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from quote_automation.errors import DuplicateActiveQuote
from quote_automation.models.enums import ACTIVE_QUOTE_STATUSES, OPEN_QUOTE_STATUSES
from quote_automation.models.schemas import Project, Quote
from quote_automation.persistence.document_store import DocumentStore

logger = logging.getLogger(__name__)


class ProjectRepository:
    def __init__(self, db: Any = None):
        self.store: DocumentStore[Project] = DocumentStore(db, "project_assessments", Project)

    def add(self, project: Project) -> Project:
        return self.store.insert(project)

    def get(self, project_id: str) -> Optional[Project]:
        return self.store.get(project_id)

    def update(self, project: Project) -> Project:
        return self.store.save(project)


class QuoteRepository:
    def __init__(self, db: Any = None):
        self.store: DocumentStore[Quote] = DocumentStore(db, "project_quotes", Quote)

    def ensure_indexes(self) -> None:
        """Create MongoDB indexes (no-op for the in-memory backend)."""
        if self.store.in_memory:
            return
        coll = self.store.collection
        coll.create_index(
            [("project_id", ASCENDING)],
            name="uniq_active_quote_per_project",
            unique=True,
            partialFilterExpression={"active": True},
        )
        coll.create_index([("user_id", ASCENDING)], name="idx_quotes_user")
        coll.create_index([("status", ASCENDING)], name="idx_quotes_status")
        coll.create_index([("id", ASCENDING)], name="idx_quotes_id", unique=True)

    def insert_active(self, quote: Quote) -> Quote:
        """
        Persist a new active quote. Raises DuplicateActiveQuote if the
        project already holds a pending, sent or accepted quote.
        """
        if self.store.in_memory:
            with self.store.lock:
                if self.find_active_for_project(quote.project_id) is not None:
                    raise DuplicateActiveQuote(quote.project_id)
                return self.store.insert(quote, active=quote.is_active)
        try:
            return self.store.insert(quote, active=quote.is_active)
        except DuplicateKeyError as e:
            logger.warning(f"Unique active-quote index rejected insert for {quote.project_id}: {e}")
            raise DuplicateActiveQuote(quote.project_id) from e

    def update(self, quote: Quote) -> Quote:
        return self.store.save(quote, active=quote.is_active)

    def get(self, quote_id: str) -> Optional[Quote]:
        return self.store.get(quote_id)

    def find_active_for_project(self, project_id: str) -> Optional[Quote]:
        return self.store.find_one({
            "project_id": project_id,
            "status": {"$in": [s.value for s in ACTIVE_QUOTE_STATUSES]},
        })

    def list_by_user(self, user_id: str) -> list[Quote]:
        """All quotes for a user, newest first."""
        return self.store.find({"user_id": user_id}, sort="created_at", descending=True)

    def find_overdue(self, now: datetime) -> list[Quote]:
        """Pending or sent quotes whose validity window has passed."""
        return self.store.find({
            "status": {"$in": [s.value for s in OPEN_QUOTE_STATUSES]},
            "valid_until": {"$lt": now},
        })
