"""
Audit Service — append-only record of quote and catalog actions.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from quote_automation.models.schemas import AuditEntry

logger = logging.getLogger(__name__)


class AuditService:
    """
    Records user actions against quotes and projects.
    Without a database handle, uses an in-memory list; otherwise writes to
    the MongoDB ``audit_logs`` collection.
    """

    def __init__(self, db: Any = None):
        self._collection = db["audit_logs"] if db is not None else None
        self._entries: list[AuditEntry] = []

    def record(
        self,
        action: str,
        user_id: Optional[str] = None,
        entity_type: str = "",
        entity_id: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEntry:
        """Record an audit entry and return it."""
        entry = AuditEntry(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details or {},
        )

        if self._collection is None:
            self._entries.append(entry)
        else:
            self._collection.insert_one(entry.model_dump(mode="json"))
        logger.debug(f"[AUDIT] {user_id} → {action} {entity_type}:{entity_id} {entry.details}")
        return entry

    def get_trail(self, entity_id: str) -> list[AuditEntry]:
        """Return all audit entries for an entity, oldest first."""
        if self._collection is None:
            return [e for e in self._entries if e.entity_id == entity_id]
        cursor = self._collection.find({"entity_id": entity_id}).sort("timestamp", 1)
        return [AuditEntry.model_validate({k: v for k, v in d.items() if k != "_id"}) for d in cursor]
