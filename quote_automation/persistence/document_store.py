"""
Document Store — one collection of pydantic models, backed by MongoDB when a
database handle is supplied and by an in-memory dict otherwise.

Queries use a small Mongo-style filter subset (equality, $in, $lt) so the
same repository code runs against both backends.
"""

from __future__ import annotations

import logging
import threading
from copy import deepcopy
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING

from quote_automation.persistence.mongo_client import from_document, to_document

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class DocumentStore(Generic[M]):
    """Save/load models keyed by their ``id`` field."""

    def __init__(self, db: Any, collection: str, model_cls: type[M]):
        self.name = collection
        self.model_cls = model_cls
        self._collection = db[collection] if db is not None else None
        self._memory: dict[str, dict[str, Any]] = {}
        # Guards check-then-write sequences on the in-memory backend
        self.lock = threading.RLock()

    @property
    def in_memory(self) -> bool:
        return self._collection is None

    @property
    def collection(self) -> Any:
        return self._collection

    # ── Writes ───────────────────────────────────────────

    def insert(self, model: M, **extra: Any) -> M:
        doc = self._dump(model, extra)
        if self.in_memory:
            with self.lock:
                self._memory[doc["id"]] = doc
        else:
            self._collection.insert_one(to_document(doc))
        return model

    def save(self, model: M, **extra: Any) -> M:
        """Insert or replace by id."""
        doc = self._dump(model, extra)
        if self.in_memory:
            with self.lock:
                self._memory[doc["id"]] = doc
        else:
            self._collection.replace_one({"id": doc["id"]}, to_document(doc), upsert=True)
        return model

    def delete(self, query: dict[str, Any]) -> int:
        if self.in_memory:
            with self.lock:
                doomed = [k for k, d in self._memory.items() if _matches(d, query)]
                for key in doomed:
                    del self._memory[key]
            return len(doomed)
        return self._collection.delete_many(to_document(query)).deleted_count

    def delete_all(self) -> int:
        if self.in_memory:
            with self.lock:
                count = len(self._memory)
                self._memory.clear()
            return count
        return self._collection.delete_many({}).deleted_count

    # ── Reads ────────────────────────────────────────────

    def get(self, model_id: str) -> Optional[M]:
        return self.find_one({"id": model_id})

    def find_one(self, query: dict[str, Any]) -> Optional[M]:
        if self.in_memory:
            with self.lock:
                for doc in self._memory.values():
                    if _matches(doc, query):
                        return self.model_cls.model_validate(deepcopy(doc))
            return None
        doc = self._collection.find_one(to_document(query))
        return self.model_cls.model_validate(from_document(doc)) if doc else None

    def find(
        self,
        query: Optional[dict[str, Any]] = None,
        sort: Optional[str] = None,
        descending: bool = False,
    ) -> list[M]:
        query = query or {}
        if self.in_memory:
            with self.lock:
                docs = [deepcopy(d) for d in self._memory.values() if _matches(d, query)]
            if sort:
                # None sorts first, like Mongo
                docs.sort(key=lambda d: (d.get(sort) is not None, d.get(sort)), reverse=descending)
            return [self.model_cls.model_validate(d) for d in docs]

        cursor = self._collection.find(to_document(query))
        if sort:
            cursor = cursor.sort(sort, DESCENDING if descending else ASCENDING)
        return [self.model_cls.model_validate(from_document(d)) for d in cursor]

    def count(self) -> int:
        if self.in_memory:
            return len(self._memory)
        return self._collection.count_documents({})

    # ── Helpers ──────────────────────────────────────────

    @staticmethod
    def _dump(model: BaseModel, extra: dict[str, Any]) -> dict[str, Any]:
        doc = model.model_dump(mode="python")
        doc.update(extra)
        return doc


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for field, expected in query.items():
        actual = doc.get(field)
        if isinstance(expected, dict):
            if "$in" in expected and actual not in expected["$in"]:
                return False
            if "$lt" in expected and (actual is None or not actual < expected["$lt"]):
                return False
        elif actual != expected:
            return False
    return True
