"""
Mongo Client — raw database connection management.
In mock mode, no actual connection is created and repositories fall back
to in-memory storage.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from bson.decimal128 import Decimal128
from pymongo import MongoClient as PyMongoClient

from quote_automation.config import Settings, get_settings

logger = logging.getLogger(__name__)


class MongoClient:
    """
    Thin wrapper around pymongo.
    In mock mode this is a no-op placeholder.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Any = None
        self._db: Any = None

    def connect(self) -> None:
        """Establish the MongoDB connection (no-op in mock mode)."""
        if self.settings.mock_mode:
            logger.info("[MOCK] MongoDB connection simulated")
            return

        self._client = PyMongoClient(self.settings.mongodb_uri, tz_aware=True)
        self._db = self._client[self.settings.mongodb_database]
        logger.info(f"Connected to MongoDB: {self.settings.mongodb_database}")

    def get_database(self) -> Any:
        """Return the database handle (None in mock mode)."""
        if self._db is None and not self.settings.mock_mode:
            self.connect()
        return self._db

    def close(self) -> None:
        """Close the connection."""
        if self._client:
            self._client.close()
            logger.info("MongoDB connection closed")


# ── BSON conversion ──────────────────────────────────────

def to_document(value: Any) -> Any:
    """Convert a model_dump() tree into BSON-safe values (Decimal → Decimal128)."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: to_document(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_document(v) for v in value]
    return value


def from_document(value: Any) -> Any:
    """Inverse of to_document; also drops Mongo's _id."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return {k: from_document(v) for k, v in value.items() if k != "_id"}
    if isinstance(value, list):
        return [from_document(v) for v in value]
    return value
