"""Persistence — MongoClient, DocumentStore, repositories."""

from quote_automation.persistence.mongo_client import MongoClient
from quote_automation.persistence.document_store import DocumentStore
from quote_automation.persistence.quote_repository import ProjectRepository, QuoteRepository
from quote_automation.persistence.catalog_repository import CatalogRepository

__all__ = [
    "MongoClient",
    "DocumentStore",
    "ProjectRepository",
    "QuoteRepository",
    "CatalogRepository",
]
