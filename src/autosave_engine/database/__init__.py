"""Cosmos DB access for documents, version snapshots and editing patterns."""

from autosave_engine.database.client import CosmosClient

__all__ = ["CosmosClient"]
