"""
Pytest configuration and shared fixtures for SAGACIOUS tests.

This module provides:
- Mock motor collection fixtures
- A stateful in-memory collection for save/get/remove scenarios
- Connection manager doubles with scoped-session tracking
"""

import copy
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorCollection

from sagacious.database.connection import ConnectionManager
from sagacious.observability import get_metrics_collector

# ============================================================================
# STORE DOUBLES
# ============================================================================


class InMemoryCollection:
    """
    Minimal stateful stand-in for an AsyncIOMotorCollection.

    Supports the single-document operations used by Repository and counts
    every call so tests can assert that no store access happened.
    """

    def __init__(self, name: str = "test_collection"):
        self.name = name
        self.documents: Dict[Any, Dict[str, Any]] = {}
        self.calls: list = []

    def _match(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.documents.get(filter.get("_id"))

    async def find_one(self, filter, projection=None, session=None):
        self.calls.append(("find_one", filter))
        doc = self._match(filter)
        if doc is None:
            return None
        if projection:
            return {key: doc[key] for key in projection if key in doc}
        return copy.deepcopy(doc)

    async def insert_one(self, document, session=None):
        self.calls.append(("insert_one", document))
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = copy.deepcopy(document)
        return MagicMock(inserted_id=document["_id"])

    async def replace_one(self, filter, replacement, upsert=False, session=None):
        self.calls.append(("replace_one", filter, replacement))
        oid = filter["_id"]
        existed = oid in self.documents
        if existed or upsert:
            self.documents[oid] = {"_id": oid, **copy.deepcopy(replacement)}
        return MagicMock(
            matched_count=1 if existed else 0,
            modified_count=1 if existed else 0,
            upserted_id=None if existed or not upsert else oid,
        )

    async def delete_one(self, filter, session=None):
        self.calls.append(("delete_one", filter))
        removed = self.documents.pop(filter.get("_id"), None)
        return MagicMock(deleted_count=0 if removed is None else 1)


def make_connection(collection: Any, db_name: str = "test_db") -> MagicMock:
    """
    Build a ConnectionManager double serving ``collection`` for every binding.

    ``connection.sessions_opened`` / ``connection.sessions_released`` count
    scoped session acquisitions.
    """
    connection = MagicMock(spec=ConnectionManager)
    connection.db_name = db_name
    connection.collection.return_value = collection
    connection.sessions_opened = 0
    connection.sessions_released = 0

    @asynccontextmanager
    async def session():
        connection.sessions_opened += 1
        try:
            yield MagicMock(spec=AsyncIOMotorClientSession)
        finally:
            connection.sessions_released += 1

    connection.session.side_effect = session
    return connection


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def mock_mongo_collection() -> MagicMock:
    """Create a mock MongoDB collection."""
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = "test_collection"
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.replace_one = AsyncMock(
        return_value=MagicMock(matched_count=1, modified_count=1, upserted_id=None)
    )
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    return collection


@pytest.fixture
def mock_connection(mock_mongo_collection: MagicMock) -> MagicMock:
    """Connection double backed by the mock collection."""
    return make_connection(mock_mongo_collection)


@pytest.fixture
def memory_collection() -> InMemoryCollection:
    """Stateful in-memory collection."""
    return InMemoryCollection()


@pytest.fixture
def memory_connection(memory_collection: InMemoryCollection) -> MagicMock:
    """Connection double backed by the in-memory collection."""
    return make_connection(memory_collection)


@pytest.fixture
def mock_mongo_client() -> MagicMock:
    """Create a mock motor client whose ping succeeds."""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    driver_session = MagicMock(spec=AsyncIOMotorClientSession)
    driver_session.end_session = AsyncMock()
    client.start_session = AsyncMock(return_value=driver_session)
    return client


@pytest.fixture(autouse=True)
def reset_metrics():
    """Isolate the global metrics collector between tests."""
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()
