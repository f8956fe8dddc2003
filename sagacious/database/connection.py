"""
Connection management for the backing document store.

One ConnectionManager owns one pooled AsyncIOMotorClient. Operations
acquire a driver session through ``session()`` and release it when the
block exits, so connection use is scoped to the operation rather than to
the calling thread.

Usage:
    async with ConnectionManager("mongodb://localhost:27017", db_name="app") as conn:
        users = conn.collection(CollectionBinding("app", "users"))
        async with conn.session() as session:
            doc = await users.find_one({"name": "ada"}, session=session)
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
)
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from ..config import StoreConfig
from ..constants import (
    CLIENT_APP_NAME,
    DEFAULT_MAX_IDLE_TIME_MS,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)
from ..exceptions import InitializationError, StoreUnavailableError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation, timed_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class ConnectionManager:
    """
    Manages the MongoDB client lifecycle and hands out scoped sessions.
    """

    def __init__(
        self,
        mongo_uri: str,
        db_name: str | None = None,
        max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
        min_pool_size: int = DEFAULT_MIN_POOL_SIZE,
        server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    ) -> None:
        """
        Initialize the connection manager.

        Args:
            mongo_uri: MongoDB connection URI
            db_name: Default database name, used by repositories whose
                     binding names no database
            max_pool_size: Maximum MongoDB connection pool size
            min_pool_size: Minimum MongoDB connection pool size
            server_selection_timeout_ms: Server selection timeout in milliseconds
        """
        self.mongo_uri = mongo_uri
        self.db_name = db_name
        self.max_pool_size = max_pool_size
        self.min_pool_size = min_pool_size
        self.server_selection_timeout_ms = server_selection_timeout_ms

        self._mongo_client: AsyncIOMotorClient | None = None
        self._initialized: bool = False

    @classmethod
    def from_config(cls, config: StoreConfig) -> "ConnectionManager":
        """Build a connection manager from a validated StoreConfig."""
        config.validate()
        return cls(
            mongo_uri=config.mongo_uri,
            db_name=config.db_name,
            max_pool_size=config.max_pool_size,
            min_pool_size=config.min_pool_size,
            server_selection_timeout_ms=config.server_selection_timeout_ms,
        )

    async def initialize(self) -> None:
        """
        Connect to MongoDB and verify the connection with a ping.

        Raises:
            InitializationError: If the client cannot be created or the ping fails
        """
        start_time = time.time()

        if self._initialized:
            logger.warning("ConnectionManager already initialized. Skipping re-initialization.")
            return

        contextual_logger.info(
            "Initializing MongoDB connection",
            extra={
                "db_name": self.db_name,
                "max_pool_size": self.max_pool_size,
                "min_pool_size": self.min_pool_size,
            },
        )

        try:
            client = AsyncIOMotorClient(
                self.mongo_uri,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                appname=CLIENT_APP_NAME,
                maxPoolSize=self.max_pool_size,
                minPoolSize=self.min_pool_size,
                maxIdleTimeMS=DEFAULT_MAX_IDLE_TIME_MS,
            )
            await client.admin.command("ping")
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.initialize", duration_ms, success=False)
            contextual_logger.critical(
                "MongoDB connection failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            raise InitializationError(
                f"Failed to connect to MongoDB: {e}",
                mongo_uri=self.mongo_uri,
                db_name=self.db_name,
                context={"error_type": type(e).__name__},
            ) from e
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            duration_ms = (time.time() - start_time) * 1000
            record_operation("connection.initialize", duration_ms, success=False)
            contextual_logger.critical(
                "ConnectionManager initialization failed",
                extra={
                    "error_type": type(e).__name__,
                    "error": str(e),
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            raise InitializationError(
                f"ConnectionManager initialization failed: {e}",
                mongo_uri=self.mongo_uri,
                db_name=self.db_name,
                context={"error_type": type(e).__name__},
            ) from e

        self._mongo_client = client
        self._initialized = True
        duration_ms = (time.time() - start_time) * 1000
        record_operation("connection.initialize", duration_ms, success=True)
        contextual_logger.info(
            "MongoDB connection initialized successfully",
            extra={
                "db_name": self.db_name,
                "pool_size": f"{self.min_pool_size}-{self.max_pool_size}",
                "duration_ms": round(duration_ms, 2),
            },
        )

    @timed_operation("connection.shutdown")
    async def shutdown(self) -> None:
        """
        Close the MongoDB client. Safe to call multiple times.
        """
        if not self._initialized:
            return

        if self._mongo_client is not None:
            self._mongo_client.close()
            contextual_logger.info("MongoDB connection closed.")

        self._initialized = False
        self._mongo_client = None

    async def __aenter__(self) -> "ConnectionManager":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.shutdown()
        return False

    @property
    def initialized(self) -> bool:
        """Whether initialize() has completed successfully."""
        return self._initialized

    @property
    def client(self) -> AsyncIOMotorClient:
        """
        The pooled MongoDB client.

        Raises:
            InitializationError: If the manager is not initialized
        """
        if not self._initialized or self._mongo_client is None:
            raise InitializationError(
                "ConnectionManager not initialized. Call initialize() first.",
                mongo_uri=self.mongo_uri,
                db_name=self.db_name,
            )
        return self._mongo_client

    def collection(self, binding: Any) -> AsyncIOMotorCollection:
        """
        Map a collection binding to a driver collection handle.

        Pure name lookup; performs no network I/O.

        Args:
            binding: Object with ``database`` and ``collection`` attributes
        """
        return self.client[binding.database][binding.collection]

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncIOMotorClientSession]:
        """
        Acquire a driver session for the duration of the block.

        The session is ended on exit, including when the block raises.

        Raises:
            StoreUnavailableError: If the driver cannot start a session
        """
        client = self.client
        try:
            driver_session = await client.start_session()
        except PyMongoError as e:
            raise StoreUnavailableError(
                f"Could not start MongoDB session: {e}",
                operation="session",
                context={"error_type": type(e).__name__},
            ) from e

        try:
            yield driver_session
        finally:
            await driver_session.end_session()
