"""
MongoDB repository binding.

A Repository binds one domain type to one collection and offers
identifier-keyed get, save and remove. Every store call runs inside a
session acquired from the ConnectionManager and released when the call
completes.
"""

import dataclasses
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from ..exceptions import ConfigurationError, NotFoundError, StoreUnavailableError
from ..observability import (
    clear_store_context,
    log_operation,
    record_operation,
    set_store_context,
)
from ..observability import get_logger as get_contextual_logger
from ..utils.identifiers import format_object_id, parse_object_id
from .base import CollectionBinding, CollectionBound, Identifiable
from .results import Failure, Found, LookupResult, NotFound

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

T = TypeVar("T", bound=Identifiable)


class Repository(Generic[T]):
    """
    Identifier-keyed persistence for one domain type.

    The binding is resolved once, at construction, from the domain type's
    ``collection_binding()`` hook when it returns one, otherwise from the
    names passed here. Database defaults to the connection's ``db_name``.

    Example:
        users = Repository(User, connection, "shop", "users")

        user = User(email="ada@example.com")
        user_id = await users.save(user)

        result = await users.get(user_id)
        if result.found:
            print(result.record.email)

        await users.remove(user)
    """

    def __init__(
        self,
        model_type: type[T],
        connection: Any,  # ConnectionManager
        database: str | None = None,
        collection: str | None = None,
    ):
        """
        Initialize the repository.

        Args:
            model_type: Default-constructible domain type with an ``id`` attribute
            connection: ConnectionManager providing collections and sessions
            database: Database name (optional if the type or connection supplies one)
            collection: Collection name (optional if the type supplies one)

        Raises:
            ConfigurationError: If no complete binding can be resolved
        """
        self._model_type = model_type
        self._connection = connection
        self._database = database or getattr(connection, "db_name", None)
        self._collection_name = collection
        self._binding = self.resolve_binding()

    def resolve_binding(self) -> CollectionBinding:
        """
        Work out the (database, collection) pair for this repository.

        Override to customise resolution. Must not perform network I/O.
        """
        if isinstance(self._model_type, CollectionBound):
            binding = self._model_type.collection_binding()
            if binding is not None:
                return binding

        if not self._database or not self._collection_name:
            raise ConfigurationError(
                f"Cannot resolve a collection binding for {self._model_type.__name__}: "
                "pass database and collection names or define collection_binding()",
                config_key="collection",
                context={"database": self._database, "collection": self._collection_name},
            )
        return CollectionBinding(self._database, self._collection_name)

    @property
    def binding(self) -> CollectionBinding:
        return self._binding

    @property
    def model_type(self) -> type[T]:
        return self._model_type

    def collection(self) -> AsyncIOMotorCollection:
        """Driver collection handle for the binding (no network I/O)."""
        return self._connection.collection(self._binding)

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _to_record(self, doc: dict[str, Any]) -> T:
        """Default-construct a record and merge the stored document into it."""
        from_document = getattr(self._model_type, "from_document", None)
        if callable(from_document):
            return from_document(doc)

        record = self._model_type()
        for key, value in doc.items():
            if key == "_id":
                record.id = str(value)
            elif hasattr(record, key):
                setattr(record, key, value)
        return record

    @staticmethod
    def _to_document(record: T) -> dict[str, Any]:
        """Serialize a record, leaving the identifier to the caller."""
        to_document = getattr(record, "to_document", None)
        if callable(to_document):
            doc = to_document()
        elif dataclasses.is_dataclass(record):
            doc = dataclasses.asdict(record)
        else:
            doc = {k: v for k, v in vars(record).items() if not k.startswith("_")}

        doc.pop("_id", None)
        doc.pop("id", None)
        return doc

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _operation(
        self, operation: str, identifier: str | None = None
    ) -> AsyncIterator[AsyncIOMotorClientSession]:
        """
        Run one store operation inside a scoped session.

        Driver errors are re-raised as StoreUnavailableError. The operation is
        timed and recorded either way.
        """
        token = set_store_context(
            database=self._binding.database,
            collection=self._binding.collection,
            operation=operation,
            identifier=identifier,
        )
        start_time = time.time()
        success = False
        try:
            async with self._connection.session() as session:
                yield session
            success = True
        except PyMongoError as e:
            contextual_logger.error(
                f"Store operation '{operation}' failed",
                extra={"error_type": type(e).__name__, "error": str(e)},
                exc_info=True,
            )
            raise StoreUnavailableError(
                f"{operation} on {self._binding.namespace} failed: {e}",
                operation=operation,
                context={
                    "namespace": self._binding.namespace,
                    "identifier": identifier,
                    "error_type": type(e).__name__,
                },
            ) from e
        finally:
            duration_ms = (time.time() - start_time) * 1000
            record_operation(
                f"repository.{operation}",
                duration_ms,
                success=success,
                collection=self._binding.namespace,
            )
            if success:
                log_operation(
                    logger, f"repository.{operation}", level=logging.DEBUG, duration_ms=duration_ms
                )
            clear_store_context(token)

    async def get(self, id: str) -> LookupResult[T]:
        """
        Look up one record by identifier.

        Args:
            id: 24-character hex ObjectId

        Returns:
            Found(record), NotFound(id) or Failure(StoreUnavailableError)

        Raises:
            InvalidIdentifierError: If ``id`` is malformed (no store call is made)
        """
        oid = parse_object_id(id)
        identifier = format_object_id(oid)

        try:
            async with self._operation("get", identifier) as session:
                doc = await self.collection().find_one({"_id": oid}, session=session)
        except StoreUnavailableError as e:
            return Failure(e)

        if doc is None:
            logger.debug(f"{self._model_type.__name__} {identifier} not found")
            return NotFound(
                identifier,
                database=self._binding.database,
                collection=self._binding.collection,
            )
        return Found(self._to_record(doc))

    async def get_or_raise(self, id: str) -> T:
        """Like get(), but raises NotFoundError / StoreUnavailableError."""
        return (await self.get(id)).unwrap()

    async def exists(self, id: str) -> bool:
        """Check whether a document with this identifier exists."""
        oid = parse_object_id(id)
        async with self._operation("exists", format_object_id(oid)) as session:
            doc = await self.collection().find_one(
                {"_id": oid}, projection={"_id": 1}, session=session
            )
        return doc is not None

    async def save(self, record: T) -> str:
        """
        Insert or replace a record as one atomic single-document write.

        A record without an id is inserted and receives the assigned id.
        A record with an id replaces the stored document with that id, or is
        inserted under it when no such document exists.

        Returns:
            The record's identifier

        Raises:
            TypeError: If ``record`` has no id attribute
            InvalidIdentifierError: If ``record.id`` is set but malformed
            StoreUnavailableError: If the write fails
        """
        if not isinstance(record, Identifiable):
            raise TypeError(f"{type(record).__name__} has no id attribute")

        oid: ObjectId | None = None if record.id is None else parse_object_id(record.id)
        document = self._to_document(record)

        now = datetime.now(timezone.utc)
        stamps: dict[str, datetime] = {}
        if oid is None:
            if hasattr(record, "created_at") and record.created_at is None:
                stamps["created_at"] = now
        elif hasattr(record, "updated_at"):
            stamps["updated_at"] = now
        document.update(stamps)

        collection = self.collection()
        if oid is None:
            async with self._operation("save") as session:
                result = await collection.insert_one(document, session=session)
            identifier = format_object_id(result.inserted_id)
        else:
            identifier = format_object_id(oid)
            async with self._operation("save", identifier) as session:
                await collection.replace_one(
                    {"_id": oid}, document, upsert=True, session=session
                )

        # The record only changes once the write went through.
        for name, value in stamps.items():
            setattr(record, name, value)
        record.id = identifier
        logger.debug(f"Saved {self._model_type.__name__} with id={identifier}")
        return identifier

    async def remove(self, record_or_id: Any, *, missing_ok: bool = False) -> bool:
        """
        Delete a record's document by identifier.

        Args:
            record_or_id: A record, or its identifier
            missing_ok: Treat an absent document as success

        Returns:
            True if a document was deleted, False if it was absent and
            ``missing_ok`` is set

        Raises:
            NotFoundError: If the record has no id or its document does not exist
            InvalidIdentifierError: If the identifier is malformed
            StoreUnavailableError: If the delete fails
        """
        if isinstance(record_or_id, Identifiable):
            identifier = record_or_id.id
        else:
            identifier = record_or_id

        if identifier is None:
            if missing_ok:
                return False
            raise NotFoundError(
                "Record has no identifier; it was never saved",
                database=self._binding.database,
                collection=self._binding.collection,
            )

        oid = parse_object_id(identifier)
        identifier = format_object_id(oid)

        async with self._operation("remove", identifier) as session:
            result = await self.collection().delete_one({"_id": oid}, session=session)

        if result.deleted_count == 0:
            if missing_ok:
                return False
            raise NotFoundError(
                "Document not found",
                identifier=identifier,
                database=self._binding.database,
                collection=self._binding.collection,
            )

        logger.debug(f"Removed {self._model_type.__name__} with id={identifier}")
        return True
