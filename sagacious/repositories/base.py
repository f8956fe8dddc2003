"""
Domain record capabilities and collection bindings.

A domain type does not inherit from a repository class. Any default
constructible class works once it is Identifiable, and it may also be
CollectionBound to choose its own (database, collection) pair.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Protocol, runtime_checkable

from bson import ObjectId

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class CollectionBinding:
    """
    An immutable (database, collection) pair.

    Example:
        CollectionBinding("shop", "orders")
    """

    database: str
    collection: str

    def __post_init__(self) -> None:
        for attr in ("database", "collection"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"Collection binding requires a non-empty {attr} name",
                    config_key=attr,
                    config_value=value,
                )

    @property
    def namespace(self) -> str:
        """The MongoDB namespace, ``database.collection``."""
        return f"{self.database}.{self.collection}"


@runtime_checkable
class Identifiable(Protocol):
    """A record keyed by a hex ObjectId string; ``None`` until first saved."""

    id: str | None


@runtime_checkable
class CollectionBound(Protocol):
    """A record type that names its own collection binding."""

    @classmethod
    def collection_binding(cls) -> CollectionBinding | None:
        """Return the binding, or None to defer to the repository's names."""
        ...


@dataclass
class Model:
    """
    Convenience base for domain records.

    Satisfies both Identifiable and CollectionBound. Set ``__collection__``
    (and optionally ``__database__``) to bind the type to a collection.

    Example:
        @dataclass
        class User(Model):
            __database__ = "shop"
            __collection__ = "users"

            email: str = ""
            name: str = ""
    """

    __database__: ClassVar[str | None] = None
    __collection__: ClassVar[str | None] = None

    id: str | None = None
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)

    @classmethod
    def collection_binding(cls) -> CollectionBinding | None:
        if cls.__database__ and cls.__collection__:
            return CollectionBinding(cls.__database__, cls.__collection__)
        return None

    def to_document(self) -> dict[str, Any]:
        """
        Convert the record to a MongoDB document.

        Every field is written, ``None`` as null. The id becomes ``_id`` once
        the record has one.
        """
        data: dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name != "id":
                data[f.name] = value
            elif value is not None:
                data["_id"] = ObjectId(value) if ObjectId.is_valid(value) else value
        return data

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "Model":
        """
        Default-construct the record and merge a stored document into it.

        Unknown document keys are ignored.
        """
        record = cls()
        field_names = {f.name for f in dataclasses.fields(cls)}
        for key, value in data.items():
            if key == "_id":
                record.id = str(value)
            elif key in field_names:
                setattr(record, key, value)
        return record

