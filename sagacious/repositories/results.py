"""
Lookup outcomes.

``Repository.get`` returns one of Found, NotFound or Failure so callers can
tell a missing document apart from a document whose fields are all
defaults, and from a store that could not be queried.

Example:
    result = await users.get(user_id)
    if isinstance(result, Found):
        render(result.record)
    elif isinstance(result, NotFound):
        return 404
    else:
        raise result.error
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from ..exceptions import NotFoundError, SagaciousError

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    """The document exists; ``record`` holds it mapped onto the domain type."""

    record: T

    found = True

    def unwrap(self) -> T:
        return self.record


@dataclass(frozen=True)
class NotFound:
    """No document has the requested identifier."""

    identifier: str
    database: str | None = None
    collection: str | None = None

    found = False

    def unwrap(self):
        raise NotFoundError(
            "Document not found",
            identifier=self.identifier,
            database=self.database,
            collection=self.collection,
        )


@dataclass(frozen=True)
class Failure:
    """The store could not answer; ``error`` is the raised-ready exception."""

    error: SagaciousError

    found = False

    @property
    def reason(self) -> str:
        return str(self.error)

    def unwrap(self):
        raise self.error


LookupResult = Union[Found[T], NotFound, Failure]
