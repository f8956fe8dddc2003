"""
SAGACIOUS Repository Bindings

Binds domain types to MongoDB collections with identifier-keyed access.

Usage:
    from sagacious.repositories import Model, Repository, Found

    @dataclass
    class User(Model):
        __database__ = "shop"
        __collection__ = "users"

        email: str = ""

    users = Repository(User, connection)
    result = await users.get(user_id)
"""

from .base import CollectionBinding, CollectionBound, Identifiable, Model
from .mongo import Repository
from .results import Failure, Found, LookupResult, NotFound

__all__ = [
    "CollectionBinding",
    "CollectionBound",
    "Identifiable",
    "Model",
    "Repository",
    "Found",
    "NotFound",
    "Failure",
    "LookupResult",
]
