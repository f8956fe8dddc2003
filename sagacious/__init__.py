"""
SAGACIOUS

MongoDB repository bindings for domain types, and a thin HTTP route table
over an embedded server.
"""

from .config import ServerConfig, StoreConfig
from .database import ConnectionManager
from .exceptions import (
    ConfigurationError,
    InitializationError,
    InvalidIdentifierError,
    NotFoundError,
    ProgrammingError,
    ResponseAlreadySentError,
    SagaciousError,
    StoreUnavailableError,
)
from .repositories import (
    CollectionBinding,
    Failure,
    Found,
    Model,
    NotFound,
    Repository,
)
from .routing import HttpMethod, Request, Response, Server

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "StoreConfig",
    "ServerConfig",
    # Database
    "ConnectionManager",
    # Repositories
    "CollectionBinding",
    "Model",
    "Repository",
    "Found",
    "NotFound",
    "Failure",
    # Routing
    "HttpMethod",
    "Request",
    "Response",
    "Server",
    # Errors
    "SagaciousError",
    "InvalidIdentifierError",
    "NotFoundError",
    "StoreUnavailableError",
    "ConfigurationError",
    "InitializationError",
    "ResponseAlreadySentError",
    "ProgrammingError",
]
