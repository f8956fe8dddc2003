"""
Custom exceptions for SAGACIOUS.

Runtime failures derive from SagaciousError, which keeps compatibility with
RuntimeError. Contract violations raise ProgrammingError instead, which is
an AssertionError and is not meant to be handled.
"""

from typing import Any, Dict, Optional


class SagaciousError(RuntimeError):
    """
    Base exception for SAGACIOUS runtime errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (identifier,
                 database, collection, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class InvalidIdentifierError(SagaciousError):
    """
    Raised when an identifier cannot be decoded into a 12-byte ObjectId.

    Raised before any store round trip is attempted.

    Attributes:
        identifier: The rejected value
    """

    def __init__(
        self,
        message: str,
        identifier: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        context["identifier"] = repr(identifier)
        super().__init__(message, context=context)
        self.identifier = identifier


class NotFoundError(SagaciousError):
    """
    Raised when a lookup or removal targets a document that does not exist.

    Attributes:
        identifier: Identifier that was looked up (may be None for unsaved records)
        database: Database name of the binding (if available)
        collection: Collection name of the binding (if available)
    """

    def __init__(
        self,
        message: str,
        identifier: Optional[str] = None,
        database: Optional[str] = None,
        collection: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        context["identifier"] = identifier
        if database:
            context["database"] = database
        if collection:
            context["collection"] = collection
        super().__init__(message, context=context)
        self.identifier = identifier
        self.database = database
        self.collection = collection


class StoreUnavailableError(SagaciousError):
    """
    Raised when the backing store cannot be reached or a query fails.

    The original driver exception is chained as __cause__.

    Attributes:
        operation: Repository operation that failed (get, save, remove, ...)
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if operation:
            context["operation"] = operation
        super().__init__(message, context=context)
        self.operation = operation


class InitializationError(SagaciousError):
    """
    Raised when the connection manager fails to initialize.

    Attributes:
        mongo_uri: MongoDB connection URI (if available)
        db_name: Database name (if available)
    """

    def __init__(
        self,
        message: str,
        mongo_uri: Optional[str] = None,
        db_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if mongo_uri:
            context["mongo_uri"] = mongo_uri
        if db_name:
            context["db_name"] = db_name
        super().__init__(message, context=context)
        self.mongo_uri = mongo_uri
        self.db_name = db_name


class ConfigurationError(SagaciousError):
    """
    Raised when configuration is invalid or missing.

    Also raised when a repository cannot resolve its collection binding.

    Attributes:
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value


class ResponseAlreadySentError(SagaciousError):
    """Raised when a response is modified or sent again after its terminal send."""


class ProgrammingError(AssertionError):
    """
    Raised on a contract violation, such as an unknown HTTP method reaching
    the method-to-string mapping.
    """
