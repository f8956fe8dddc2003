"""
Unit tests for custom exceptions.

Tests exception hierarchy and error messages.
"""

import pytest

from sagacious.exceptions import (
    ConfigurationError,
    InitializationError,
    InvalidIdentifierError,
    NotFoundError,
    ProgrammingError,
    ResponseAlreadySentError,
    SagaciousError,
    StoreUnavailableError,
)


class TestExceptionHierarchy:
    """Test exception inheritance hierarchy."""

    @pytest.mark.parametrize(
        "error_class",
        [
            InvalidIdentifierError,
            NotFoundError,
            StoreUnavailableError,
            InitializationError,
            ConfigurationError,
            ResponseAlreadySentError,
        ],
    )
    def test_runtime_errors_share_base(self, error_class):
        """Test that runtime errors derive from SagaciousError and RuntimeError."""
        error = error_class("failure")
        assert isinstance(error, SagaciousError)
        assert isinstance(error, RuntimeError)

    def test_programming_error_is_assertion(self):
        """Test that ProgrammingError is a contract violation, not a runtime error."""
        error = ProgrammingError("bad method")
        assert isinstance(error, AssertionError)
        assert not isinstance(error, SagaciousError)


class TestExceptionMessages:
    """Test exception message formatting."""

    def test_base_error_message(self):
        """Test SagaciousError message without context."""
        error = SagaciousError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.context == {}

    def test_base_error_with_context(self):
        """Test SagaciousError message with context."""
        error = SagaciousError("Something went wrong", context={"collection": "users"})
        assert "context:" in str(error)
        assert "collection=users" in str(error)

    def test_invalid_identifier_records_value(self):
        """Test InvalidIdentifierError keeps the rejected value."""
        error = InvalidIdentifierError("bad id", identifier="xyz")
        assert error.identifier == "xyz"
        assert error.context["identifier"] == "'xyz'"

    def test_not_found_context(self):
        """Test NotFoundError carries the binding."""
        error = NotFoundError(
            "missing", identifier="abc", database="shop", collection="orders"
        )
        assert error.identifier == "abc"
        assert error.database == "shop"
        assert error.collection == "orders"
        assert "collection=orders" in str(error)

    def test_store_unavailable_operation(self):
        """Test StoreUnavailableError records the failed operation."""
        error = StoreUnavailableError("down", operation="get")
        assert error.operation == "get"
        assert error.context["operation"] == "get"

    def test_initialization_error_with_context(self):
        """Test InitializationError with MongoDB context."""
        error = InitializationError(
            "Connection failed", mongo_uri="mongodb://localhost:27017", db_name="test_db"
        )
        assert error.mongo_uri == "mongodb://localhost:27017"
        assert error.db_name == "test_db"
        assert "mongo_uri" in error.context

    def test_configuration_error_with_key(self):
        """Test ConfigurationError with config key."""
        error = ConfigurationError("Invalid value", config_key="max_pool_size", config_value=-1)
        assert error.config_key == "max_pool_size"
        assert error.config_value == -1
        assert "config_key" in error.context
