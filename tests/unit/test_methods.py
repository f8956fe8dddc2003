"""
Unit tests for the HTTP method mapping.
"""

import pytest

from sagacious.exceptions import ProgrammingError
from sagacious.routing.methods import HttpMethod, from_string, to_string


class TestToString:
    """Test method-to-string mapping."""

    def test_known_methods(self):
        """Test the name of each supported method."""
        assert to_string(HttpMethod.GET) == "GET"
        assert to_string(HttpMethod.POST) == "POST"
        assert to_string(HttpMethod.PUT) == "PUT"
        assert to_string(HttpMethod.PATCH) == "PATCH"
        assert to_string(HttpMethod.DELETE) == "DELETE"

    def test_mapping_is_total_and_injective(self):
        """Test that every member maps to a distinct name."""
        names = [to_string(method) for method in HttpMethod]
        assert len(HttpMethod) == 5
        assert len(set(names)) == len(names)

    @pytest.mark.parametrize("value", [5, 0, "GET", "HEAD", None, ["GET"]])
    def test_other_values_are_contract_violations(self, value):
        """Test that anything outside the enum trips a ProgrammingError."""
        with pytest.raises(ProgrammingError):
            to_string(value)

    def test_violation_is_an_assertion(self):
        """Test that the violation is an AssertionError, not a runtime error."""
        with pytest.raises(AssertionError):
            to_string(99)


class TestFromString:
    """Test parsing method names."""

    def test_round_trip(self):
        """Test that from_string inverts to_string."""
        for method in HttpMethod:
            assert from_string(to_string(method)) is method

    def test_case_insensitive(self):
        """Test that lowercase names are accepted."""
        assert from_string("patch") is HttpMethod.PATCH

    def test_unknown_name(self):
        """Test that unknown names raise ValueError."""
        with pytest.raises(ValueError):
            from_string("OPTIONS")
