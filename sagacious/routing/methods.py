"""
HTTP methods supported by the route table.
"""

from enum import Enum
from typing import Any

from ..exceptions import ProgrammingError


class HttpMethod(Enum):
    GET = 0
    POST = 1
    PUT = 2
    PATCH = 3
    DELETE = 4


_METHOD_NAMES: dict[HttpMethod, str] = {
    HttpMethod.GET: "GET",
    HttpMethod.POST: "POST",
    HttpMethod.PUT: "PUT",
    HttpMethod.PATCH: "PATCH",
    HttpMethod.DELETE: "DELETE",
}

_METHODS_BY_NAME: dict[str, HttpMethod] = {name: method for method, name in _METHOD_NAMES.items()}


def to_string(method: HttpMethod) -> str:
    """
    Return the request-line name of ``method``.

    Raises:
        ProgrammingError: If ``method`` is not an HttpMethod member. Callers
            only ever pass enum members, so anything else is a bug.
    """
    try:
        return _METHOD_NAMES[method]
    except (KeyError, TypeError) as e:
        raise ProgrammingError(f"Unsupported HTTP method: {method!r}") from e


def from_string(name: Any) -> HttpMethod:
    """
    Parse a method name, case-insensitively.

    Raises:
        ValueError: If ``name`` is not one of the supported methods
    """
    if isinstance(name, str):
        method = _METHODS_BY_NAME.get(name.upper())
        if method is not None:
            return method
    raise ValueError(f"Unsupported HTTP method name: {name!r}")
