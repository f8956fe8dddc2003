"""
HTTP route table.

Registers (method, pattern) handlers on an embedded FastAPI application and
wraps each exchange in thin Request / Response objects.
"""

from .exchange import Request, Response
from .methods import HttpMethod, from_string, to_string
from .server import Handler, Server

__all__ = [
    "Handler",
    "HttpMethod",
    "Request",
    "Response",
    "Server",
    "from_string",
    "to_string",
]
