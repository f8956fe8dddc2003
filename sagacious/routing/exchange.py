"""
Request and response wrappers handed to route handlers.

Handlers never build Starlette responses themselves. They call
``response.send`` or ``response.send_json`` exactly once and the route
table returns the result to the server.
"""

import json
import logging
from collections.abc import AsyncIterable, Iterable, Iterator
from http import HTTPStatus
from typing import IO, Any, Union

from starlette.datastructures import Headers, MutableHeaders, QueryParams
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse
from starlette.responses import StreamingResponse

from ..constants import JSON_CONTENT_TYPE, STREAM_CHUNK_SIZE
from ..exceptions import ResponseAlreadySentError
from ..utils.mongo import clean_mongo_doc, clean_mongo_docs

logger = logging.getLogger(__name__)

Status = Union[int, HTTPStatus]
Body = Union[str, bytes, IO, Iterable, AsyncIterable]


class Request:
    """Thin wrapper around the server's request object."""

    def __init__(self, raw: StarletteRequest):
        self._raw = raw

    @property
    def raw(self) -> StarletteRequest:
        """The underlying Starlette request."""
        return self._raw

    @property
    def method(self) -> str:
        return self._raw.method

    @property
    def path(self) -> str:
        return self._raw.url.path

    @property
    def path_params(self) -> dict[str, Any]:
        return self._raw.path_params

    @property
    def query_params(self) -> QueryParams:
        return self._raw.query_params

    @property
    def headers(self) -> Headers:
        return self._raw.headers

    async def body(self) -> bytes:
        return await self._raw.body()

    async def json(self) -> Any:
        return await self._raw.json()


def _read_chunks(stream: IO) -> Iterator[bytes]:
    while True:
        chunk = stream.read(STREAM_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


class Response:
    """
    Accumulates headers, then sends a status and body once.

    After the first send the response is frozen: further sends or header
    changes raise ResponseAlreadySentError.
    """

    def __init__(self) -> None:
        self._headers = MutableHeaders()
        self._result: StarletteResponse | None = None

    @property
    def sent(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> StarletteResponse | None:
        """The Starlette response produced by send(), or None before it."""
        return self._result

    @property
    def status_code(self) -> int | None:
        return self._result.status_code if self._result is not None else None

    @property
    def headers(self) -> Headers:
        """Read-only snapshot of the accumulated headers."""
        return Headers(raw=list(self._headers.raw))

    def _ensure_open(self) -> None:
        if self._result is not None:
            raise ResponseAlreadySentError(
                "Response already sent",
                context={"status_code": self._result.status_code},
            )

    def set_header(self, key: str, value: str) -> None:
        """Add a header. Repeated keys keep every value."""
        self._ensure_open()
        self._headers.append(key, value)

    def send(self, status: Status, body: Body = b"") -> None:
        """
        Send ``body`` with ``status`` and the accumulated headers.

        String and bytes bodies get a Content-Length equal to their UTF-8
        byte length. File-like objects and (async) iterables are streamed
        without one.

        Raises:
            ResponseAlreadySentError: If the response was already sent
            TypeError: If ``body`` is neither text, bytes nor a stream
        """
        self._send(status, body)

    def send_json(self, status: Status, body: Any) -> None:
        """
        Send a JSON body with ``Content-Type: application/json``.

        ``body`` may be pre-encoded JSON (str, bytes or a stream) or a dict or
        list, which is encoded here with ObjectIds and datetimes rendered as
        strings. A rejected body leaves the headers untouched.
        """
        self._ensure_open()
        if isinstance(body, dict):
            body = json.dumps(clean_mongo_doc(body))
        elif isinstance(body, list):
            body = json.dumps(clean_mongo_docs(body))
        self._send(status, body, content_type=JSON_CONTENT_TYPE)

    def _send(self, status: Status, body: Body, content_type: str | None = None) -> None:
        self._ensure_open()
        status_code = int(status)

        if isinstance(body, str):
            payload: bytes | None = body.encode("utf-8")
        elif isinstance(body, (bytes, bytearray, memoryview)):
            payload = bytes(body)
        else:
            payload = None

        if payload is None:
            if hasattr(body, "read"):
                stream = _read_chunks(body)
            elif isinstance(body, (AsyncIterable, Iterable)):
                stream = body
            else:
                raise TypeError(f"Unsupported response body type: {type(body).__name__}")

        if content_type is not None:
            self._headers["Content-Type"] = content_type

        if payload is not None:
            self._headers["Content-Length"] = str(len(payload))
            self._result = StarletteResponse(
                content=payload, status_code=status_code, headers=self._headers
            )
        else:
            self._result = StreamingResponse(
                stream, status_code=status_code, headers=self._headers
            )
