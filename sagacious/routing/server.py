"""
Route table over an embedded FastAPI application.

Handlers are registered per (method, pattern). Registering the same pair
again replaces the handler: the FastAPI route is added once per pair and
looks its handler up in the table on every request.

Usage:
    server = Server()

    @server.get("/users/{user_id}")
    async def show_user(req, res):
        result = await users.get(req.path_params["user_id"])
        if result.found:
            res.send_json(200, result.record.to_document())
        else:
            res.send_json(404, {"error": "not found"})

    server.run(8080)
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Union

import uvicorn
from fastapi import FastAPI
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request as StarletteRequest
from starlette.responses import Response as StarletteResponse

from ..config import ServerConfig
from ..constants import MAX_PORT, MIN_PORT, REQUEST_ID_HEADER
from ..exceptions import ConfigurationError
from ..observability import clear_correlation_id, set_correlation_id
from ..observability import get_logger as get_contextual_logger
from .exchange import Request, Response
from .methods import HttpMethod, to_string

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

Handler = Callable[[Request, Response], Union[None, Awaitable[None]]]


class Server:
    """
    HTTP route table bound to an embedded server.

    Handlers may be plain functions, which run in the server's thread pool,
    or coroutine functions, which run on the event loop. Either way they can
    be invoked concurrently for different exchanges.
    """

    def __init__(self, config: ServerConfig | None = None):
        self._config = config or ServerConfig()
        self._config.validate()
        self._app = FastAPI(title="sagacious", docs_url=None, redoc_url=None, openapi_url=None)
        self._resource: dict[str, dict[str, Handler]] = {}

    @property
    def app(self) -> FastAPI:
        """The ASGI application serving the route table."""
        return self._app

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    def set_port(self, port: int) -> None:
        if not MIN_PORT <= port <= MAX_PORT:
            raise ConfigurationError(
                f"port must be between {MIN_PORT} and {MAX_PORT}, got {port}",
                config_key="port",
                config_value=port,
            )
        self._config.port = port

    def on(self, method: HttpMethod, pattern: str, handler: Handler) -> None:
        """
        Register ``handler`` for requests matching ``method`` and ``pattern``.

        The pattern is passed to FastAPI unchanged. A later registration for
        the same pair replaces the earlier handler.

        Raises:
            ProgrammingError: If ``method`` is not an HttpMethod member
        """
        method_name = to_string(method)
        handlers = self._resource.setdefault(pattern, {})
        replacing = method_name in handlers
        handlers[method_name] = handler

        if replacing:
            logger.debug(f"Replaced handler for {method_name} {pattern}")
            return

        self._app.add_api_route(
            pattern,
            self._endpoint(pattern, method_name),
            methods=[method_name],
            include_in_schema=False,
        )
        logger.debug(f"Registered route {method_name} {pattern}")

    def route(self, method: HttpMethod, pattern: str) -> Callable[[Handler], Handler]:
        """Decorator form of on()."""

        def decorator(handler: Handler) -> Handler:
            self.on(method, pattern, handler)
            return handler

        return decorator

    def get(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(HttpMethod.GET, pattern)

    def post(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(HttpMethod.POST, pattern)

    def put(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(HttpMethod.PUT, pattern)

    def patch(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(HttpMethod.PATCH, pattern)

    def delete(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.route(HttpMethod.DELETE, pattern)

    def routes(self) -> list[tuple[str, str]]:
        """Registered (method name, pattern) pairs."""
        return [
            (method_name, pattern)
            for pattern, handlers in self._resource.items()
            for method_name in handlers
        ]

    def _endpoint(self, pattern: str, method_name: str):
        async def endpoint(request: StarletteRequest):
            return await self._dispatch(pattern, method_name, request)

        endpoint.__name__ = f"{method_name.lower()}_{pattern}"
        return endpoint

    async def _dispatch(
        self, pattern: str, method_name: str, raw_request: StarletteRequest
    ) -> StarletteResponse:
        handler = self._resource[pattern][method_name]
        set_correlation_id(raw_request.headers.get(REQUEST_ID_HEADER))
        request, response = Request(raw_request), Response()

        try:
            if inspect.iscoroutinefunction(handler):
                await handler(request, response)
            else:
                result = await run_in_threadpool(handler, request, response)
                if inspect.isawaitable(result):
                    await result

            if not response.sent:
                contextual_logger.error(
                    "Handler returned without sending a response",
                    extra={"method": method_name, "pattern": pattern},
                )
                return StarletteResponse(status_code=500)
            return response.result
        finally:
            clear_correlation_id()

    def run(self, port: int | None = None) -> None:
        """
        Serve the route table. Blocks for the lifetime of the server.

        Args:
            port: Listen port; replaces the configured port when given
        """
        if port is not None:
            self.set_port(port)

        logger.info(f"Starting server on {self.host}:{self.port} with {len(self.routes())} routes")
        uvicorn.run(
            self._app,
            host=self.host,
            port=self.port,
            log_level=self._config.log_level,
        )
