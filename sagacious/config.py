"""
Configuration management for SAGACIOUS.

Both configuration classes read environment variables and accept direct
parameters, which take precedence.
"""

import os

from .constants import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_MONGO_URI,
    DEFAULT_PORT,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    MAX_PORT,
    MIN_PORT,
    MIN_SERVER_SELECTION_TIMEOUT_MS,
)
from .exceptions import ConfigurationError


class StoreConfig:
    """
    MongoDB store configuration.

    Example:
        # Using environment variables
        config = StoreConfig()
        connection = ConnectionManager.from_config(config)

        # Or using direct parameters
        config = StoreConfig(mongo_uri="mongodb://localhost:27017", db_name="my_db")
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        db_name: str | None = None,
        max_pool_size: int | None = None,
        min_pool_size: int | None = None,
        server_selection_timeout_ms: int | None = None,
    ):
        """
        Initialize configuration.

        Args:
            mongo_uri: MongoDB connection URI (defaults to MONGO_URI env var)
            db_name: Default database name (defaults to DB_NAME env var)
            max_pool_size: Maximum connection pool size (defaults to 50 or MONGO_MAX_POOL_SIZE)
            min_pool_size: Minimum connection pool size (defaults to 10 or MONGO_MIN_POOL_SIZE)
            server_selection_timeout_ms: Server selection timeout in ms (defaults to 5000)
        """
        self.mongo_uri = mongo_uri or os.getenv("MONGO_URI", DEFAULT_MONGO_URI)
        self.db_name = db_name or os.getenv("DB_NAME", "")
        self.max_pool_size = max_pool_size or int(
            os.getenv("MONGO_MAX_POOL_SIZE", str(DEFAULT_MAX_POOL_SIZE))
        )
        self.min_pool_size = min_pool_size or int(
            os.getenv("MONGO_MIN_POOL_SIZE", str(DEFAULT_MIN_POOL_SIZE))
        )
        self.server_selection_timeout_ms = server_selection_timeout_ms or int(
            os.getenv(
                "MONGO_SERVER_SELECTION_TIMEOUT_MS",
                str(DEFAULT_SERVER_SELECTION_TIMEOUT_MS),
            )
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.mongo_uri:
            raise ConfigurationError(
                "mongo_uri is required (set MONGO_URI environment variable or pass directly)",
                config_key="mongo_uri",
            )

        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set DB_NAME environment variable or pass directly)",
                config_key="db_name",
            )

        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="max_pool_size",
                config_value=self.max_pool_size,
            )

        if self.min_pool_size < 1:
            raise ConfigurationError(
                f"min_pool_size must be >= 1, got {self.min_pool_size}",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.min_pool_size > self.max_pool_size:
            raise ConfigurationError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})",
                config_key="min_pool_size",
                config_value=self.min_pool_size,
            )

        if self.server_selection_timeout_ms < MIN_SERVER_SELECTION_TIMEOUT_MS:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= {MIN_SERVER_SELECTION_TIMEOUT_MS}, "
                f"got {self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )


class ServerConfig:
    """
    Embedded HTTP server configuration.

    Example:
        server = Server(ServerConfig(port=8080))
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        log_level: str | None = None,
    ):
        """
        Initialize configuration.

        Args:
            host: Listen interface (defaults to SAGACIOUS_HOST or 0.0.0.0)
            port: Listen port (defaults to SAGACIOUS_PORT or 9080)
            log_level: uvicorn log level (defaults to SAGACIOUS_LOG_LEVEL or info)
        """
        self.host = host or os.getenv("SAGACIOUS_HOST", DEFAULT_HOST)
        self.port = port or int(os.getenv("SAGACIOUS_PORT", str(DEFAULT_PORT)))
        self.log_level = (log_level or os.getenv("SAGACIOUS_LOG_LEVEL", DEFAULT_LOG_LEVEL)).lower()

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If the port is out of range or the host is empty
        """
        if not self.host:
            raise ConfigurationError("host must not be empty", config_key="host")

        if not MIN_PORT <= self.port <= MAX_PORT:
            raise ConfigurationError(
                f"port must be between {MIN_PORT} and {MAX_PORT}, got {self.port}",
                config_key="port",
                config_value=self.port,
            )
