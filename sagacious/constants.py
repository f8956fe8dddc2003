"""
Constants for SAGACIOUS.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

DEFAULT_MONGO_URI: Final[str] = "mongodb://localhost:27017"
"""Default MongoDB connection URI (the driver's own default host and port)."""

# Connection pool defaults
DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 10
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

MIN_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 1000
"""Smallest server selection timeout accepted by configuration validation."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""

CLIENT_APP_NAME: Final[str] = "SAGACIOUS"
"""Application name reported to the MongoDB server."""

# ============================================================================
# IDENTIFIER CONSTANTS
# ============================================================================

OBJECT_ID_BYTES: Final[int] = 12
"""Size of a MongoDB ObjectId in bytes."""

OBJECT_ID_HEX_LENGTH: Final[int] = OBJECT_ID_BYTES * 2
"""Length of the hex string form of an ObjectId."""

# ============================================================================
# HTTP CONSTANTS
# ============================================================================

DEFAULT_HOST: Final[str] = "0.0.0.0"
"""Default interface the embedded server listens on."""

DEFAULT_PORT: Final[int] = 9080
"""Default port the embedded server listens on."""

MIN_PORT: Final[int] = 1
MAX_PORT: Final[int] = 65535

DEFAULT_LOG_LEVEL: Final[str] = "info"
"""Default uvicorn log level."""

JSON_CONTENT_TYPE: Final[str] = "application/json"
"""Content type set by Response.send_json."""

STREAM_CHUNK_SIZE: Final[int] = 64 * 1024
"""Chunk size used when streaming file-like response bodies (bytes)."""

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
"""Inbound header used as the exchange correlation ID when present."""
