"""
Database layer.

Provides the pooled connection manager used by repositories.
"""

from .connection import ConnectionManager

__all__ = ["ConnectionManager"]
