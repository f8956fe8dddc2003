"""
Utility functions and helpers for SAGACIOUS.
"""

from .identifiers import format_object_id, is_valid_object_id, parse_object_id
from .mongo import clean_mongo_doc, clean_mongo_docs

__all__ = [
    "clean_mongo_doc",
    "clean_mongo_docs",
    "format_object_id",
    "is_valid_object_id",
    "parse_object_id",
]
