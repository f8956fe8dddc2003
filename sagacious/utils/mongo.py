"""
MongoDB document helpers.

Converts documents into JSON-serializable structures for HTTP responses.
"""

from datetime import datetime
from typing import Any

from bson import ObjectId


def _clean_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return clean_mongo_doc(value)
    if isinstance(value, (list, tuple)):
        return [_clean_value(item) for item in value]
    return value


def clean_mongo_doc(doc: dict[str, Any] | None) -> dict[str, Any] | None:
    """
    Convert a MongoDB document to JSON-serializable form.

    Recursively converts MongoDB-specific types:
    - ObjectId -> str
    - datetime -> ISO format string
    - Nested dictionaries and lists are processed recursively

    Args:
        doc: MongoDB document (dict) or None

    Returns:
        Cleaned document, or None if input was None

    Example:
        doc = {"_id": ObjectId("507f1f77bcf86cd799439011"), "name": "John"}
        clean_mongo_doc(doc)
        # {"_id": "507f1f77bcf86cd799439011", "name": "John"}
    """
    if doc is None:
        return None

    if not isinstance(doc, dict):
        return _clean_value(doc)

    return {key: _clean_value(value) for key, value in doc.items()}


def clean_mongo_docs(docs: list[Any]) -> list[Any]:
    """Apply clean_mongo_doc to each document in a list."""
    return [clean_mongo_doc(doc) for doc in docs]
