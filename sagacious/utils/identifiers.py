"""
ObjectId parsing and formatting.

Identifiers travel outside the store as 24-character hex strings. Decoding
is pure and never touches the network, so invalid input fails before any
store round trip.

Lowercase hex is the canonical form: uppercase input is accepted, but it
re-encodes in lowercase.
"""

from typing import Any

from bson import ObjectId

from ..constants import OBJECT_ID_HEX_LENGTH
from ..exceptions import InvalidIdentifierError


def is_valid_object_id(value: Any) -> bool:
    """Return True if ``value`` is an ObjectId or its 24-character hex form."""
    if isinstance(value, ObjectId):
        return True
    # ObjectId.is_valid alone would also accept raw 12-byte values
    return isinstance(value, str) and ObjectId.is_valid(value)


def parse_object_id(value: Any) -> ObjectId:
    """
    Decode an identifier into an ObjectId.

    Only ObjectId instances and 24-character hex strings are accepted.
    ``bson.ObjectId`` also takes raw 12-byte values, which are rejected here
    because identifiers are always exchanged in hex form.

    Args:
        value: Identifier to decode

    Returns:
        The decoded ObjectId

    Raises:
        InvalidIdentifierError: If ``value`` is not a valid identifier
    """
    if isinstance(value, ObjectId):
        return value
    if not is_valid_object_id(value):
        raise InvalidIdentifierError(
            f"Not a valid {OBJECT_ID_HEX_LENGTH}-character hex object id",
            identifier=value,
        )
    return ObjectId(value)


def format_object_id(oid: ObjectId) -> str:
    """Encode an ObjectId as its canonical lowercase 24-character hex string."""
    return str(oid)
