"""
MongoDB Helper Utilities
Functions to clean MongoDB documents for JSON serialization
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from utils.timezone import iso_utc, to_utc


def sanitize_mongo_doc(doc: Any) -> Any:
    """
    Recursively convert MongoDB-specific values so a document is JSON
    serializable: ObjectId -> str, datetime -> ISO-8601 UTC string.

    Args:
        doc: MongoDB document, list, dict, or primitive value

    Returns:
        Sanitized copy safe for JSON serialization
    """
    if doc is None:
        return None

    if isinstance(doc, ObjectId):
        return str(doc)

    if isinstance(doc, datetime):
        return iso_utc(doc)

    if isinstance(doc, dict):
        return {key: sanitize_mongo_doc(value) for key, value in doc.items()}

    if isinstance(doc, (list, tuple)):
        return [sanitize_mongo_doc(item) for item in doc]

    return doc


def sanitize_mongo_list(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [sanitize_mongo_doc(doc) for doc in docs]


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for a 24-hex string (or ObjectId), else None."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def db_datetime(dt: datetime) -> datetime:
    """Naive UTC datetime, the form pymongo stores and hands back."""
    return to_utc(dt).replace(tzinfo=None)


def clamp_limit(value: Optional[int], default: int, maximum: int) -> int:
    """Page size from a query param: missing/zero -> default, capped at maximum, at least 1."""
    if not value:
        return default
    return max(1, min(int(value), maximum))


def clamp_offset(value: Optional[int]) -> int:
    if not value or value < 0:
        return 0
    return int(value)
