# marksheet/utils/helpers.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: str, not_found: str = "Resource not found") -> ObjectId:
    """
    Parse a path id into an ObjectId.
    A malformed id can never match a document, so it is reported as 404.
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=404, detail=not_found)


def try_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Mongo document -> JSON-ready dict: `_id` becomes `id`, password is dropped."""
    out = {}
    for key, value in doc.items():
        if key == "password":
            continue
        if key == "_id":
            out["id"] = str(value)
        elif isinstance(value, ObjectId):
            out[key] = str(value)
        else:
            out[key] = value
    return out


def percentage(obtained: float, maximum: float) -> Optional[float]:
    if not maximum:
        return None
    return round(obtained / maximum * 100, 2)


def format_percentage(obtained: float, maximum: float) -> str:
    value = percentage(obtained, maximum)
    if value is None:
        return "0%"
    return f"{value:.2f}%"
