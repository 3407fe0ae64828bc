"""Query fragments shared by services and route handlers."""
import re
from typing import Any, Dict, Iterable, Optional


def contains(text: str) -> Dict[str, Any]:
    return {"$regex": re.escape(text), "$options": "i"}


def ci_equals(text: str) -> Dict[str, Any]:
    return {"$regex": f"^{re.escape(text)}$", "$options": "i"}


def text_query(text: str, fields: Iterable[str]) -> Dict[str, Any]:
    """Case-insensitive substring match on any of ``fields`` (list fields match per element)."""
    return {"$or": [{f: contains(text)} for f in fields]}


def build_query(exact: Optional[Dict[str, Any]] = None, ci: Optional[Dict[str, Any]] = None,
                **extra) -> Dict[str, Any]:
    """
    Combine request filters, skipping empty values.

    ``exact`` values compare as-is, ``ci`` values compare case-insensitively.
    """
    query: Dict[str, Any] = {}
    for key, value in (exact or {}).items():
        if value not in (None, ""):
            query[key] = value
    for key, value in (ci or {}).items():
        if value not in (None, ""):
            query[key] = ci_equals(value)
    query.update({k: v for k, v in extra.items() if v is not None})
    return query
