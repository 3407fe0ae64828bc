"""JSON envelopes: ``{"data", "meta"}`` on success, ``{"error": {...}}`` on failure."""
import math
from typing import Any, Dict, Optional

from flask import jsonify

from ..errors import ApiError, status_for


def success_response(data: Any, meta: Optional[Dict[str, Any]] = None, status: int = 200):
    body = {"data": data}
    if meta is not None:
        body["meta"] = meta
    return jsonify(body), status


def created_response(data: Any):
    return success_response(data, status=201)


def pagination_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def paginated_response(items, total: int, page: int, limit: int):
    return success_response(items, pagination_meta(total, page, limit))


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None):
    error = {"code": code, "message": message}
    if details:
        error["details"] = details
    return jsonify({"error": error}), status_for(code)


def not_found(resource: str, resource_id: str) -> ApiError:
    """``not_found("support ticket", "t1")`` -> SUPPORT_TICKET_NOT_FOUND."""
    slug = resource.replace(" ", "_")
    return ApiError(
        f"{slug.upper()}_NOT_FOUND",
        f"{resource[:1].upper() + resource[1:]} with ID '{resource_id}' not found",
        {f"{slug}_id": resource_id},
    )


def result_response(result):
    """Envelope for a service ``PaginatedResult``."""
    return paginated_response(result.items, result.total, result.page, result.limit)
