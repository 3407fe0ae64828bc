from typing import Any, Dict, Iterable, List, Optional, Tuple

from flask import current_app, request

from ..errors import ApiError


def int_arg(name: str, default: int, minimum: Optional[int] = None) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ApiError("VALIDATION_ERROR", f"{name} must be an integer", {name: raw})
    if minimum is not None and value < minimum:
        raise ApiError("VALIDATION_ERROR", f"{name} must be at least {minimum}", {name: raw})
    return value


def float_arg(name: str, default: Optional[float] = None) -> Optional[float]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ApiError("VALIDATION_ERROR", f"{name} must be a number", {name: raw})


def flag_arg(name: str) -> bool:
    return str(request.args.get(name, "")).strip().lower() in {"1", "true", "yes", "on"}


def page_args(default_limit: Optional[int] = None) -> Tuple[int, int]:
    if default_limit is None:
        default_limit = current_app.config.get("DEFAULT_PAGE_LIMIT", 20)
    return int_arg("page", 1, minimum=1), int_arg("limit", default_limit, minimum=1)


def sort_args(default_by: str = "created_at", default_order: str = "desc") -> Tuple[str, str]:
    sort_by = request.args.get("sort_by") or default_by
    sort_order = (request.args.get("sort_order") or default_order).lower()
    if sort_order not in ("asc", "desc"):
        raise ApiError("VALIDATION_ERROR", "sort_order must be 'asc' or 'desc'", {"sort_order": sort_order})
    return sort_by, sort_order


def json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ApiError("BAD_REQUEST", "Request body must be a JSON object")
    return body


def require_fields(body: Dict[str, Any], fields: Iterable[str]) -> None:
    fields = list(fields)
    missing: List[str] = [f for f in fields if body.get(f) in (None, "", [])]
    if missing:
        raise ApiError("VALIDATION_ERROR", "Missing required fields",
                       {"required_fields": fields, "missing_fields": missing})


def require_choice(body: Dict[str, Any], field: str, allowed: Iterable[str]) -> None:
    allowed = list(allowed)
    value = body.get(field)
    if value is not None and value not in allowed:
        raise ApiError("VALIDATION_ERROR", f"{field} must be one of: {', '.join(allowed)}",
                       {"field": field, "allowed_values": allowed})
