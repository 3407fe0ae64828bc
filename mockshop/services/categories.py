"""
Category lookups.

When the ``categories`` collection is empty the catalogue still exposes
categories, derived from the distinct ``category`` names on products.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from ..storage.query import run_query
from ..utils.queries import text_query
from .entity_services import PaginatedResult, category_service, find_options, product_service

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    out = "".join(ch.lower() if ch.isalnum() else "-" for ch in str(name or ""))
    return "-".join(part for part in out.split("-") if part)


def derived_category_id(name: str) -> str:
    return "cat_" + re.sub(r"\s+", "_", str(name).strip().lower())


def derive_categories() -> List[Dict[str, Any]]:
    """One category per distinct product category, in first-seen order."""
    seen: Dict[str, Dict[str, Any]] = {}
    for product in product_service.find_all():
        name = product.get("category")
        if not name:
            continue
        stamp = product.get("created_at")
        entry = seen.get(name)
        if entry is None:
            seen[name] = {
                "id": derived_category_id(name),
                "name": name,
                "description": f"{name} products",
                "slug": slugify(name),
                "parent_id": None,
                "created_at": stamp,
                "updated_at": stamp,
            }
        elif stamp and (entry["created_at"] is None or stamp < entry["created_at"]):
            entry["created_at"] = entry["updated_at"] = stamp
    return list(seen.values())


def uses_derived_categories() -> bool:
    return category_service.count() == 0


def _category_query(parent_id: Optional[str] = None, search: Optional[str] = None) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if parent_id is not None:
        query["parent_id"] = parent_id
    if search:
        query.update(text_query(search, ("name", "description")))
    return query


def get_all_categories(page: int = 1, limit: int = 10, parent_id: Optional[str] = None,
                       search: Optional[str] = None, sort_by: str = "created_at",
                       sort_order: str = "desc") -> PaginatedResult:
    query = _category_query(parent_id, search)
    options = find_options(page, limit, sort_by, sort_order)
    page = max(page, 1)
    if uses_derived_categories():
        derived = derive_categories()
        total = len(run_query(derived, query))
        return PaginatedResult(items=run_query(derived, query, options), total=total, page=page, limit=limit)

    source = category_service.source
    return PaginatedResult(items=source.find(query, options), total=source.count(query), page=page, limit=limit)


def get_category_by_id(category_id: str) -> Optional[Dict[str, Any]]:
    if uses_derived_categories():
        found = run_query(derive_categories(), {"id": category_id}, {"limit": 1})
        return found[0] if found else None
    return category_service.get_by_id(category_id)


def get_category_by_slug(slug: str) -> Optional[Dict[str, Any]]:
    if uses_derived_categories():
        found = run_query(derive_categories(), {"slug": slug}, {"limit": 1})
        return found[0] if found else None
    return category_service.find_one({"slug": slug})


def get_category(id_or_slug: str) -> Optional[Dict[str, Any]]:
    return get_category_by_id(id_or_slug) or get_category_by_slug(id_or_slug)


def get_products_for_category(category_id: str, page: int = 1, limit: int = 10,
                              sort_by: str = "created_at", sort_order: str = "desc") -> Optional[PaginatedResult]:
    """Products whose ``category`` equals the category's name; None when the category is unknown."""
    category = get_category(category_id)
    if category is None:
        return None
    result = product_service.get_all({
        "category": category["name"],
        "page": page,
        "limit": limit,
        "sort_by": sort_by,
        "sort_order": sort_order,
    })
    logger.debug("Found %d products for category %s (%s)", result.total, category["name"], category_id)
    return result


def get_product_counts_by_category() -> Dict[str, int]:
    categories = derive_categories() if uses_derived_categories() else category_service.find_all()
    return {c["id"]: product_service.count({"category": c.get("name")}) for c in categories}


def search_categories(text: str, page: int = 1, limit: int = 20) -> PaginatedResult:
    return get_all_categories(page=page, limit=limit, search=text, sort_by="name", sort_order="asc")
