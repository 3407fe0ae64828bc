import logging
import math
from typing import Any, Dict, List, Optional

from ..utils.queries import ci_equals, text_query
from .entity_services import PaginatedResult, find_options, product_service

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "description", "brand", "tags")
SORT_KEYWORDS = {
    "price_asc": {"price.amount": 1},
    "price_desc": {"price.amount": -1},
    "newest": {"created_at": -1},
}


def product_query(category: Optional[str] = None, search: Optional[str] = None,
                  price_min: Optional[float] = None, price_max: Optional[float] = None) -> Dict[str, Any]:
    clauses: List[Dict[str, Any]] = []
    if category:
        clauses.append({"category": ci_equals(category)})
    if search:
        clauses.append(text_query(search, SEARCH_FIELDS))
    price: Dict[str, float] = {}
    if price_min is not None:
        price["$gte"] = price_min
    if price_max is not None:
        price["$lte"] = price_max
    if price:
        clauses.append({"price.amount": price})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def get_all_products(page: int = 1, limit: int = 10, category: Optional[str] = None,
                     search: Optional[str] = None, sort_by: str = "created_at",
                     sort_order: str = "desc") -> PaginatedResult:
    query = product_query(category=category, search=search)
    source = product_service.source
    items = source.find(query, find_options(page, limit, sort_by, sort_order))
    return PaginatedResult(items=items, total=source.count(query), page=max(page, 1), limit=limit)


def price_ranges(products: List[Dict[str, Any]], buckets: int = 4) -> List[str]:
    """Split the observed price span into ``buckets`` ``"lo-hi"`` labels."""
    prices = sorted(p["price"]["amount"] for p in products
                    if isinstance(p.get("price"), dict) and isinstance(p["price"].get("amount"), (int, float)))
    if not prices:
        return []
    low, high = prices[0], prices[-1]
    step = (high - low) / buckets
    return [
        f"{math.floor(low + i * step)}-{math.ceil(low + (i + 1) * step)}"
        for i in range(buckets)
    ]


def _result_row(product: Dict[str, Any]) -> Dict[str, Any]:
    price = product.get("price")
    images = product.get("images") or [""]
    return {
        "id": product.get("id"),
        "name": product.get("name"),
        "price": price.get("amount") if isinstance(price, dict) else price,
        "image": images[0],
    }


def search_products(text: str, category: Optional[str] = None, price_min: Optional[float] = None,
                    price_max: Optional[float] = None, sort: Optional[str] = None,
                    page: int = 1, limit: int = 20) -> Dict[str, Any]:
    """
    Keyword search used by ``/search/products``.

    Without a recognised ``sort`` keyword results keep storage order.
    Facets are computed over the whole catalogue, not just the matches.
    """
    source = product_service.source
    query = product_query(category=category, search=text, price_min=price_min, price_max=price_max)
    matched = source.find(query, {"sort": SORT_KEYWORDS.get(sort)})
    catalogue = source.find({})

    categories: List[str] = []
    for product in catalogue:
        name = product.get("category")
        if name and name not in categories:
            categories.append(name)

    page = max(page, 1)
    start = (page - 1) * limit
    total = len(matched)
    logger.debug("Product search %r matched %d of %d", text, total, len(catalogue))
    return {
        "results": [_result_row(p) for p in matched[start:start + limit]],
        "filters": {"categories": categories, "price_ranges": price_ranges(catalogue)},
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit) if limit else 0,
        },
    }
