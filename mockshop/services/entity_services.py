"""
Generic CRUD services, one per entity collection.

Every service resolves its data source at call time, so a backend toggle
takes effect on the next call without rebuilding the services.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..extensions import data
from ..storage import CollectionName, DataContext, DataSource, FindOptions, get_data_source
from ..utils.generators import generate_id, iso_now

PAGING_KEYS = ("page", "limit", "sort_by", "sort_order")


@dataclass
class PaginatedResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def find_options(page: int = 1, limit: int = 10, sort_by: str = "created_at",
                 sort_order: str = "desc") -> FindOptions:
    page = max(int(page), 1)
    limit = max(int(limit), 0)
    return FindOptions(
        sort={sort_by: 1 if sort_order == "asc" else -1},
        skip=(page - 1) * limit,
        limit=limit,
    )


class EntityService:
    """CRUD over one collection through whichever backend is active."""

    def __init__(self, collection, context: Optional[DataContext] = None):
        self.collection = CollectionName(collection).value
        self._context = context

    def __repr__(self):
        return f"EntityService({self.collection!r})"

    @property
    def source(self) -> DataSource:
        context = self._context
        if context is None:
            context = data.context
        return get_data_source(self.collection, context)

    def get_by_id(self, entity_id: str) -> Optional[Dict[str, Any]]:
        return self.source.find_one({"id": entity_id})

    def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.source.find_one(query)

    def find_all(self, query: Optional[Dict[str, Any]] = None, sort: Optional[Dict[str, int]] = None) -> List[Dict[str, Any]]:
        return self.source.find(query or {}, FindOptions(sort=sort))

    def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return self.source.count(query or {})

    def get_all(self, options: Optional[Dict[str, Any]] = None) -> PaginatedResult:
        """
        Page through the collection.

        ``options`` holds ``page`` (1), ``limit`` (10), ``sort_by``
        (``created_at``) and ``sort_order`` (``desc``); every other key
        whose value is not None becomes part of the query.
        """
        options = dict(options or {})
        page = max(int(options.get("page") or 1), 1)
        limit = int(options["limit"]) if options.get("limit") is not None else 10
        sort_by = options.get("sort_by") or "created_at"
        sort_order = options.get("sort_order") or "desc"
        query = {k: v for k, v in options.items() if k not in PAGING_KEYS and v is not None}

        source = self.source
        items = source.find(query, find_options(page, limit, sort_by, sort_order))
        total = source.count(query)
        return PaginatedResult(items=items, total=total, page=page, limit=limit)

    def create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        now = iso_now()
        entity = {"id": generate_id(self.collection), "created_at": now, "updated_at": now}
        entity.update(values)
        return self.source.create(entity)

    def update(self, entity_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        allowed = {k: v for k, v in updates.items() if k not in ("id", "created_at")}
        allowed["updated_at"] = iso_now()
        source = self.source
        if source.update({"id": entity_id}, {"$set": allowed}) == 0:
            return None
        return source.find_one({"id": entity_id})

    def delete(self, entity_id: str) -> bool:
        return self.source.delete({"id": entity_id}) > 0


product_service = EntityService(CollectionName.PRODUCTS)
category_service = EntityService(CollectionName.CATEGORIES)
customer_service = EntityService(CollectionName.CUSTOMERS)
order_service = EntityService(CollectionName.ORDERS)
cart_service = EntityService(CollectionName.CARTS)
wishlist_service = EntityService(CollectionName.WISHLISTS)
review_service = EntityService(CollectionName.REVIEWS)
support_ticket_service = EntityService(CollectionName.SUPPORT_TICKETS)
faq_service = EntityService(CollectionName.FAQ)
promotion_service = EntityService(CollectionName.PROMOTIONS)
return_service = EntityService(CollectionName.RETURNS)
notification_service = EntityService(CollectionName.NOTIFICATIONS)
