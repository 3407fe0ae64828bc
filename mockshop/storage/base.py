"""The contract every data source implements."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from .query import DeleteOptions, FindOptions, Query, UpdateOptions


class CollectionName(str, Enum):
    PRODUCTS = "products"
    CATEGORIES = "categories"
    CUSTOMERS = "customers"
    ORDERS = "orders"
    CARTS = "carts"
    WISHLISTS = "wishlists"
    REVIEWS = "reviews"
    SUPPORT_TICKETS = "support_tickets"
    FAQ = "faq"
    PROMOTIONS = "promotions"
    RETURNS = "returns"
    NOTIFICATIONS = "notifications"
    PAYMENTS = "payments"
    AUTH_TOKENS = "auth_tokens"
    OTP_SESSIONS = "otp_sessions"

    def __str__(self) -> str:
        return self.value


def collection_name(value) -> str:
    """Accept a CollectionName or its string value; reject unknown names."""
    return CollectionName(value).value


class DataSource(ABC):
    """
    Query/command interface shared by the document store and the static
    snapshot. Reads behave identically on both; writes are optional and a
    read-only source raises ``UnsupportedOperation``.
    """

    collection: str
    writable: bool = False

    @abstractmethod
    def find_one(self, query: Query) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def find(self, query: Optional[Query] = None, options: Optional[FindOptions] = None) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def count(self, query: Optional[Query] = None) -> int:
        ...

    @abstractmethod
    def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def update(self, query: Query, update: Dict[str, Any], options: Optional[UpdateOptions] = None) -> int:
        ...

    @abstractmethod
    def delete(self, query: Query, options: Optional[DeleteOptions] = None) -> int:
        ...

    @abstractmethod
    def reset(self) -> None:
        ...
