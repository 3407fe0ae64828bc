"""
Unit tests for the generic entity services.
"""
import re

import pytest

from mockshop.errors import UnsupportedOperation
from mockshop.services.entity_services import EntityService, PaginatedResult, find_options, product_service
from mockshop.storage import CollectionName


@pytest.fixture
def customers(context):
    return EntityService(CollectionName.CUSTOMERS, context=context)


@pytest.mark.unit
class TestFindOptions:
    def test_translates_page_and_sort(self):
        options = find_options(page=3, limit=5, sort_by="name", sort_order="asc")

        assert options.skip == 10
        assert options.limit == 5
        assert options.sort == {"name": 1}

    def test_clamps_page(self):
        assert find_options(page=0, limit=5).skip == 0

    def test_total_pages(self):
        assert PaginatedResult(total=21, limit=10).total_pages == 3
        assert PaginatedResult(total=0, limit=10).total_pages == 0
        assert PaginatedResult(total=5, limit=0).total_pages == 0


@pytest.mark.unit
class TestEntityService:
    """Tests for CRUD through EntityService."""

    def test_get_by_id(self, customers):
        assert customers.get_by_id("cust_001")["name"] == "Jane Doe"
        assert customers.get_by_id("missing") is None

    def test_get_all_defaults(self, customers):
        """Page 1, limit 10, newest first."""
        result = customers.get_all()

        assert (result.page, result.limit, result.total) == (1, 10, 3)
        assert [c["id"] for c in result.items] == ["cust_002", "cust_001", "cust_003"]

    def test_get_all_filters_and_pages(self, customers):
        result = customers.get_all({"tier": "SILVER", "page": 1, "limit": 1, "ignored": None})

        assert result.total == 1
        assert result.items[0]["id"] == "cust_001"

    def test_get_all_page_past_end(self, customers):
        result = customers.get_all({"page": 5, "limit": 2})

        assert result.items == []
        assert result.total == 3

    def test_get_all_sort_override(self, customers):
        result = customers.get_all({"sort_by": "name", "sort_order": "asc"})

        assert [c["name"] for c in result.items] == ["Jane Doe", "John Smith", "Maria Garcia"]

    def test_create_assigns_id_and_timestamps(self, customers):
        created = customers.create({"email": "new@example.com", "name": "New"})

        assert re.match(r"^cust_\d+$", created["id"])
        assert created["created_at"] == created["updated_at"]
        assert customers.get_by_id(created["id"]) == created

    def test_update_strips_protected_fields(self, customers):
        original = customers.get_by_id("cust_002")

        updated = customers.update("cust_002", {"id": "hijack", "created_at": "1999", "name": "Johnny"})

        assert updated["id"] == "cust_002"
        assert updated["created_at"] == original["created_at"]
        assert updated["name"] == "Johnny"
        assert updated["updated_at"] != original["updated_at"]

    def test_update_missing_returns_none(self, customers):
        assert customers.update("missing", {"name": "x"}) is None

    def test_delete(self, customers):
        assert customers.delete("cust_003") is True
        assert customers.delete("cust_003") is False

    def test_writes_fail_in_snapshot_mode(self, context, customers):
        context.set_mode(False)

        with pytest.raises(UnsupportedOperation):
            customers.create({"email": "x@y.z", "name": "X"})

    def test_module_service_uses_app_context(self, app):
        with app.app_context():
            assert product_service.count() == 8

    def test_module_service_follows_mode_switch(self, app):
        with app.app_context():
            app.extensions["mockshop_data"].set_mode(False)

            with pytest.raises(UnsupportedOperation):
                product_service.delete("prod_001")
