"""
Unit tests for the product and category services.
"""
import pytest

from mockshop.services import categories, products


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.mark.unit
class TestProducts:
    """Tests for product listing and search."""

    def test_product_query_combines_filters(self):
        query = products.product_query(category="books", search="cook", price_min=10)

        assert len(query["$and"]) == 3
        assert query["$and"][2] == {"price.amount": {"$gte": 10}}

    def test_product_query_empty(self):
        assert products.product_query() == {}

    def test_get_all_products_by_category(self, app_ctx):
        result = products.get_all_products(category="books", sort_by="created_at", sort_order="asc")

        assert [p["id"] for p in result.items] == ["prod_003", "prod_007"]
        assert result.total == 2

    def test_get_all_products_search(self, app_ctx):
        result = products.get_all_products(search="wireless")

        assert {p["id"] for p in result.items} == {"prod_001", "prod_006"}

    def test_price_ranges(self):
        ranges = products.price_ranges([{"price": {"amount": 10}}, {"price": {"amount": 50}}])

        assert ranges == ["10-20", "20-30", "30-40", "40-50"]
        assert products.price_ranges([]) == []

    def test_search_products(self, app_ctx):
        found = products.search_products("audio", sort="price_asc", page=1, limit=10)

        assert [r["id"] for r in found["results"]] == ["prod_006", "prod_001"]
        assert found["results"][0]["price"] == 79.99
        assert found["pagination"] == {"total": 2, "page": 1, "limit": 10, "totalPages": 1}
        assert found["filters"]["categories"] == ["Electronics", "Books", "Home & Kitchen", "Clothing"]
        assert len(found["filters"]["price_ranges"]) == 4

    def test_search_products_price_window(self, app_ctx):
        found = products.search_products("o", price_min=40, price_max=60)

        assert {r["id"] for r in found["results"]} == {"prod_004", "prod_008"}


@pytest.mark.unit
class TestCategories:
    """Tests for stored and derived categories."""

    def test_slugify(self):
        assert categories.slugify("Home & Kitchen") == "home-kitchen"
        assert categories.derived_category_id("Home  Kitchen") == "cat_home_kitchen"

    def test_stored_categories(self, app_ctx):
        result = categories.get_all_categories(sort_by="name", sort_order="asc")

        assert [c["name"] for c in result.items] == ["Books", "Clothing", "Electronics", "Home & Kitchen"]
        assert not categories.uses_derived_categories()

    def test_lookup_by_id_or_slug(self, app_ctx):
        assert categories.get_category("cat_books")["slug"] == "books"
        assert categories.get_category("home-kitchen")["id"] == "cat_home_kitchen"
        assert categories.get_category("nope") is None

    def test_products_for_category(self, app_ctx):
        result = categories.get_products_for_category("electronics")

        assert result.total == 3
        assert categories.get_products_for_category("nope") is None

    def test_product_counts(self, app_ctx):
        counts = categories.get_product_counts_by_category()

        assert counts == {"cat_electronics": 3, "cat_books": 2, "cat_home_kitchen": 2, "cat_clothing": 1}

    def test_search_categories(self, app_ctx):
        result = categories.search_categories("kitchen")

        assert [c["id"] for c in result.items] == ["cat_home_kitchen"]

    def test_derived_when_collection_empty(self, fixtures_dir, app_ctx):
        """Without stored categories they come from product category names."""
        (fixtures_dir / "categories.json").unlink()

        derived = categories.derive_categories()

        assert categories.uses_derived_categories()
        assert [c["id"] for c in derived] == ["cat_electronics", "cat_books", "cat_home_&_kitchen", "cat_clothing"]
        electronics = derived[0]
        assert electronics["slug"] == "electronics"
        assert electronics["created_at"] == "2024-01-10T09:00:00.000Z"
        assert categories.get_category_by_slug("home-kitchen")["name"] == "Home & Kitchen"
