"""
Unit tests for the shared query engine.
"""
import pytest

from mockshop.storage.query import apply_paging, matches, run_query, sort_key, MISSING


DOCS = [
    {"id": "p1", "name": "Red Mug", "price": {"amount": 12.5}, "tags": ["kitchen", "gift"], "stock": 3},
    {"id": "p2", "name": "Blue Cap", "price": {"amount": 20}, "tags": ["apparel"], "stock": 0},
    {"id": "p3", "name": "Green Mug", "price": {"amount": 8}, "tags": [], "discontinued": True},
]


@pytest.mark.unit
class TestMatches:
    """Tests for matches()."""

    def test_empty_query_matches_everything(self):
        assert all(matches(doc, {}) for doc in DOCS)
        assert matches(DOCS[0], None)

    def test_equality_and_dotted_paths(self):
        assert matches(DOCS[0], {"id": "p1", "price.amount": 12.5})
        assert not matches(DOCS[0], {"id": "p1", "price.amount": 20})

    def test_list_field_matches_any_element(self):
        assert matches(DOCS[0], {"tags": "gift"})
        assert not matches(DOCS[1], {"tags": "gift"})

    def test_missing_field_does_not_match(self):
        assert not matches(DOCS[0], {"color": "red"})

    def test_bool_and_int_are_distinct(self):
        assert matches(DOCS[2], {"discontinued": True})
        assert not matches({"flag": 1}, {"flag": True})

    def test_comparisons(self):
        cheap = [d["id"] for d in DOCS if matches(d, {"price.amount": {"$gte": 8, "$lt": 20}})]
        assert cheap == ["p1", "p3"]

    def test_comparison_skips_mismatched_types(self):
        assert not matches({"price": "10"}, {"price": {"$gt": 5}})

    def test_in_nin_ne_exists(self):
        assert matches(DOCS[1], {"id": {"$in": ["p2", "p9"]}})
        assert matches(DOCS[1], {"id": {"$nin": ["p1"]}})
        assert matches(DOCS[1], {"id": {"$ne": "p1"}})
        assert matches(DOCS[2], {"discontinued": {"$exists": True}})
        assert matches(DOCS[0], {"discontinued": {"$exists": False}})

    def test_regex_with_options(self):
        assert matches(DOCS[0], {"name": {"$regex": "mug", "$options": "i"}})
        assert not matches(DOCS[0], {"name": {"$regex": "mug"}})

    def test_logical_operators(self):
        query = {"$or": [{"id": "p2"}, {"$and": [{"tags": "kitchen"}, {"stock": {"$gt": 0}}]}]}
        assert [d["id"] for d in DOCS if matches(d, query)] == ["p1", "p2"]

    def test_unknown_operator_raises(self):
        with pytest.raises(ValueError):
            matches(DOCS[0], {"id": {"$near": 1}})


@pytest.mark.unit
class TestRunQuery:
    """Tests for sorting, paging and projection."""

    def test_sort_ascending_and_descending(self):
        ascending = run_query(DOCS, None, {"sort": {"price.amount": 1}})
        descending = run_query(DOCS, None, {"sort": {"price.amount": -1}})

        assert [d["id"] for d in ascending] == ["p3", "p1", "p2"]
        assert [d["id"] for d in descending] == ["p2", "p1", "p3"]

    def test_compound_sort(self):
        docs = [{"id": 1, "a": 1, "b": 2}, {"id": 2, "a": 0, "b": 5}, {"id": 3, "a": 1, "b": 1}]

        result = run_query(docs, None, {"sort": {"a": -1, "b": 1}})

        assert [d["id"] for d in result] == [3, 1, 2]

    def test_missing_values_sort_first(self):
        result = run_query(DOCS, None, {"sort": {"stock": 1}})

        assert [d["id"] for d in result] == ["p3", "p2", "p1"]

    def test_sort_key_type_order(self):
        keys = [sort_key(v) for v in (MISSING, None, 5, "a", True, [1], {"a": 1})]
        assert keys == sorted(keys)

    def test_projection_include_and_exclude(self):
        included = run_query(DOCS, {"id": "p1"}, {"projection": {"id": 1, "name": 1}})
        excluded = run_query(DOCS, {"id": "p1"}, {"projection": {"tags": 0, "price": 0}})

        assert included == [{"id": "p1", "name": "Red Mug"}]
        assert excluded == [{"id": "p1", "name": "Red Mug", "stock": 3}]

    def test_results_are_independent_copies(self):
        result = run_query(DOCS, {"id": "p1"})
        result[0]["tags"].append("changed")

        assert DOCS[0]["tags"] == ["kitchen", "gift"]

    @pytest.mark.parametrize("skip,limit,expected", [
        (0, None, 3),
        (3, 2, 0),
        (10, 2, 0),
        (0, 0, 0),
        (1, 5, 2),
        (2, 1, 1),
    ])
    def test_paging_boundaries(self, skip, limit, expected):
        """skip past the end or limit 0 gives nothing; never more than limit."""
        assert len(apply_paging(list(DOCS), skip, limit)) == expected
